import logging
import platform
import socket
import time
from pathlib import Path
from typing import List, Tuple

import psutil

from monitor_server.models.errors import SourceError, SourceErrorKind

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
THERMAL_ROOT = Path("/sys/class/thermal")

TEMPERATURE_UNAVAILABLE = "Unavailable (VM environment)"


def get_hostname() -> str:
    try:
        hostname = socket.gethostname()
    except OSError as exc:
        raise SourceError(SourceErrorKind.HOSTNAME, str(exc)) from exc
    if not hostname:
        raise SourceError(SourceErrorKind.HOSTNAME, "empty hostname")
    return hostname


def get_system_version() -> str:
    """
    Return PRETTY_NAME from /etc/os-release, e.g. "Debian GNU/Linux 12 (bookworm)".
    """
    try:
        content = OS_RELEASE_PATH.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(SourceErrorKind.SYSTEM_VERSION, str(exc)) from exc

    for line in content.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key == "PRETTY_NAME":
            return value.strip().strip('"')

    raise SourceError(SourceErrorKind.SYSTEM_VERSION, "PRETTY_NAME missing")


def get_kernel_version() -> str:
    release = platform.release()
    if not release:
        raise SourceError(SourceErrorKind.KERNEL_VERSION, "platform.release() is empty")
    return release


def format_uptime(seconds: float) -> str:
    total_minutes = int(max(seconds, 0)) // 60
    days, rem_minutes = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem_minutes, 60)
    return f"{days} days, {hours} hours, {minutes} minutes"


def get_uptime() -> str:
    try:
        boot_time = psutil.boot_time()
    except (OSError, psutil.Error) as exc:
        raise SourceError(SourceErrorKind.UPTIME, str(exc)) from exc
    return format_uptime(time.time() - boot_time)


def get_memory_info() -> Tuple[int, int]:
    """Return (used, total) RAM in bytes; used is total minus available."""
    try:
        memory = psutil.virtual_memory()
    except (OSError, psutil.Error) as exc:
        raise SourceError(SourceErrorKind.MEMORY, str(exc)) from exc
    return max(memory.total - memory.available, 0), memory.total


def get_disk_info(path: str = "/") -> Tuple[int, int]:
    """Return (available, total) bytes of the filesystem mounted at `path`."""
    try:
        usage = psutil.disk_usage(path)
    except (OSError, psutil.Error) as exc:
        raise SourceError(SourceErrorKind.DISK, f"{path}: {exc}") from exc
    return usage.free, usage.total


def get_network_traffic() -> Tuple[int, int]:
    """Return (received, sent) bytes summed over all interfaces."""
    try:
        counters = psutil.net_io_counters()
    except (OSError, psutil.Error) as exc:
        raise SourceError(SourceErrorKind.NETWORK, str(exc)) from exc
    # psutil liefert None, wenn es keine Interfaces findet
    if counters is None:
        raise SourceError(SourceErrorKind.NETWORK, "no network interfaces found")
    return counters.bytes_recv, counters.bytes_sent


def _read_thermal_zones(root: Path) -> List[float]:
    readings: List[float] = []
    for entry in sorted(root.iterdir()):
        try:
            raw = (entry / "temp").read_text(encoding="utf-8").strip()
            readings.append(int(raw) / 1000.0)
        except (OSError, ValueError):
            # cooling_device* and friends have no temp file
            continue
    return readings


def get_temperature() -> str:
    """
    Average all thermal zone readings under /sys/class/thermal.

    Virtual machines usually have no thermal zones at all. That is an expected
    condition, so a descriptive placeholder is returned instead of an error.
    """
    if not THERMAL_ROOT.is_dir():
        logger.warning(
            "Temperature sensors directory not found. This may be a VM environment."
        )
        return TEMPERATURE_UNAVAILABLE

    try:
        readings = _read_thermal_zones(THERMAL_ROOT)
    except OSError as exc:
        raise SourceError(SourceErrorKind.TEMPERATURE, str(exc)) from exc

    if not readings:
        logger.warning("No temperature data found in %s", THERMAL_ROOT)
        return TEMPERATURE_UNAVAILABLE

    average = sum(readings) / len(readings)
    return f"{average:.2f} °C"
