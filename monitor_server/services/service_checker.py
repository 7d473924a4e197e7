import asyncio
import logging
import subprocess
import tomllib
from pathlib import Path
from typing import Iterable, List

from monitor_server.models.errors import SourceError, SourceErrorKind
from monitor_server.models.status import ServiceActivation

logger = logging.getLogger(__name__)

_ACTIVE = "active"


def load_service_names(path: str) -> List[str]:
    """
    Read the ordered `services` list from a TOML file such as

        services = ["ssh", "cron", "nginx"]

    A missing or unparsable file is not fatal: the status page then simply
    shows no services. Entries that are not non-empty strings are dropped.
    """
    try:
        with Path(path).open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as exc:
        logger.warning("Failed to read configuration file at %s: %s", path, exc)
        return []
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Failed to parse TOML configuration file %s: %s", path, exc)
        return []

    raw_services = data.get("services", [])
    if not isinstance(raw_services, list):
        logger.warning("'services' in %s is not a list, ignoring it", path)
        return []

    services: List[str] = []
    for item in raw_services:
        if isinstance(item, str) and item.strip():
            services.append(item.strip())
        else:
            logger.warning("Ignoring invalid service entry %r in %s", item, path)
    return services


def query_service_state(service: str, timeout_seconds: float = 5.0) -> str:
    """
    Return the trimmed answer of `systemctl is-active <service>`.

    systemctl exits non-zero for every state except "active", so the return
    code is not checked; only a failure to run systemctl at all raises.
    """
    try:
        result = subprocess.run(
            ["systemctl", "is-active", service],
            check=False,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise SourceError(
            SourceErrorKind.SERVICE_MANAGER, "systemctl binary not found on host system"
        ) from exc
    except UnicodeDecodeError as exc:
        raise SourceError(
            SourceErrorKind.SERVICE_MANAGER, f"undecodable systemctl output: {exc}"
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SourceError(
            SourceErrorKind.SERVICE_MANAGER,
            f"systemctl is-active {service} timed out after {timeout_seconds}s",
        ) from exc
    except OSError as exc:
        raise SourceError(SourceErrorKind.SERVICE_MANAGER, str(exc)) from exc

    return result.stdout.strip()


def is_service_active(service: str, timeout_seconds: float = 5.0) -> bool:
    try:
        state = query_service_state(service, timeout_seconds)
    except SourceError as exc:
        logger.warning("Failed to check status of service %s: %s", service, exc)
        return False
    return state == _ACTIVE


def _unique(services: Iterable[str]) -> List[str]:
    # dict keeps insertion order, so the first occurrence wins
    return list(dict.fromkeys(services))


async def check_services_async(
    services: Iterable[str], timeout_seconds: float = 5.0
) -> List[ServiceActivation]:
    """
    Check every configured service once, in configured order.

    Duplicate names keep their first occurrence; all systemctl calls run
    concurrently.
    """
    names = _unique(services)
    states = await asyncio.gather(
        *(asyncio.to_thread(is_service_active, name, timeout_seconds) for name in names)
    )
    return [
        ServiceActivation(service=name, is_active=active)
        for name, active in zip(names, states)
    ]
