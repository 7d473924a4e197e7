import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Tuple, TypeVar

from monitor_server.config import Settings
from monitor_server.models.errors import SourceError
from monitor_server.models.status import ContainerStatus, ServiceActivation, Snapshot
from monitor_server.services import docker_monitor, hardware, network_info, service_checker

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fallback values used when a source fails or times out
UNKNOWN = "Unknown"
UNKNOWN_SYSTEM = "Unknown System"
UNKNOWN_KERNEL = "Unknown Kernel"
TEMPERATURE_FALLBACK = "Unavailable"
ZERO_PAIR: Tuple[int, int] = (0, 0)


async def _guarded(source: str, call: Awaitable[T], fallback: T, timeout: float) -> T:
    """
    Await a single source and replace a failure by its fallback.

    Only SourceError and timeouts are handled here. Anything else is a bug in
    an adapter and must not be hidden behind a sentinel.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except SourceError as exc:
        logger.warning("Source %s unavailable [%s]: %s", source, exc.kind.value, exc)
    except asyncio.TimeoutError:
        logger.warning("Source %s timed out after %.1fs", source, timeout)
    return fallback


def _thread(func: Callable[..., T], *args: Any) -> Awaitable[T]:
    return asyncio.to_thread(func, *args)


def format_size(num_bytes: int) -> str:
    """Human readable byte count with binary units, e.g. 1536 -> '1.50 KB'."""
    if num_bytes >= 1 << 30:
        return f"{num_bytes / (1 << 30):.2f} GB"
    if num_bytes >= 1 << 20:
        return f"{num_bytes / (1 << 20):.2f} MB"
    if num_bytes >= 1 << 10:
        return f"{num_bytes / (1 << 10):.2f} KB"
    return f"{num_bytes} B"


async def collect_snapshot(settings: Settings, client_ip: str = UNKNOWN) -> Snapshot:
    """
    Query every metric source concurrently and assemble one Snapshot.

    Blocking sources (psutil, /proc, /sys, docker and systemctl calls) run in
    worker threads, the public IP lookup runs on the event loop. The snapshot
    is only built after all sources have answered, failed or timed out, so a
    broken source costs at most `settings.source_timeout` seconds and shows up
    as its sentinel value.
    """
    timeout = settings.source_timeout
    service_names = await asyncio.to_thread(
        service_checker.load_service_names, settings.services_path
    )
    services_fallback: List[ServiceActivation] = [
        ServiceActivation(service=name, is_active=False)
        for name in dict.fromkeys(service_names)
    ]
    containers_fallback: List[ContainerStatus] = []

    (
        hostname,
        system_version,
        kernel_version,
        uptime,
        memory,
        disk,
        network,
        temperature,
        containers,
        services,
        local_ip,
        public_ip,
    ) = await asyncio.gather(
        _guarded("hostname", _thread(hardware.get_hostname), UNKNOWN, timeout),
        _guarded(
            "system_version", _thread(hardware.get_system_version), UNKNOWN_SYSTEM, timeout
        ),
        _guarded(
            "kernel_version", _thread(hardware.get_kernel_version), UNKNOWN_KERNEL, timeout
        ),
        _guarded("uptime", _thread(hardware.get_uptime), UNKNOWN, timeout),
        _guarded("memory", _thread(hardware.get_memory_info), ZERO_PAIR, timeout),
        _guarded(
            "disk", _thread(hardware.get_disk_info, settings.disk_path), ZERO_PAIR, timeout
        ),
        _guarded("network", _thread(hardware.get_network_traffic), ZERO_PAIR, timeout),
        _guarded(
            "temperature", _thread(hardware.get_temperature), TEMPERATURE_FALLBACK, timeout
        ),
        _guarded(
            "containers",
            _thread(docker_monitor.get_containers, timeout),
            containers_fallback,
            timeout,
        ),
        _guarded(
            "services",
            service_checker.check_services_async(service_names, timeout),
            services_fallback,
            timeout,
        ),
        _guarded("local_ip", _thread(network_info.get_local_ip), UNKNOWN, timeout),
        _guarded(
            "public_ip",
            network_info.get_public_ip(settings.public_ip_url, timeout),
            UNKNOWN,
            timeout,
        ),
    )

    logger.info("Retrieved hostname: %s", hostname)
    logger.info("Kernel version: %s, system version: %s", kernel_version, system_version)
    logger.info("Uptime: %s", uptime)
    logger.debug("Memory info: used: %d, total: %d", *memory)
    logger.debug("Disk info: available: %d, total: %d", *disk)
    logger.debug("Network traffic: received: %d, sent: %d", *network)
    logger.debug("Temperature: %s", temperature)
    logger.info("Docker containers retrieved: %d", len(containers))
    for activation in services:
        if not activation.is_active:
            logger.warning("Service %s is inactive", activation.service)
    logger.info("Local IP: %s, Public IP: %s", local_ip, public_ip)

    generated_at = datetime.now().astimezone()
    return Snapshot(
        hostname=hostname,
        system_version=system_version,
        kernel_version=kernel_version,
        uptime=uptime,
        memory_used=memory[0],
        memory_total=memory[1],
        disk_available=disk[0],
        disk_total=disk[1],
        network_received=network[0],
        network_sent=network[1],
        temperature=temperature,
        containers=containers,
        services=services,
        local_ip=local_ip,
        public_ip=public_ip,
        client_ip=client_ip,
        generated_at=generated_at,
        current_year=generated_at.year,
    )
