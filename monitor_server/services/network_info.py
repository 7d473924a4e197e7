import ipaddress
import logging
import socket

import httpx
import psutil

from monitor_server.models.errors import SourceError, SourceErrorKind

logger = logging.getLogger(__name__)


def get_local_ip() -> str:
    """Return the first non-loopback IPv4 address of this host."""
    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        raise SourceError(SourceErrorKind.LOCAL_IP, str(exc)) from exc

    for name, addresses in interfaces.items():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            if ipaddress.ip_address(address.address).is_loopback:
                continue
            logger.debug("Using %s of interface %s as local IP", address.address, name)
            return address.address

    raise SourceError(SourceErrorKind.LOCAL_IP, "no non-loopback IPv4 address found")


async def get_public_ip(url: str, timeout_seconds: float = 5.0) -> str:
    """Ask an external "what is my IP" service (plain text answer) for our public address."""
    try:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise SourceError(SourceErrorKind.PUBLIC_IP, f"{url}: {exc}") from exc

    public_ip = response.text.strip()
    try:
        ipaddress.ip_address(public_ip)
    except ValueError as exc:
        raise SourceError(
            SourceErrorKind.PUBLIC_IP, f"{url} returned no IP address"
        ) from exc
    return public_ip
