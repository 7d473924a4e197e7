from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ContainerStatus(BaseModel):
    """A single container as reported by the container runtime."""

    model_config = ConfigDict(frozen=True)

    image: str = Field(..., description="Image the container was created from")
    state: str = Field(..., description="Runtime state, e.g. running or exited")


class ServiceActivation(BaseModel):
    """Activation state of one configured systemd service."""

    model_config = ConfigDict(frozen=True)

    service: str = Field(..., description="Service name as configured, e.g. ssh")
    is_active: bool = Field(
        ...,
        description="True only if the service manager reports exactly 'active'",
    )


class ServiceStatus(BaseModel):
    """Response of the single-service endpoint."""

    service: str = Field(..., description="Requested service name")
    is_active: bool = Field(..., description="True if the service is active")
    state: str = Field(
        ...,
        description="Raw answer of the service manager, e.g. active, inactive, failed",
    )


class Snapshot(BaseModel):
    """
    Complete status report of the host, built once per request.

    Every field is always populated. Sources that failed are represented by
    their sentinel values ("Unknown", 0, "Unavailable", empty list).
    """

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(..., description="System hostname")
    system_version: str = Field(..., description="Pretty OS name from os-release")
    kernel_version: str = Field(..., description="Kernel release")
    uptime: str = Field(..., description="Uptime, e.g. '3 days, 4 hours, 12 minutes'")

    memory_used: int = Field(..., ge=0, description="Used RAM in bytes")
    memory_total: int = Field(..., ge=0, description="Total RAM in bytes")
    disk_available: int = Field(..., ge=0, description="Available disk space in bytes")
    disk_total: int = Field(..., ge=0, description="Total disk space in bytes")
    network_received: int = Field(..., ge=0, description="Bytes received on all interfaces")
    network_sent: int = Field(..., ge=0, description="Bytes sent on all interfaces")

    temperature: str = Field(..., description="Average thermal zone temperature or 'Unavailable'")
    containers: List[ContainerStatus] = Field(
        ...,
        description="All containers known to the runtime, in runtime order",
    )
    services: List[ServiceActivation] = Field(
        ...,
        description="Configured services in declaration order",
    )

    local_ip: str = Field(..., description="First non-loopback IPv4 address")
    public_ip: str = Field(..., description="Public IP address as seen from the internet")
    client_ip: str = Field(
        ...,
        description="X-Forwarded-For of the request (informational only)",
    )

    generated_at: datetime = Field(..., description="Time the snapshot was taken")
    current_year: int = Field(..., description="Year of generated_at, used in the footer")
