from enum import Enum


class ConfigError(RuntimeError):
    """Raised when required configuration (e.g. the credential file) cannot be loaded."""


class SourceErrorKind(str, Enum):
    """Identifies which metric source failed."""

    HOSTNAME = "hostname"
    SYSTEM_VERSION = "system_version"
    KERNEL_VERSION = "kernel_version"
    UPTIME = "uptime"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    TEMPERATURE = "temperature"
    CONTAINER_CONNECTION = "container_connection"
    CONTAINER_LIST = "container_list"
    LOCAL_IP = "local_ip"
    PUBLIC_IP = "public_ip"
    SERVICE_MANAGER = "service_manager"


_MESSAGES = {
    SourceErrorKind.HOSTNAME: "Failed to retrieve hostname.",
    SourceErrorKind.SYSTEM_VERSION: "Failed to retrieve system version.",
    SourceErrorKind.KERNEL_VERSION: "Failed to retrieve kernel version.",
    SourceErrorKind.UPTIME: "Failed to retrieve uptime information.",
    SourceErrorKind.MEMORY: "Failed to retrieve memory information.",
    SourceErrorKind.DISK: "Failed to retrieve disk information.",
    SourceErrorKind.NETWORK: "Failed to retrieve network traffic information.",
    SourceErrorKind.TEMPERATURE: "Failed to read temperature sensors.",
    SourceErrorKind.CONTAINER_CONNECTION: "Failed to connect to Docker.",
    SourceErrorKind.CONTAINER_LIST: "Failed to list Docker containers.",
    SourceErrorKind.LOCAL_IP: "Failed to determine local IP address.",
    SourceErrorKind.PUBLIC_IP: "Failed to determine public IP address.",
    SourceErrorKind.SERVICE_MANAGER: "Failed to query the service manager.",
}


class SourceError(RuntimeError):
    """
    A single metric source could not deliver its value.

    `kind` tells the aggregator which fallback to apply; `detail` carries the
    underlying reason for the log.
    """

    def __init__(self, kind: SourceErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        message = _MESSAGES[kind]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
