import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    # HTTP server
    server_address: str = Field(
        default="0.0.0.0",
        description="Address the HTTP server binds to",
    )
    server_port: int = Field(
        default=8550,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on",
    )

    # Credentials and service list
    htpasswd_path: str = Field(
        default="/etc/monitor_server/htpasswd",
        description="Path of the htpasswd-style credential file (username:hash per line)",
    )
    services_path: str = Field(
        default="/etc/monitor_server/services.toml",
        description="TOML file with a `services` list of systemd units to check",
    )

    # Logging
    log_level: str = Field(
        default="info",
        description="Log level name, e.g. debug, info, warning",
    )
    log_file: Optional[str] = Field(
        default="server.log",
        description="Log file path; None disables file logging",
    )

    # Collection
    disk_path: str = Field(
        default="/",
        description="Mount point whose usage is reported",
    )
    public_ip_url: str = Field(
        default="https://api.ipify.org",
        description="URL returning the public IP address as plain text",
    )
    source_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound in seconds for a single metric source",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()

        # MONITOR_LOG_FILE="" schaltet das Logfile ab
        raw_log_file = os.getenv("MONITOR_LOG_FILE")
        if raw_log_file is None:
            log_file = defaults.log_file
        else:
            log_file = raw_log_file.strip() or None

        return cls(
            server_address=os.getenv("MONITOR_SERVER_ADDRESS", defaults.server_address),
            server_port=int(os.getenv("MONITOR_SERVER_PORT", defaults.server_port)),
            htpasswd_path=os.getenv("MONITOR_HTPASSWD_PATH", defaults.htpasswd_path),
            services_path=os.getenv("MONITOR_SERVICES_PATH", defaults.services_path),
            log_level=os.getenv("MONITOR_LOG_LEVEL", defaults.log_level),
            log_file=log_file,
            disk_path=os.getenv("MONITOR_DISK_PATH", defaults.disk_path),
            public_ip_url=os.getenv("MONITOR_PUBLIC_IP_URL", defaults.public_ip_url),
            source_timeout=float(
                os.getenv("MONITOR_SOURCE_TIMEOUT", defaults.source_timeout)
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
