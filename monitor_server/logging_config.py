import logging
import sys
from typing import List, Optional

LOG_FORMAT = "[%(asctime)s][%(name)s][%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(name: str) -> int:
    """Map a level name such as "debug" to its logging constant, INFO if unknown."""
    level = logging.getLevelName(name.strip().upper())
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging(level: str = "info", log_file: Optional[str] = None) -> None:
    """
    Send log records to stdout and, if configured, to a log file.

    Calling this again replaces the previously installed handlers, so the
    application factory can be invoked more than once (tests do that).
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = []
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=resolve_log_level(level), handlers=handlers, force=True)
    logging.getLogger(__name__).info("Logging initialized successfully")
