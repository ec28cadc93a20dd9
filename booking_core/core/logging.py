"""
Standardized Logging Configuration

Structured logging for the availability engine. Library modules log through
``structlog.get_logger(__name__)`` with snake_case event names and keyword
context; the host application calls ``setup_logging`` once at startup.
JSON output for production, human-readable output for development.
"""

import logging
import sys
from enum import Enum
from typing import List, Optional

import structlog

from booking_core.config import get_settings


# =============================================================================
# Configuration
# =============================================================================


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    PRETTY = "pretty"


def _processors(format: str) -> List:
    renderer = (
        structlog.processors.JSONRenderer()
        if format == LogFormat.JSON.value
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: Optional[str] = None,
    format: Optional[str] = None,
    service_name: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Level and format default to ``BOOKING_LOG_LEVEL`` and ``BOOKING_LOG_FORMAT``
    from settings. The settings environment is bound to every entry.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json, pretty)
        service_name: Bound to every entry when given

    Raises:
        ValueError: If the level or format is unknown
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if format is None:
        format = settings.log_format

    level = LogLevel(str(getattr(level, "value", level)).upper()).value
    format = LogFormat(str(getattr(format, "value", format)).lower()).value

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level))
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    structlog.reset_defaults()
    structlog.configure(
        processors=_processors(format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(environment=settings.environment)
    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)

    get_logger(__name__).info("logging_configured", level=level, format=format)


def get_logger(name: str):
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name)


__all__ = [
    "LogLevel",
    "LogFormat",
    "setup_logging",
    "get_logger",
]
