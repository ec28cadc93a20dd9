"""Shared infrastructure for booking_core."""

from .logging import LogFormat, LogLevel, get_logger, setup_logging

__all__ = [
    "LogFormat",
    "LogLevel",
    "get_logger",
    "setup_logging",
]
