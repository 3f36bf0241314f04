"""Observability module for logging."""

from smartsheet_core.observability.logging import configure_logging
from smartsheet_core.observability.sink import (
    LOG_LEVELS,
    STDLIB_LEVELS,
    LogFilter,
    LogSink,
    StructlogSink,
)


__all__ = [
    "LOG_LEVELS",
    "STDLIB_LEVELS",
    "LogFilter",
    "LogSink",
    "StructlogSink",
    "configure_logging",
]
