"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from smartsheet_core.observability.sink import STDLIB_LEVELS


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog output for the client.

    Called by ``HttpRequestor.from_settings`` when ``SMARTSHEET_LOG_FORMAT``
    is set; applications that configure structlog themselves can skip it.

    Args:
        level: Logging level, as a number or a client level name such as
            "warn" or "silly".
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    if isinstance(level, str):
        level = STDLIB_LEVELS[level.lower()]

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )
