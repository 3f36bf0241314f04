"""Leveled log sink consumed by the request logger.

The request logger writes to any object satisfying ``LogSink``. The default
implementation, ``StructlogSink``, filters by level, runs the registered
line filters, and emits the result through structlog.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import structlog


# Lower is more severe; a sink emits every level at or below its threshold
LOG_LEVELS: dict[str, int] = {
    "error": 0,
    "warn": 1,
    "info": 2,
    "verbose": 3,
    "debug": 4,
    "silly": 5,
}

# Client level name -> stdlib level used when emitting through structlog
STDLIB_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "silly": logging.DEBUG,
}

# (level, message, meta) -> rewritten message
LogFilter = Callable[[str, str, dict[str, Any]], str]


@runtime_checkable
class LogSink(Protocol):
    """Protocol for leveled loggers with printf-style methods."""

    filters: list[LogFilter]

    def log(self, level: str, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...

    def warn(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def verbose(self, msg: str, *args: Any) -> None: ...

    def debug(self, msg: str, *args: Any) -> None: ...

    def silly(self, msg: str, *args: Any) -> None: ...


class StructlogSink:
    """LogSink backed by a structlog bound logger.

    Attributes:
        level: Most verbose level emitted.
        filters: Line filters applied in registration order.
    """

    def __init__(
        self,
        level: str = "info",
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            level: Most verbose level emitted (one of LOG_LEVELS).
            logger: structlog logger to emit through.

        Raises:
            ValueError: If level is not a known level name.
        """
        if level not in LOG_LEVELS:
            msg = f"Unknown log level {level!r}; expected one of {list(LOG_LEVELS)}"
            raise ValueError(msg)
        self.level = level
        self.filters: list[LogFilter] = []
        self._log = logger or structlog.get_logger().bind(component="http")

    def is_enabled(self, level: str) -> bool:
        """Check whether a level passes the threshold."""
        return LOG_LEVELS[level] <= LOG_LEVELS[self.level]

    def log(self, level: str, msg: str, *args: Any) -> None:
        if not self.is_enabled(level):
            return
        line = msg % args if args else msg
        for log_filter in self.filters:
            line = log_filter(level, line, {})
        self._log.log(STDLIB_LEVELS[level], line)

    def error(self, msg: str, *args: Any) -> None:
        self.log("error", msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self.log("warn", msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self.log("info", msg, *args)

    def verbose(self, msg: str, *args: Any) -> None:
        self.log("verbose", msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self.log("debug", msg, *args)

    def silly(self, msg: str, *args: Any) -> None:
        self.log("silly", msg, *args)
