"""
Log sinks for cache stores.

Stores never call print or logging directly for their operation trace;
they hand variadic arguments to an injected sink instead.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class CacheLogger(Protocol):
    """Anything with a variadic log method can receive cache log lines."""

    def log(self, *args: Any) -> None:
        ...


def format_args(*args: Any) -> str:
    """Join log arguments the way a console would print them."""
    return " ".join(str(arg) for arg in args)


class ConsoleLogger:
    """Default sink: prints each line to stdout with an ISO timestamp prefix."""

    def log(self, *args: Any) -> None:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        print(f"[{timestamp}]", *args)


class LoggingLogger:
    """
    Sink that forwards lines into the standard logging tree.

    Useful when the host application already configures handlers and
    formatting, so cache debug output lands alongside everything else.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG,
    ):
        self._logger = logger or logging.getLogger("querycache")
        self._level = level

    def log(self, *args: Any) -> None:
        if self._logger.isEnabledFor(self._level):
            self._logger.log(self._level, format_args(*args))
