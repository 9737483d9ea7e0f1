"""Observability: structured logging."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_logging,
    get_logger,
)

__all__ = [
    "BoundLogger", "ConsoleRenderer", "JsonRenderer", "LogEntry", "LogRenderer",
    "NoOpRenderer", "configure_logging", "get_logger",
]
