"""Structured logging for the gateway.

Context-aware logging with key=value pairs bound to a logger:
- Human-readable console output for development
- JSON Lines (orjson) for production log shipping

Quick Start:
    >>> from raggate.runtime.observability import configure_logging, get_logger
    >>>
    >>> configure_logging(format="text", level="DEBUG")  # once at startup
    >>>
    >>> log = get_logger("raggate.registry")
    >>> log.info("profile registered", server="svc1", transport="SSE")
    12:30:45.120 [info] profile registered logger=raggate.registry server=svc1 transport=SSE

    >>> log = log.bind(server="svc1")
    >>> log.warning("validation failed", reason="missing url")
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TextIO, runtime_checkable

import orjson

LogValue = str | int | float | bool | None | list[object] | dict[str, object]
LogDict = dict[str, LogValue]


@dataclass(slots=True)
class LogEntry:
    """A single rendered log record."""

    timestamp: float
    level: str
    event: str
    context: LogDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        parts = [entry.ts_human] if self.show_timestamp else []
        parts += [f"[{entry.level}]", entry.event]
        parts += [f"{k}={_format_value(v)}" for k, v in sorted(entry.context.items()) if k != "exc_info"]
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(entry.context["exc_info"], file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        payload = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS, default=str).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for tests."""

    def render(self, entry: LogEntry) -> None:
        pass


def _format_value(v: LogValue) -> str:
    if isinstance(v, str):
        return repr(v) if (" " in v or not v) else v
    return str(v)


# ─────────────────────────────────────────────────────────────────────────────
# Loggers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _LogState:
    renderer: LogRenderer = field(default_factory=ConsoleRenderer)
    level: int = logging.INFO


_state = _LogState()


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying bound key=value context. ``bind`` returns a new logger."""

    context: LogDict = field(default_factory=dict)

    def bind(self, **kw: LogValue) -> BoundLogger:
        return BoundLogger(context={**self.context, **kw})

    def _log(self, level: int, event: str, **kw: LogValue) -> None:
        if level < _state.level:
            return
        merged = {**self.context, **kw}
        _state.renderer.render(LogEntry(time.time(), logging.getLevelName(level).lower(), event, merged))

    def debug(self, event: str, **kw: LogValue) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: LogValue) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: LogValue) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: LogValue) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: LogValue) -> None:
        """Log at error level with the current traceback."""
        import traceback
        self._log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)


def configure_logging(
    format: str = "text",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
) -> LogRenderer:
    """Configure process-wide logging. Format: "text", "json" or "none".

    Also aligns the stdlib root level so uvicorn and httpx follow the same threshold.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    match format:
        case "text" | "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'text', 'json', or 'none'")
    _state.renderer, _state.level = renderer, numeric
    logging.basicConfig(level=numeric, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    return renderer


def get_logger(name: str | None = None, **initial_context: LogValue) -> BoundLogger:
    """Get a logger; ``name`` is bound as ``logger``."""
    return BoundLogger(context={**({"logger": name} if name else {}), **initial_context})
