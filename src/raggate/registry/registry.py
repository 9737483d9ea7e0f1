"""Concurrent registry of server connection profiles.

The registry provides:
- Validated insert-or-replace of profiles by name
- Lookup, removal and membership checks
- A snapshot listing with a constant "CONFIGURED" label per entry

Every operation runs under one lock, so operations linearize with each other
from threads and coroutines alike. No operation performs I/O or awaits while
holding the lock, and no lock is held across operations.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import cast

from raggate.foundation.errors import Err, Ok, ProfileValidationError, Result
from raggate.runtime.observability import get_logger

from .profiles import ServerProfile, TransportKind

log = get_logger(__name__)

STATUS_CONNECTED = "CONNECTED"
STATUS_FAILED = "FAILED"
STATUS_CONFIGURED = "CONFIGURED"
STATUS_NOT_CONFIGURED = "NOT_CONFIGURED"


@dataclass(frozen=True, slots=True)
class Confirmation:
    """Successful registration. ``status`` is a label; no connection is attempted."""

    name: str
    status: str = STATUS_CONNECTED
    message: str = "MCP server configured"


def validate_profile(profile: ServerProfile) -> Result[ServerProfile, ProfileValidationError]:
    """Check name, transport kind and that exactly the matching transport block is present."""
    name = profile.name
    if name is None or not name.strip():
        return Err(ProfileValidationError("server name must not be blank", server_name=name))
    match profile.transport_kind:
        case None:
            return Err(ProfileValidationError("transport kind is required", server_name=name))
        case TransportKind.STDIO if profile.stdio_params is None or not profile.stdio_params.command.strip():
            return Err(ProfileValidationError("STDIO transport requires a command", server_name=name))
        case TransportKind.STDIO if profile.sse_params is not None:
            return Err(ProfileValidationError("STDIO transport does not take an SSE config", server_name=name))
        case TransportKind.SSE if profile.sse_params is None or not profile.sse_params.url.strip():
            return Err(ProfileValidationError("SSE transport requires a url", server_name=name))
        case TransportKind.SSE if profile.stdio_params is not None:
            return Err(ProfileValidationError("SSE transport does not take a STDIO config", server_name=name))
    return Ok(profile)


class ProfileRegistry:
    """Named server profiles, safe for concurrent use.

    Example:
        >>> registry = ProfileRegistry()
        >>> registry.register(profile).unwrap().status
        'CONNECTED'
        >>> registry.list_all()
        {'svc1': 'CONFIGURED'}
        >>> registry.remove("svc1")
        True
    """

    __slots__ = ("_profiles", "_lock")

    def __init__(self) -> None:
        self._profiles: dict[str, ServerProfile] = {}
        self._lock = threading.Lock()

    def register(self, profile: ServerProfile) -> Result[Confirmation, ProfileValidationError]:
        """Validate and insert or wholesale-replace the named profile.

        Validation failures are returned, never raised.
        """
        log.info("configuring server", server=profile.name)
        result = validate_profile(profile).map(self._store)
        if result.is_err():
            log.warning("server configuration rejected", server=profile.name, reason=result.unwrap_err().message)
        return result

    def _store(self, profile: ServerProfile) -> Confirmation:
        name = cast(str, profile.name)
        with self._lock:
            replaced = name in self._profiles
            self._profiles[name] = profile
        log.info("server configured", server=name, transport=str(profile.transport_kind), replaced=replaced)
        return Confirmation(name=name)

    def get(self, name: str) -> ServerProfile | None:
        with self._lock:
            return self._profiles.get(name)

    def remove(self, name: str) -> bool:
        """Delete the named profile. Returns True if it existed."""
        with self._lock:
            removed = self._profiles.pop(name, None) is not None
        if removed:
            log.info("server removed", server=name)
        return removed

    def list_all(self) -> dict[str, str]:
        """Snapshot of every name mapped to "CONFIGURED" (no liveness check)."""
        with self._lock:
            return dict.fromkeys(self._profiles, STATUS_CONFIGURED)

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._profiles

    def count(self) -> int:
        with self._lock:
            return len(self._profiles)

    __contains__ = contains
    __len__ = count
