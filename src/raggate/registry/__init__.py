"""Server profile registry."""

from .profiles import DEFAULT_SSE_TIMEOUT, ServerProfile, SseParams, StdioParams, TransportKind
from .registry import (
    STATUS_CONFIGURED,
    STATUS_CONNECTED,
    STATUS_FAILED,
    STATUS_NOT_CONFIGURED,
    Confirmation,
    ProfileRegistry,
    validate_profile,
)

__all__ = [
    "DEFAULT_SSE_TIMEOUT", "ServerProfile", "SseParams", "StdioParams", "TransportKind",
    "STATUS_CONFIGURED", "STATUS_CONNECTED", "STATUS_FAILED", "STATUS_NOT_CONFIGURED",
    "Confirmation", "ProfileRegistry", "validate_profile",
]
