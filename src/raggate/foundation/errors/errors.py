"""Error codes and exception types for the gateway.

Two families of failure leave this package:
- ProfileValidationError: returned inside ``Err`` by the profile registry.
- ConfigurationError: raised by the RAG invoker for a broken deployment.

Backend failures (timeouts, refused connections, non-2xx replies) never
become exceptions here; see ``raggate.tools.rag.Fallback``.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

import httpx


class ErrorCode(StrEnum):
    """Machine-readable failure codes."""
    INVALID_PROFILE = "INVALID_PROFILE"
    CONFIGURATION = "CONFIGURATION"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_STATUS = "HTTP_STATUS"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    STREAM_FAULT = "STREAM_FAULT"
    NOT_FOUND = "NOT_FOUND"


class GatewayError(Exception):
    """Base for gateway errors. Carries an ErrorCode."""

    code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class ProfileValidationError(GatewayError):
    """A server profile is missing its name, transport kind or transport parameters."""

    code = ErrorCode.INVALID_PROFILE

    def __init__(self, message: str, *, server_name: str | None = None) -> None:
        super().__init__(message)
        self.server_name = server_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProfileValidationError):
            return NotImplemented
        return (self.message, self.server_name) == (other.message, other.server_name)

    __hash__ = lambda self: hash((self.message, self.server_name))  # noqa: E731


class ConfigurationError(GatewayError):
    """Deployment defect, e.g. a malformed RAG base URL. Always raised."""

    code = ErrorCode.CONFIGURATION


# Ordered most specific first; httpx.TimeoutException is a TransportError.
_HTTPX_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (httpx.TimeoutException, ErrorCode.TIMEOUT),
    (TimeoutError, ErrorCode.TIMEOUT),
    (httpx.HTTPStatusError, ErrorCode.HTTP_STATUS),
    (httpx.TransportError, ErrorCode.NETWORK_ERROR),
)


@lru_cache(maxsize=64)
def _classify_type(exc_type: type[BaseException]) -> ErrorCode:
    for klass, code in _HTTPX_CODES:
        if issubclass(exc_type, klass):
            return code
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map an exception raised while talking to the backend to an ErrorCode."""
    if isinstance(exc, GatewayError):
        return exc.code
    return _classify_type(type(exc))


def describe_exception(exc: BaseException) -> str:
    """One-line cause for logs and fallbacks: ``CODE: Type: message``."""
    detail = str(exc) or "no detail"
    return f"{classify_exception(exc).value}: {type(exc).__name__}: {detail}"
