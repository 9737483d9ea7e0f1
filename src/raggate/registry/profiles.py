"""Server connection profiles.

A profile names one external MCP-style server and says how to reach it:
either by spawning a process and talking over stdio, or by connecting to an
SSE endpoint. The JSON surface accepts the camelCase field names used by
existing clients (``serverName``, ``transportType``, ``sseConfig``...) as
well as the snake_case names below.

Constructing a profile checks field shapes only. Whether the transport block
matches the transport kind is checked by ``ProfileRegistry.register``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from raggate.foundation.errors import ProfileValidationError

DEFAULT_SSE_TIMEOUT = 30


class TransportKind(StrEnum):
    """How a profile connects to its server."""
    STDIO = "STDIO"
    SSE = "SSE"


def _not_blank(v: str, what: str) -> str:
    if not v.strip():
        raise ValueError(f"{what} must not be blank")
    return v.strip()


class StdioParams(BaseModel):
    """Process invocation: command, ordered args, environment."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("command")
    @classmethod
    def _command_not_blank(cls, v: str) -> str:
        return _not_blank(v, "command")

    @field_validator("args", mode="before")
    @classmethod
    def _none_args(cls, v: object) -> object:
        return [] if v is None else v

    @field_validator("env", mode="before")
    @classmethod
    def _none_env(cls, v: object) -> object:
        return {} if v is None else v


class SseParams(BaseModel):
    """SSE endpoint: URL, connect timeout in seconds, extra request headers."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    url: str
    timeout_seconds: PositiveInt = Field(
        default=DEFAULT_SSE_TIMEOUT,
        validation_alias=AliasChoices("timeout_seconds", "timeoutSeconds"),
        serialization_alias="timeoutSeconds",
    )
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, v: str) -> str:
        return _not_blank(v, "url")

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _none_timeout(cls, v: object) -> object:
        return DEFAULT_SSE_TIMEOUT if v is None else v

    @field_validator("headers", mode="before")
    @classmethod
    def _none_headers(cls, v: object) -> object:
        return {} if v is None else v


class ServerProfile(BaseModel):
    """Named description of how to reach one external tool server.

    Attributes:
        name: Registry key
        transport_kind: STDIO or SSE; None only for rejected input
        stdio_params: Present for STDIO profiles
        sse_params: Present for SSE profiles

    Example:
        >>> ServerProfile(
        ...     name="svc1",
        ...     transport_kind=TransportKind.SSE,
        ...     sse_params=SseParams(url="http://x", timeout_seconds=5),
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: Annotated[str | None, Field(
        default=None,
        validation_alias=AliasChoices("name", "serverName", "server_name"),
        serialization_alias="serverName",
    )]
    transport_kind: Annotated[TransportKind | None, Field(
        default=None,
        validation_alias=AliasChoices("transport_kind", "transportKind", "transportType", "transport_type"),
        serialization_alias="transportType",
    )]
    stdio_params: Annotated[StdioParams | None, Field(
        default=None,
        validation_alias=AliasChoices("stdio_params", "stdioParams", "stdioConfig", "stdio_config"),
        serialization_alias="stdioConfig",
    )]
    sse_params: Annotated[SseParams | None, Field(
        default=None,
        validation_alias=AliasChoices("sse_params", "sseParams", "sseConfig", "sse_config"),
        serialization_alias="sseConfig",
    )]

    @field_validator("transport_kind", mode="before")
    @classmethod
    def _upper_kind(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> ServerProfile:
        """Build a profile from a request body.

        Raises:
            ProfileValidationError: body is not a mapping or fields have the wrong shape
        """
        if not isinstance(payload, dict):
            raise ProfileValidationError("profile must be a JSON object")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            name = payload.get("serverName", payload.get("name"))
            raise ProfileValidationError(
                _format_validation_error(e),
                server_name=name if isinstance(name, str) else None,
            ) from e

    def to_payload(self) -> dict[str, object]:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


def _format_validation_error(e: ValidationError) -> str:
    """Compact 'field: message; field: message' summary."""
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "profile"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
