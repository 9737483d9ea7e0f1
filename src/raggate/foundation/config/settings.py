"""Environment-based configuration using pydantic-settings.

Settings are read once when the gateway is built; the core never reloads
them while running.

Example:
    >>> from raggate.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.rag.base_url
    'http://localhost:8080'
    >>> settings.stream.token_delay
    0.1

    # Or with environment variables:
    # RAGGATE_RAG_BASE_URL=http://rag.internal:9000
    # RAGGATE_RAG_TIMEOUT=10
    # RAGGATE_STREAM_TOKEN_DELAY=0
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveFloat, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RagSettings(BaseSettings):
    """Where the RAG engine lives and how long to wait for it."""

    model_config = SettingsConfigDict(
        env_prefix="RAGGATE_RAG_",
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8080", description="RAG engine base URL")
    timeout: PositiveFloat = Field(default=30.0, description="Per-call timeout in seconds")

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class StreamSettings(BaseSettings):
    """Pacing of streamed chat responses."""

    model_config = SettingsConfigDict(
        env_prefix="RAGGATE_STREAM_",
        extra="ignore",
    )

    token_delay: NonNegativeFloat = Field(default=0.1, description="Delay between word tokens")
    frame_delay: NonNegativeFloat = Field(default=0.05, description="Delay before every framed chunk")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RAGGATE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class ServerSettings(BaseSettings):
    """HTTP listener for the gateway endpoints."""

    model_config = SettingsConfigDict(
        env_prefix="RAGGATE_SERVER_",
        extra="ignore",
    )

    name: str = "raggate"
    host: str = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)] = 8000


class GatewaySettings(BaseSettings):
    """Root settings for the gateway.

    Loads configuration from environment variables with RAGGATE_ prefix
    and from a ``.env`` file in the working directory.

    Example environment variables:
        RAGGATE_DEBUG=true
        RAGGATE_RAG_BASE_URL=http://localhost:8080
        RAGGATE_RAG_TIMEOUT=30
        RAGGATE_LOG_LEVEL=DEBUG
        RAGGATE_SERVER_PORT=9000
    """

    model_config = SettingsConfigDict(
        env_prefix="RAGGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production"] = "development"

    rag: RagSettings = Field(default_factory=RagSettings)
    stream: StreamSettings = Field(default_factory=StreamSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Get the process settings (cached)."""
    return GatewaySettings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
