"""Configuration management using pydantic-settings."""

from .settings import (
    GatewaySettings,
    LoggingSettings,
    RagSettings,
    ServerSettings,
    StreamSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "GatewaySettings",
    "LoggingSettings",
    "RagSettings",
    "ServerSettings",
    "StreamSettings",
    "clear_settings_cache",
    "get_settings",
]
