"""Foundation: errors, results and configuration shared by every layer."""

from .config import GatewaySettings, get_settings
from .errors import (
    ConfigurationError,
    Err,
    ErrorCode,
    GatewayError,
    Ok,
    ProfileValidationError,
    Result,
)

__all__ = [
    "GatewaySettings", "get_settings",
    "ConfigurationError", "Err", "ErrorCode", "GatewayError", "Ok",
    "ProfileValidationError", "Result",
]
