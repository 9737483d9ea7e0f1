"""Unified error handling for raggate.

- ErrorCode: failure codes shared by registry, invoker and streaming
- GatewayError/ProfileValidationError/ConfigurationError: exception types
- Result/Ok/Err: returned failures for validation and backend calls
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    GatewayError,
    ProfileValidationError,
    classify_exception,
    describe_exception,
)
from .result import Err, Ok, Result

__all__ = [
    # Errors
    "ErrorCode", "GatewayError", "ProfileValidationError", "ConfigurationError",
    "classify_exception", "describe_exception",
    # Result
    "Result", "Ok", "Err",
]
