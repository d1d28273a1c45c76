"""
Configuration - Client settings and error taxonomy.
"""

from .errors import (
    AuthenticationError,
    ConfigurationError,
    DeserializationError,
    ErrorCode,
    GenerativeAIError,
    InvalidArgumentError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "GenerativeAIError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidArgumentError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "TransportError",
    "DeserializationError",
]
