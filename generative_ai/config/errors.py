"""
Error Taxonomy - Consistent error kinds for every client operation.

Usage:
    from generative_ai.config.errors import ErrorCode, RateLimitedError

    try:
        response = await client.generate_content(request)
    except RateLimitedError as e:
        print(e.status_code, e.message)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error kinds."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    DESERIALIZATION_FAILED = "DESERIALIZATION_FAILED"


class GenerativeAIError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (for logs or API relays)."""
        return {
            "code": self.code.value,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }


class ConfigurationError(GenerativeAIError):
    """Malformed endpoint, settings or registry. Raised before any network call."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, None, details)


class AuthenticationError(GenerativeAIError):
    """Credentials rejected (401/403) or unobtainable."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.AUTHENTICATION_FAILED, message, status_code, details)


class InvalidArgumentError(GenerativeAIError):
    """Request rejected as malformed (400) or a local precondition failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, status_code, details)


class NotFoundError(InvalidArgumentError):
    """Requested model or resource does not exist (404)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 404,
        details: dict[str, Any] | None = None,
    ) -> None:
        GenerativeAIError.__init__(
            self, ErrorCode.NOT_FOUND, message, status_code, details
        )


class RateLimitedError(GenerativeAIError):
    """Quota or rate limit exceeded (429)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.RATE_LIMITED, message, status_code, details)


class ServerError(GenerativeAIError):
    """Service-side failure (5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.SERVER_ERROR, message, status_code, details)


class TransportError(GenerativeAIError):
    """Connection, DNS or timeout failure. No response body was received."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.TRANSPORT_FAILURE, message, None, details)


class DeserializationError(GenerativeAIError):
    """Response body does not match the expected shape."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.DESERIALIZATION_FAILED, message, status_code, details)
