"""
Shared error handling for the Launchpad services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class LaunchpadException(Exception):
    """Base exception for Launchpad services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(LaunchpadException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ValidationError(LaunchpadException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None,
                 code: str = "VALIDATION_ERROR"):
        super().__init__(code, message, details)


class ExternalServiceError(LaunchpadException):
    """An upstream fetch (RPC, public HTTP API) failed."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class RateLimitError(LaunchpadException):
    """Short-window rate limit exceeded; the client may retry shortly."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded, try again later", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)


class QuotaExhaustedError(LaunchpadException):
    """Daily quota exhausted; the client should retry after the UTC day rolls over."""

    status_code = 429

    def __init__(self, message: str = "Daily quota exhausted, try again tomorrow", details: Optional[Dict[str, Any]] = None):
        super().__init__("QUOTA_EXHAUSTED", message, details)


class CanaryError(LaunchpadException):
    """Mainnet canary restriction.

    ``code`` is one of ``MainnetDisabled``, ``WalletNotAllowListed`` or
    ``CapExceeded``; the latter carries the offending ``side``.
    """

    status_code = 403

    def __init__(self, code: str, message: str, side: Optional[str] = None):
        self.side = side
        details = {"side": side} if side else {}
        super().__init__(code, message, details)
