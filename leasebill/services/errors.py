"""Application error hierarchy.

Every error that maps onto an HTTP response derives from AppError and carries
a machine-readable code. Payment dispatch failures are not HTTP errors: the
billing run records them per charge instead of propagating them.
"""

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        code: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        details: Any = None,
    ):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        self.details = details
        super().__init__(message)


class UnauthorizedError(AppError):
    """Neither a scheduler credential nor an authenticated identity was presented."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED", status.HTTP_401_UNAUTHORIZED)


class ValidationError(AppError):
    """Request payload failed validation."""

    def __init__(self, message: str = "Invalid request payload.", details: Any = None):
        super().__init__(message, "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST, details)


class NotFoundError(AppError):
    """Requested resource does not exist in the caller's organization."""

    def __init__(self, message: str = "Not found."):
        super().__init__(message, "NOT_FOUND", status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """Resource already exists."""

    def __init__(self, message: str = "Resource already exists."):
        super().__init__(message, "CONFLICT", status.HTTP_409_CONFLICT)


class ConfigError(AppError):
    """Required configuration is missing."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)


class PaymentDispatchError(Exception):
    """Payment provider rejected or failed to create a payment attempt."""


def error_response(error: AppError) -> dict[str, Any]:
    """Create a standardized error response body."""
    body: dict[str, Any] = {"code": error.code, "message": error.message}
    if error.details is not None:
        body["details"] = error.details
    return {"error": body}


__all__ = [
    "AppError",
    "UnauthorizedError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ConfigError",
    "PaymentDispatchError",
    "error_response",
]
