"""
Business error taxonomy.

Handlers raise these; the exception handlers registered in main.py render
them as {statusCode, message, success} envelopes.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for errors that map to an HTTP status and a client message."""

    status_code: int = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class UnauthenticatedError(ApiError):
    """Missing or invalid actor identity."""
    status_code = 401


class ForbiddenError(ApiError):
    """Authenticated but not entitled (wrong role or not a party to the resource)."""
    status_code = 403


class NotFoundError(ApiError):
    """Entity absent. Also used to mask ownership failures."""
    status_code = 404


class ValidationError(ApiError):
    """Malformed or out-of-range input."""
    status_code = 400


class DuplicateError(ApiError):
    """Uniqueness violation."""
    status_code = 400


class InvalidTransitionError(ApiError):
    """Illegal order status change."""
    status_code = 400

    def __init__(self, from_status, to_status, message: Optional[str] = None):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            message or f"Invalid status transition from {_label(from_status)} to {_label(to_status)}"
        )


class InternalError(ApiError):
    """Unexpected failure. `error` carries the underlying message for diagnostics."""
    status_code = 500


def _label(value) -> str:
    return getattr(value, "value", value) if value is not None else "None"
