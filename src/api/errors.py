from __future__ import annotations


class ApiError(Exception):
    """Caller-actionable failure carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class InferenceFailure(Exception):
    """Raised by the inference gateway; always recovered by the fallback."""


class StoreUnavailable(Exception):
    """Raised when the persistent store cannot be reached."""
