"""
Typed errors raised by the session/token layer and the upload helpers.

Each error carries a stable ``kind`` and an HTTP ``status_code`` so the
Flask error handlers (api/errors.py) can turn it into the uniform envelope
without knowing where it was raised.
"""
from __future__ import annotations


class ApiError(Exception):
    kind = "ERROR"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input to a call."""
    kind = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ApiError):
    """Bad signature, expired token, unknown identity or superseded token."""
    kind = "UNAUTHORIZED"
    status_code = 401
    default_message = "unauthorized request"


class InternalError(ApiError):
    """Persistence failure or an identity that vanished mid-operation."""
    kind = "INTERNAL_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred"


class UploadError(ApiError):
    kind = "UPLOAD_ERROR"
    status_code = 400
    default_message = "Error while uploading file"
