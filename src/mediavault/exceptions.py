"""Typed failures raised by the core and mapped to HTTP status at the boundary.

Business logic raises these; the FastAPI error handlers turn them into the
``{success, message, errors?, timestamp}`` envelope. Nothing below the HTTP
layer builds responses or status codes itself.
"""

from __future__ import annotations

from typing import Any


class MediaVaultError(Exception):
    """Base class for every error the service raises on purpose."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class InvalidInputError(MediaVaultError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class ConflictError(MediaVaultError):
    # Duplicate registrations surface as 400 like other bad input
    status_code = 400
    code = "CONFLICT"
    default_message = "Resource already exists"


class UnauthorizedError(MediaVaultError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized access"


class ForbiddenError(MediaVaultError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access forbidden"


class NotFoundError(MediaVaultError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class UpstreamError(MediaVaultError):
    """Object store or metadata store unreachable or misbehaving."""

    status_code = 500
    code = "UPSTREAM_FAILURE"
    default_message = "Upstream service failure"


class InternalError(MediaVaultError):
    pass


__all__ = [
    "ConflictError",
    "ForbiddenError",
    "InternalError",
    "InvalidInputError",
    "MediaVaultError",
    "NotFoundError",
    "UnauthorizedError",
    "UpstreamError",
]
