"""Error kinds raised by domain services and access control.

Each kind carries the HTTP status it is rendered with; the API layer turns
them into structured JSON bodies.
"""

from __future__ import annotations

from fastapi import status


class ServiceError(Exception):
    """Base class for request-level failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    # Access-control failures render as {"auth": "Failed", "message": ...}.
    auth_failure: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(ServiceError):
    """Raised when required input is missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ServiceError):
    """Raised when no usable credentials accompany the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class MissingTokenError(UnauthorizedError):
    """Raised when the Authorization header is absent."""

    auth_failure = True


class InvalidTokenError(UnauthorizedError):
    """Raised when a token fails signature or payload validation."""

    auth_failure = True


class ForbiddenError(ServiceError):
    """Raised when the caller is authenticated but lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN


class AccessDeniedError(ForbiddenError):
    """Raised by role checks in front of admin-only routes."""

    auth_failure = True


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class InternalError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
