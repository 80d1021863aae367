from __future__ import annotations

from collections.abc import AsyncIterator

from course_booking.core.auth import TokenService, get_token_service
from course_booking.core.errors import AccessDeniedError, UnauthorizedError
from course_booking.domain import AuthenticatedContext
from course_booking.infrastructure.db.session import get_session
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession


def authenticate(
    request: Request,
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),  # noqa: B008
) -> AuthenticatedContext:
    """Verify the bearer token and attach the caller's identity to the request.

    Raises ``MissingTokenError`` / ``InvalidTokenError``, which are rendered as
    an auth-failure body and stop the request before the handler runs. A
    result already recorded by the session middleware is reused.
    """
    attached: AuthenticatedContext | None = getattr(request.state, "identity", None)
    if attached is not None:
        return attached
    token_error: UnauthorizedError | None = getattr(request.state, "token_error", None)
    if token_error is not None:
        raise token_error

    claims = tokens.verify(authorization)
    context = AuthenticatedContext.from_claims(claims)
    request.state.identity = context
    return context


def require_admin(
    context: AuthenticatedContext = Depends(authenticate),  # noqa: B008
) -> AuthenticatedContext:
    """Allow the request through only for admin identities."""
    if not context.is_admin:
        raise AccessDeniedError("Action Forbidden")
    return context


def require_session(request: Request) -> AuthenticatedContext:
    """Require an identity already attached to the request."""
    identity: AuthenticatedContext | None = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthorizedError("Unauthorized")
    return identity


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session
