"""Unit tests for the access-control dependencies."""

from __future__ import annotations

import pytest
from course_booking.api.deps import authenticate, require_admin, require_session
from course_booking.core.auth import TokenService
from course_booking.core.errors import (
    AccessDeniedError,
    InvalidTokenError,
    MissingTokenError,
    UnauthorizedError,
)
from course_booking.domain import AuthenticatedContext
from starlette.requests import Request


def _request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": []})


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService("access-control-secret")


class TestAuthenticate:
    def test_attaches_identity_context(self, tokens: TokenService) -> None:
        request = _request()
        token = tokens.issue(user_id="user-1", email="u@example.com", is_admin=False)

        context = authenticate(request, f"Bearer {token}", tokens)

        assert context == AuthenticatedContext(user_id="user-1", email="u@example.com", is_admin=False)
        assert request.state.identity is context

    def test_missing_header_halts(self, tokens: TokenService) -> None:
        request = _request()

        with pytest.raises(MissingTokenError):
            authenticate(request, None, tokens)

        assert getattr(request.state, "identity", None) is None

    def test_invalid_token_halts(self, tokens: TokenService) -> None:
        with pytest.raises(InvalidTokenError):
            authenticate(_request(), "Bearer not-a-token", tokens)

    def test_reuses_identity_attached_by_middleware(self, tokens: TokenService) -> None:
        request = _request()
        identity = AuthenticatedContext(user_id="user-1", email="u@example.com")
        request.state.identity = identity

        assert authenticate(request, "Bearer ignored", tokens) is identity

    def test_reraises_recorded_token_error(self, tokens: TokenService) -> None:
        request = _request()
        recorded = InvalidTokenError("Signature verification failed")
        request.state.identity = None
        request.state.token_error = recorded

        with pytest.raises(InvalidTokenError) as exc_info:
            authenticate(request, "Bearer ignored", tokens)

        assert exc_info.value is recorded


class TestRequireAdmin:
    def test_admin_passes_through(self) -> None:
        context = AuthenticatedContext(user_id="admin-1", email="a@example.com", is_admin=True)

        assert require_admin(context) is context

    def test_non_admin_is_forbidden(self) -> None:
        context = AuthenticatedContext(user_id="user-1", email="u@example.com", is_admin=False)

        with pytest.raises(AccessDeniedError) as exc_info:
            require_admin(context)

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Action Forbidden"


class TestRequireSession:
    def test_attached_identity_passes(self) -> None:
        request = _request()
        identity = AuthenticatedContext(user_id="user-1", email="u@example.com")
        request.state.identity = identity

        assert require_session(request) is identity

    def test_missing_identity_is_unauthorized(self) -> None:
        with pytest.raises(UnauthorizedError) as exc_info:
            require_session(_request())

        assert exc_info.value.status_code == 401
