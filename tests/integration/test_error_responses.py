"""Failure paths that must still answer with a JSON error body."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
from course_booking.api.deps import get_db_session
from course_booking.api.main import app
from fastapi import status
from httpx import ASGITransport, AsyncClient

pytestmark = pytest.mark.asyncio


class _BrokenSession:
    """Session stand-in whose every query fails with ``error``."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def scalars(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    async def scalar(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    async def get(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error


async def _client_for(error: Exception) -> AsyncIterator[AsyncClient]:
    async def override_db_session() -> AsyncIterator[_BrokenSession]:
        yield _BrokenSession(error)

    app.dependency_overrides[get_db_session] = override_db_session
    # Unhandled errors are re-raised by Starlette after the 500 response is sent.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
async def unreachable_db_client() -> AsyncIterator[AsyncClient]:
    async for client in _client_for(ConnectionRefusedError(111, "Connect call failed")):
        yield client


@pytest.fixture()
async def crashing_client() -> AsyncIterator[AsyncClient]:
    async for client in _client_for(RuntimeError("unexpected")):
        yield client


async def test_unreachable_database_is_500_json(unreachable_db_client: AsyncClient) -> None:
    response = await unreachable_db_client.get("/courses")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Error in finding active courses"}


async def test_unreachable_database_on_login_is_500_json(
    unreachable_db_client: AsyncClient,
) -> None:
    response = await unreachable_db_client.post(
        "/users/login", json={"email": "a@x.com", "password": "password1"}
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Error in find"}


async def test_unexpected_error_is_500_json(crashing_client: AsyncClient) -> None:
    response = await crashing_client.get("/courses/some-id")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal Server Error."}
    assert response.headers["content-type"].startswith("application/json")
