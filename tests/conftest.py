from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from course_booking.api.deps import get_db_session
from course_booking.api.main import app
from course_booking.infrastructure.db.base import Base
from course_booking.infrastructure.db.models import UserModel
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tests.utils import auth_headers, create_user


@pytest.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """In-memory SQLite database with the full schema created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the app with the test database."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
async def regular_user(session_factory: async_sessionmaker[AsyncSession]) -> UserModel:
    return await create_user(session_factory, email="student@example.com")


@pytest.fixture()
async def admin_user(session_factory: async_sessionmaker[AsyncSession]) -> UserModel:
    return await create_user(session_factory, email="admin@example.com", is_admin=True)


@pytest.fixture()
def user_headers(regular_user: UserModel) -> dict[str, str]:
    return auth_headers(regular_user)


@pytest.fixture()
def admin_headers(admin_user: UserModel) -> dict[str, str]:
    return auth_headers(admin_user)
