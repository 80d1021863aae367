from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache

from course_booking.core.config import get_settings
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


@lru_cache
def get_engine() -> AsyncEngine:
    """Return the process-wide engine; its pool is shared by every request.

    Statement parameters are kept out of error messages because they carry
    password hashes.
    """
    settings = get_settings()
    return create_async_engine(
        settings.async_database_url,
        echo=settings.database_echo,
        hide_parameters=True,
        pool_pre_ping=True,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that is closed, and rolled back if needed, on exit."""
    async with get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections; the next request builds a fresh engine."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()
