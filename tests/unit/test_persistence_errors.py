"""Unit tests for mapping storage failures to service errors."""

from __future__ import annotations

from typing import Any

import pytest
from course_booking.core.errors import ConflictError, InternalError
from course_booking.domain.services import persistence
from course_booking.domain.services.persistence import describe_failure, persistence_errors
from course_booking.domain.services.user_service import UserService
from course_booking.infrastructure.db.session import dispose_engine, get_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tests.utils import create_user


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, event: str, **kw: Any) -> None:
        self.events.append((event, kw))

    def error(self, event: str, **kw: Any) -> None:
        self.events.append((event, kw))


@pytest.fixture()
def recorded(monkeypatch: pytest.MonkeyPatch) -> _RecordingLogger:
    recorder = _RecordingLogger()
    monkeypatch.setattr(persistence, "logger", recorder)
    return recorder


class TestPersistenceErrors:
    def test_connection_failure_is_internal_error(self, recorded: _RecordingLogger) -> None:
        with pytest.raises(InternalError) as exc_info:
            with persistence_errors("Error finding courses"):
                raise ConnectionRefusedError(111, "Connect call failed")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Error finding courses"
        assert recorded.events[0][0] == "persistence_error"

    def test_integrity_error_without_conflict_message_is_internal(
        self, recorded: _RecordingLogger
    ) -> None:
        error = IntegrityError("INSERT ...", {"email": "x@y.com"}, Exception("UNIQUE"))

        with pytest.raises(InternalError):
            with persistence_errors("Error in save"):
                raise error

    def test_describe_failure_omits_statement_parameters(self) -> None:
        error = IntegrityError(
            "INSERT INTO users (email, hashed_password) VALUES (?, ?)",
            ("a@x.com", "$2b$12$secret"),
            Exception("UNIQUE constraint failed: users.email"),
        )

        summary = describe_failure(error)

        assert "UNIQUE constraint failed" in summary
        assert "$2b$" not in summary
        assert "a@x.com" not in summary


@pytest.mark.asyncio
async def test_registration_race_does_not_log_credentials(
    session_factory: async_sessionmaker[AsyncSession],
    recorded: _RecordingLogger,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A duplicate that slips past the email check is a conflict, logged without its row."""
    await create_user(session_factory, email="race@x.com")

    async def email_free(self: UserService, email: str) -> bool:
        return False

    monkeypatch.setattr(UserService, "check_email_exists", email_free)

    async with session_factory() as session:
        with pytest.raises(ConflictError):
            await UserService(session).register(
                first_name="Race",
                last_name="Condition",
                email="race@x.com",
                mobile_no="09171234567",
                password="password123",
            )

    assert [event for event, _ in recorded.events] == ["persistence_conflict"]
    logged = str(recorded.events)
    assert "$2b$" not in logged
    assert "race@x.com" not in logged
    assert "09171234567" not in logged


@pytest.mark.asyncio
async def test_engine_hides_statement_parameters() -> None:
    try:
        assert get_engine().sync_engine.hide_parameters is True
    finally:
        await dispose_engine()
