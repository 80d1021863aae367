from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from course_booking.core.errors import ConflictError, InternalError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

logger = structlog.get_logger()


def describe_failure(exc: BaseException) -> str:
    """Summarize a storage failure without the bound statement parameters.

    ``str()`` of a SQLAlchemy DBAPI error embeds the SQL and its parameters,
    which carry password hashes and contact details.
    """
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return f"{type(exc).__name__}: {type(orig).__name__}: {orig}"
    if isinstance(exc, SQLAlchemyError):
        return type(exc).__name__
    return f"{type(exc).__name__}: {exc}"


@contextmanager
def persistence_errors(
    failure_message: str,
    *,
    conflict_message: str | None = None,
) -> Iterator[None]:
    """Map storage failures raised inside the block to service errors.

    ``IntegrityError`` becomes a ``ConflictError`` when ``conflict_message`` is
    given, ``StaleDataError`` (a lost optimistic-lock race) always does, and
    any other ``SQLAlchemyError`` becomes an ``InternalError``. So does an
    ``OSError``, which drivers raise directly when the database is unreachable.
    """
    try:
        yield
    except StaleDataError as exc:
        logger.warning("persistence_stale_write", error=describe_failure(exc))
        raise ConflictError("Record was modified concurrently, retry the request") from exc
    except IntegrityError as exc:
        if conflict_message is None:
            logger.error("persistence_integrity_error", error=describe_failure(exc))
            raise InternalError(failure_message) from exc
        logger.warning("persistence_conflict", error=describe_failure(exc))
        raise ConflictError(conflict_message) from exc
    except (SQLAlchemyError, OSError) as exc:
        logger.error("persistence_error", error=describe_failure(exc), failure=failure_message)
        raise InternalError(failure_message) from exc
