"""Enrollment creation and admin-driven status reconciliation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog
from course_booking.core.errors import BadRequestError, ForbiddenError, NotFoundError
from course_booking.domain.models import AuthenticatedContext
from course_booking.domain.services.persistence import persistence_errors
from course_booking.infrastructure.db.models import EnrollmentModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def reconcile_course_status(enrollment: EnrollmentModel, course_id: str, new_status: str) -> bool:
    """Record ``new_status`` for ``course_id`` on ``enrollment``.

    When an entry for the course already exists, the enrollment's overall
    ``status`` is overwritten and the entries are left as they are. Otherwise
    a new ``{"courseId", "status"}`` entry is appended. Returns whether a
    matching entry was found.

    NOTE: the found branch never touches the matched entry's own status. This
    asymmetry is the established API behavior and clients depend on it.
    """
    entries = enrollment.enrolled_courses or []
    found = any(str(entry.get("courseId")) == str(course_id) for entry in entries)

    if found:
        enrollment.status = new_status
    else:
        # Reassign so the JSON column is flagged dirty.
        enrollment.enrolled_courses = [*entries, {"courseId": course_id, "status": new_status}]
    return found


class EnrollmentService:
    """Service for enrollment records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def enroll(
        self,
        context: AuthenticatedContext,
        *,
        enrolled_courses: Iterable[dict[str, Any]],
        total_price: float,
    ) -> EnrollmentModel:
        """Create an enrollment owned by the caller. Admins cannot enroll."""
        if context.is_admin:
            await logger.awarning("enroll_rejected_admin", user_id=context.user_id)
            raise ForbiddenError("Admins are not allowed to enroll")

        enrollment = EnrollmentModel(
            user_id=context.user_id,
            enrolled_courses=list(enrolled_courses),
            total_price=total_price,
        )
        with persistence_errors("Failed to save the enrollment"):
            self.session.add(enrollment)
            await self.session.commit()
            await self.session.refresh(enrollment)

        await logger.ainfo(
            "enrollment_created",
            enrollment_id=enrollment.id,
            user_id=context.user_id,
            course_count=len(enrollment.enrolled_courses),
        )
        return enrollment

    async def get_enrollments(self, user_id: str) -> list[EnrollmentModel]:
        stmt = (
            select(EnrollmentModel)
            .where(EnrollmentModel.user_id == user_id)
            .order_by(EnrollmentModel.enrolled_on)
        )
        with persistence_errors("Failed to fetch enrollments"):
            enrollments = list((await self.session.scalars(stmt)).all())

        if not enrollments:
            raise NotFoundError("No enrollments found")
        return enrollments

    async def update_enrollment_status(
        self,
        context: AuthenticatedContext,
        *,
        enrollment_id: str | None,
        course_id: str | None,
        new_status: str | None,
    ) -> None:
        """Reconcile a course status on an enrollment (admin-only).

        The write is guarded by the enrollment's version column; losing a race
        against another update surfaces as ``ConflictError``.
        """
        if not context.is_admin:
            raise ForbiddenError("Unauthorized: Admin privileges required.")
        if not enrollment_id or not course_id or not new_status:
            raise BadRequestError(
                "userId, courseId, and enrollmentStatus are required in the request body."
            )

        with persistence_errors("Internal Server Error."):
            enrollment = await self.session.get(EnrollmentModel, enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found.")

        found = reconcile_course_status(enrollment, course_id, new_status)

        with persistence_errors("Internal Server Error."):
            await self.session.commit()

        await logger.ainfo(
            "enrollment_status_updated",
            enrollment_id=enrollment_id,
            course_id=course_id,
            status=new_status,
            entry_found=found,
            admin_user=context.user_id,
        )
