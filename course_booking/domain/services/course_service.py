"""Course catalog operations."""

from __future__ import annotations

from typing import Any

import structlog
from course_booking.core.errors import BadRequestError, ConflictError, NotFoundError
from course_booking.domain.services.persistence import persistence_errors
from course_booking.infrastructure.db.models import CourseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_UPDATABLE_FIELDS = ("name", "description", "price")


class CourseService:
    """Create, read, update and soft-delete catalog courses."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add_course(self, *, name: str, description: str, price: float) -> CourseModel:
        with persistence_errors("Error finding the course"):
            existing = await self.session.scalar(select(CourseModel.id).where(CourseModel.name == name))
        if existing is not None:
            raise ConflictError("Course already exists")

        course = CourseModel(name=name, description=description, price=price)
        with persistence_errors("Failed to save the course", conflict_message="Course already exists"):
            self.session.add(course)
            await self.session.commit()
            await self.session.refresh(course)

        await logger.ainfo("course_created", course_id=course.id, course_name=course.name)
        return course

    async def list_all_courses(self) -> list[CourseModel]:
        with persistence_errors("Error finding courses"):
            result = await self.session.scalars(select(CourseModel).order_by(CourseModel.name))
        return list(result.all())

    async def list_active_courses(self) -> list[CourseModel]:
        stmt = select(CourseModel).where(CourseModel.is_active.is_(True)).order_by(CourseModel.name)
        with persistence_errors("Error in finding active courses"):
            result = await self.session.scalars(stmt)
        return list(result.all())

    async def get_course(self, course_id: str) -> CourseModel:
        return await self._get_course(course_id, "Failed to fetch course")

    async def update_course(self, course_id: str, fields: dict[str, Any]) -> CourseModel:
        """Apply name/description/price updates; unknown keys are ignored."""
        course = await self._get_course(course_id, "Error in updating a course.")

        for field in _UPDATABLE_FIELDS:
            value = fields.get(field)
            if value is not None:
                setattr(course, field, value)

        with persistence_errors(
            "Error in updating a course.", conflict_message="Course already exists"
        ):
            await self.session.commit()
            await self.session.refresh(course)

        await logger.ainfo(
            "course_updated",
            course_id=course.id,
            updated_fields=[k for k in _UPDATABLE_FIELDS if fields.get(k) is not None],
        )
        return course

    async def archive_course(self, course_id: str) -> CourseModel:
        return await self._set_active(course_id, False, "Failed to archive course")

    async def activate_course(self, course_id: str) -> CourseModel:
        return await self._set_active(course_id, True, "Failed to activate course")

    async def search_by_price_range(
        self, min_price: float | None, max_price: float | None
    ) -> list[CourseModel]:
        """Return courses priced within ``[min_price, max_price]``.

        An inverted range is not an error; it simply matches nothing.
        """
        if min_price is None or max_price is None:
            raise BadRequestError("Both minPrice and maxPrice are required in the request body.")

        stmt = (
            select(CourseModel)
            .where(CourseModel.price >= min_price, CourseModel.price <= max_price)
            .order_by(CourseModel.price)
        )
        with persistence_errors("Internal Server Error."):
            result = await self.session.scalars(stmt)
        return list(result.all())

    async def _set_active(self, course_id: str, is_active: bool, failure_message: str) -> CourseModel:
        course = await self._get_course(course_id, failure_message)
        course.is_active = is_active
        with persistence_errors(failure_message):
            await self.session.commit()
            await self.session.refresh(course)

        await logger.ainfo("course_active_flag_set", course_id=course.id, is_active=is_active)
        return course

    async def _get_course(self, course_id: str, failure_message: str) -> CourseModel:
        with persistence_errors(failure_message):
            course = await self.session.get(CourseModel, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course
