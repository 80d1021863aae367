from __future__ import annotations

from typing import Any

from course_booking.core.auth import get_token_service
from course_booking.domain.services.user_service import hash_password
from course_booking.infrastructure.db.models import CourseModel, EnrollmentModel, UserModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

DEFAULT_PASSWORD = "password123"


def auth_headers(user: UserModel) -> dict[str, str]:
    token = get_token_service().issue(user_id=user.id, email=user.email, is_admin=user.is_admin)
    return {"Authorization": f"Bearer {token}"}


async def create_user(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    email: str,
    is_admin: bool = False,
    password: str = DEFAULT_PASSWORD,
) -> UserModel:
    async with session_factory() as session:
        user = UserModel(
            first_name="Test",
            last_name="User",
            email=email,
            mobile_no="09171234567",
            hashed_password=hash_password(password),
            is_admin=is_admin,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def create_course(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    name: str,
    price: float,
    description: str = "A course",
    is_active: bool = True,
) -> CourseModel:
    async with session_factory() as session:
        course = CourseModel(name=name, description=description, price=price, is_active=is_active)
        session.add(course)
        await session.commit()
        await session.refresh(course)
        return course


async def create_enrollment(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    user_id: str,
    entries: list[dict[str, Any]],
    total_price: float = 100.0,
) -> EnrollmentModel:
    async with session_factory() as session:
        enrollment = EnrollmentModel(user_id=user_id, enrolled_courses=entries, total_price=total_price)
        session.add(enrollment)
        await session.commit()
        await session.refresh(enrollment)
        return enrollment


async def load_enrollment(
    session_factory: async_sessionmaker[AsyncSession], enrollment_id: str
) -> EnrollmentModel | None:
    async with session_factory() as session:
        return await session.get(EnrollmentModel, enrollment_id)
