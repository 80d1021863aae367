from __future__ import annotations

import structlog
from course_booking.api.deps import get_db_session, require_admin
from course_booking.api.schemas.courses import (
    CourseActivatedResponse,
    CourseArchivedResponse,
    CourseCreate,
    CourseCreatedResponse,
    CourseDetailResponse,
    CourseResponse,
    CoursesResponse,
    CourseUpdate,
    CourseUpdatedResponse,
    PriceRangeSearch,
)
from course_booking.domain import AuthenticatedContext
from course_booking.domain.services.course_service import CourseService
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/courses", tags=["Courses"])
logger = structlog.get_logger()


@router.post("", response_model=CourseCreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_course(
    payload: CourseCreate,
    session: AsyncSession = Depends(get_db_session),
    admin: AuthenticatedContext = Depends(require_admin),
) -> CourseCreatedResponse:
    """Create a new course (admin-only)."""
    course = await CourseService(session).add_course(
        name=payload.name,
        description=payload.description,
        price=payload.price,
    )
    logger.info("course_added_by_admin", course_id=course.id, admin_user=admin.user_id)
    return CourseCreatedResponse(saved_course=CourseResponse.model_validate(course))


@router.get("/all", response_model=CoursesResponse)
async def get_all_courses(
    session: AsyncSession = Depends(get_db_session),
    _: AuthenticatedContext = Depends(require_admin),
) -> CoursesResponse:
    """Return every course, archived ones included (admin-only)."""
    courses = await CourseService(session).list_all_courses()
    return CoursesResponse(courses=[CourseResponse.model_validate(c) for c in courses])


@router.get("", response_model=CoursesResponse)
async def get_active_courses(session: AsyncSession = Depends(get_db_session)) -> CoursesResponse:
    """Return the active catalog."""
    courses = await CourseService(session).list_active_courses()
    return CoursesResponse(courses=[CourseResponse.model_validate(c) for c in courses])


@router.post("/search", response_model=list[CourseResponse])
async def search_courses_by_price_range(
    payload: PriceRangeSearch,
    session: AsyncSession = Depends(get_db_session),
) -> list[CourseResponse]:
    courses = await CourseService(session).search_by_price_range(payload.min_price, payload.max_price)
    return [CourseResponse.model_validate(c) for c in courses]


@router.get("/{course_id}", response_model=CourseDetailResponse)
async def get_course(
    course_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> CourseDetailResponse:
    course = await CourseService(session).get_course(course_id)
    return CourseDetailResponse(course=CourseResponse.model_validate(course))


@router.patch("/{course_id}", response_model=CourseUpdatedResponse)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: AuthenticatedContext = Depends(require_admin),
) -> CourseUpdatedResponse:
    """Update course details (admin-only)."""
    course = await CourseService(session).update_course(
        course_id, payload.model_dump(exclude_unset=True)
    )
    return CourseUpdatedResponse(
        message="Course updated successfully",
        updated_course=CourseResponse.model_validate(course),
    )


@router.patch("/{course_id}/archive", response_model=CourseArchivedResponse)
async def archive_course(
    course_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: AuthenticatedContext = Depends(require_admin),
) -> CourseArchivedResponse:
    """Soft delete a course by marking it inactive (admin-only)."""
    course = await CourseService(session).archive_course(course_id)
    return CourseArchivedResponse(
        message="Course archived successfully",
        archive_course=CourseResponse.model_validate(course),
    )


@router.patch("/{course_id}/activate", response_model=CourseActivatedResponse)
async def activate_course(
    course_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: AuthenticatedContext = Depends(require_admin),
) -> CourseActivatedResponse:
    course = await CourseService(session).activate_course(course_id)
    return CourseActivatedResponse(
        message="Course activated successfully",
        activate_course=CourseResponse.model_validate(course),
    )
