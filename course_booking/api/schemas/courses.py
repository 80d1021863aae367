from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import CamelModel


class CourseResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    is_active: bool
    date_created: datetime


class CoursesResponse(CamelModel):
    courses: list[CourseResponse]


class CourseCreatedResponse(CamelModel):
    saved_course: CourseResponse


class CourseDetailResponse(CamelModel):
    course: CourseResponse


class CourseUpdatedResponse(CamelModel):
    message: str
    updated_course: CourseResponse


class CourseArchivedResponse(CamelModel):
    message: str
    archive_course: CourseResponse


class CourseActivatedResponse(CamelModel):
    message: str
    activate_course: CourseResponse


class CourseCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)


class CourseUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(None, ge=0)


class PriceRangeSearch(CamelModel):
    """Bounds are optional here so that a missing one is reported as 400."""

    min_price: float | None = None
    max_price: float | None = None
