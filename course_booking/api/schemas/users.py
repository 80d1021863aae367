"""Pydantic schemas for user and enrollment endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, Field

from .base import CamelModel

# --- Request Schemas ---


class CheckEmailRequest(CamelModel):
    email: str


class RegisterRequest(CamelModel):
    """Request schema for user registration.

    Format rules (email, mobile number, password length) are enforced by the
    user service so that violations are reported as 400 with a message.
    """

    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    email: str
    mobile_no: str
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class ResetPasswordRequest(CamelModel):
    new_password: str


class UpdateProfileRequest(CamelModel):
    first_name: str | None = Field(None, min_length=1, max_length=128)
    last_name: str | None = Field(None, min_length=1, max_length=128)
    mobile_no: str | None = None


class UpdateAdminRequest(CamelModel):
    user_id: str | None = None


class CourseSelection(CamelModel):
    course_id: str
    status: str | None = None


class EnrollRequest(CamelModel):
    enrolled_courses: list[CourseSelection] = Field(..., min_length=1)
    total_price: float = Field(..., ge=0)


class UpdateEnrollmentStatusRequest(CamelModel):
    # Older clients send the enrollment id as "userId".
    enrollment_id: str | None = Field(
        None, validation_alias=AliasChoices("enrollmentId", "userId", "enrollment_id")
    )
    course_id: str | None = None
    enrollment_status: str | None = None


# --- Response Schemas ---


class LoginResponse(CamelModel):
    access: str = Field(..., description="Signed session token")


class UserProfile(CamelModel):
    """User data without credentials."""

    id: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool
    mobile_no: str
    created_at: datetime


class ProfileResponse(CamelModel):
    user: UserProfile


class EnrollmentResponse(CamelModel):
    id: str
    user_id: str
    enrolled_courses: list[CourseSelection]
    total_price: float
    enrolled_on: datetime
    status: str
    version_id: int
