"""User routes - registration, login, profile and enrollments."""

from __future__ import annotations

import structlog
from course_booking.api.deps import (
    authenticate,
    get_db_session,
    require_admin,
    require_session,
)
from course_booking.api.schemas.base import MessageResponse
from course_booking.api.schemas.users import (
    CheckEmailRequest,
    EnrollmentResponse,
    EnrollRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateAdminRequest,
    UpdateEnrollmentStatusRequest,
    UpdateProfileRequest,
    UserProfile,
)
from course_booking.core.errors import ConflictError
from course_booking.domain import AuthenticatedContext
from course_booking.domain.services.enrollment_service import EnrollmentService
from course_booking.domain.services.user_service import UserService
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()
router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/checkEmail",
    summary="Check email availability",
    responses={
        status.HTTP_404_NOT_FOUND: {"model": MessageResponse},
        status.HTTP_409_CONFLICT: {"description": "Duplicate Email Found"},
    },
)
async def check_email_exists(
    payload: CheckEmailRequest,
    session: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """Answer 409 when the email is taken and 404 when it is free."""
    if await UserService(session).check_email_exists(payload.email):
        raise ConflictError("Duplicate Email Found")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Email not found"})


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await UserService(session).register(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        mobile_no=payload.mobile_no,
        password=payload.password,
    )
    return MessageResponse(message="Registered Successfully")


@router.post("/login", response_model=LoginResponse, summary="User login")
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """Authenticate with email and password and return a session token."""
    token = await UserService(session).login(email=payload.email, password=payload.password)
    return LoginResponse(access=token)


@router.post("/details", response_model=ProfileResponse, summary="Get current user")
async def get_profile(
    user: AuthenticatedContext = Depends(authenticate),
    session: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    profile = await UserService(session).get_profile(user.user_id)
    return ProfileResponse(user=UserProfile.model_validate(profile))


@router.post("/enroll", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    payload: EnrollRequest,
    user: AuthenticatedContext = Depends(authenticate),
    session: AsyncSession = Depends(get_db_session),
) -> EnrollmentResponse:
    """Enroll the caller in the selected courses. Admins are refused."""
    enrollment = await EnrollmentService(session).enroll(
        user,
        enrolled_courses=[
            selection.model_dump(by_alias=True, exclude_none=True)
            for selection in payload.enrolled_courses
        ],
        total_price=payload.total_price,
    )
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/getEnrollments", response_model=list[EnrollmentResponse])
async def get_enrollments(
    user: AuthenticatedContext = Depends(authenticate),
    session: AsyncSession = Depends(get_db_session),
) -> list[EnrollmentResponse]:
    enrollments = await EnrollmentService(session).get_enrollments(user.user_id)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]


@router.put("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    user: AuthenticatedContext = Depends(authenticate),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await UserService(session).reset_password(user.user_id, payload.new_password)
    return MessageResponse(message="Password reset successfully")


@router.put("/profile", response_model=UserProfile)
async def update_profile(
    payload: UpdateProfileRequest,
    user: AuthenticatedContext = Depends(authenticate),
    session: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    updated = await UserService(session).update_profile(
        user.user_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        mobile_no=payload.mobile_no,
    )
    return UserProfile.model_validate(updated)


@router.put("/updateAdmin", response_model=MessageResponse)
async def update_admin(
    payload: UpdateAdminRequest,
    admin: AuthenticatedContext = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Grant admin privileges to another user (admin-only)."""
    await UserService(session).update_admin(admin, payload.user_id)
    return MessageResponse(message="User updated successfully.")


@router.put("/updateEnrollmentStatus", response_model=MessageResponse)
async def update_enrollment_status(
    payload: UpdateEnrollmentStatusRequest,
    admin: AuthenticatedContext = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await EnrollmentService(session).update_enrollment_status(
        admin,
        enrollment_id=payload.enrollment_id,
        course_id=payload.course_id,
        new_status=payload.enrollment_status,
    )
    return MessageResponse(message="Enrollment status updated successfully.")


@router.get("/success", response_model=MessageResponse)
async def session_success(
    identity: AuthenticatedContext = Depends(require_session),
) -> MessageResponse:
    """Greet a caller whose identity was attached earlier in the request."""
    logger.info("session_confirmed", user_id=identity.user_id)
    return MessageResponse(message=f"Welcome {identity.email}")
