"""Domain services."""

from course_booking.domain.services.course_service import CourseService
from course_booking.domain.services.enrollment_service import (
    EnrollmentService,
    reconcile_course_status,
)
from course_booking.domain.services.user_service import (
    UserService,
    hash_password,
    verify_password,
)

__all__ = [
    "CourseService",
    "EnrollmentService",
    "UserService",
    "hash_password",
    "reconcile_course_status",
    "verify_password",
]
