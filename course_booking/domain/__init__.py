from course_booking.domain.models import AuthenticatedContext

__all__ = ["AuthenticatedContext"]
