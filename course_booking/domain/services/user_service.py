"""User registration, login and profile management."""

from __future__ import annotations

import structlog
from course_booking.core.auth import TokenService, get_token_service
from course_booking.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from course_booking.domain.models import AuthenticatedContext
from course_booking.domain.services.persistence import persistence_errors
from course_booking.infrastructure.db.models import UserModel
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MOBILE_NO_LENGTH = 11
MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def _ensure_email(email: str, message: str = "Invalid Email") -> str:
    if "@" not in email:
        raise BadRequestError(message)
    return email.strip().lower()


def _ensure_mobile_no(mobile_no: str) -> None:
    if len(mobile_no) != MOBILE_NO_LENGTH:
        raise BadRequestError("Mobile number invalid")


class UserService:
    """Service for user account operations."""

    def __init__(self, session: AsyncSession, tokens: TokenService | None = None) -> None:
        self.session = session
        self.tokens = tokens or get_token_service()

    async def check_email_exists(self, email: str) -> bool:
        """Return whether a user is registered under ``email``."""
        normalized = _ensure_email(email)
        with persistence_errors("Error in find"):
            existing = await self.session.scalar(
                select(UserModel.id).where(UserModel.email == normalized)
            )
        return existing is not None

    async def register(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        mobile_no: str,
        password: str,
    ) -> UserModel:
        """Create a user after validating input and email uniqueness."""
        normalized = _ensure_email(email, "Email invalid")
        _ensure_mobile_no(mobile_no)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError("Password must be atleast 8 characters")

        if await self.check_email_exists(normalized):
            await logger.awarning("register_duplicate_email", email=normalized)
            raise ConflictError("Duplicate Email Found")

        user = UserModel(
            first_name=first_name,
            last_name=last_name,
            email=normalized,
            mobile_no=mobile_no,
            hashed_password=hash_password(password),
        )

        with persistence_errors("Error in save", conflict_message="Duplicate Email Found"):
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)

        await logger.ainfo("register_success", user_id=user.id, email=user.email)
        return user

    async def login(self, *, email: str, password: str) -> str:
        """Check credentials and return a signed session token."""
        normalized = _ensure_email(email)

        with persistence_errors("Error in find"):
            user = await self.session.scalar(select(UserModel).where(UserModel.email == normalized))

        if user is None:
            await logger.awarning("login_user_not_found", email=normalized)
            raise NotFoundError("No Email Found")

        if not verify_password(password, user.hashed_password):
            await logger.awarning("login_invalid_password", email=normalized)
            raise UnauthorizedError("Email and password do not match")

        await logger.ainfo("login_success", user_id=user.id, is_admin=user.is_admin)
        return self.tokens.issue(user_id=user.id, email=user.email, is_admin=user.is_admin)

    async def get_profile(self, user_id: str) -> UserModel:
        return await self._get_user(user_id, "Failed to fetch user profile")

    async def reset_password(self, user_id: str, new_password: str) -> None:
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError("Password must be atleast 8 characters")

        user = await self._get_user(user_id, "Internal server error")
        user.hashed_password = hash_password(new_password)
        with persistence_errors("Internal server error"):
            await self.session.commit()

        await logger.ainfo("password_reset", user_id=user_id)

    async def update_profile(
        self,
        user_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        mobile_no: str | None = None,
    ) -> UserModel:
        """Apply the provided profile fields and return the updated user."""
        if mobile_no is not None:
            _ensure_mobile_no(mobile_no)

        user = await self._get_user(user_id, "Failed to update profile")
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if mobile_no is not None:
            user.mobile_no = mobile_no

        with persistence_errors("Failed to update profile"):
            await self.session.commit()
            await self.session.refresh(user)

        await logger.ainfo("profile_updated", user_id=user_id)
        return user

    async def update_admin(self, context: AuthenticatedContext, user_id: str | None) -> UserModel:
        """Grant admin privileges to another user."""
        if not context.is_admin:
            raise ForbiddenError("Unauthorized: Admin privileges required.")
        if not user_id:
            raise BadRequestError("User ID is required in the request body.")

        user = await self._get_user(user_id, "Internal Server Error.", message="User not found.")
        user.is_admin = True
        with persistence_errors("Internal Server Error."):
            await self.session.commit()
            await self.session.refresh(user)

        await logger.ainfo("user_promoted_to_admin", user_id=user_id, admin_user=context.user_id)
        return user

    async def _get_user(
        self, user_id: str, failure_message: str, *, message: str = "User not found"
    ) -> UserModel:
        with persistence_errors(failure_message):
            user = await self.session.get(UserModel, user_id)
        if user is None:
            raise NotFoundError(message)
        return user
