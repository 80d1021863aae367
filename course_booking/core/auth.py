from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt
import structlog
from course_booking.core.config import get_settings
from course_booking.core.errors import InvalidTokenError, MissingTokenError

logger = structlog.get_logger()

# Length of "Bearer ". The prefix itself is not inspected.
BEARER_PREFIX_LENGTH = 7

_IDENTITY_CLAIMS = ("id", "email", "isAdmin")


class TokenService:
    """Issue and statelessly verify signed session tokens.

    Tokens are HS256 JWTs carrying ``id``, ``email`` and ``isAdmin``. When
    ``expiry`` is ``None`` no ``exp`` claim is written, so a token stays valid
    for as long as the signing secret does.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expiry: timedelta | None = None,
    ) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.expiry = expiry

    def issue(self, *, user_id: str, email: str, is_admin: bool) -> str:
        """Generate a signed token for an authenticated identity."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "id": user_id,
            "email": email,
            "isAdmin": is_admin,
            "iat": int(now.timestamp()),
        }
        if self.expiry is not None:
            payload["exp"] = int((now + self.expiry).timestamp())

        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, header_value: str | None) -> dict[str, Any]:
        """Verify a raw Authorization header value and return its identity claims."""
        if header_value is None:
            raise MissingTokenError("Failed. No token")

        token = header_value[BEARER_PREFIX_LENGTH:]
        required = [*_IDENTITY_CLAIMS, "exp"] if self.expiry is not None else list(_IDENTITY_CLAIMS)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": required},
            )
        except jwt.PyJWTError as exc:
            logger.warning("token_rejected", reason=str(exc))
            raise InvalidTokenError(str(exc)) from exc

        _ensure_well_formed(payload)
        return {claim: payload[claim] for claim in _IDENTITY_CLAIMS}


def _ensure_well_formed(payload: dict[str, Any]) -> None:
    if not isinstance(payload["id"], str) or not payload["id"]:
        raise InvalidTokenError("Token id claim must be a non-empty string")
    if not isinstance(payload["email"], str):
        raise InvalidTokenError("Token email claim must be a string")
    if not isinstance(payload["isAdmin"], bool):
        raise InvalidTokenError("Token isAdmin claim must be a boolean")


@lru_cache
def get_token_service() -> TokenService:
    """Return the process-wide token service built from settings."""
    settings = get_settings()
    ttl = settings.access_token_ttl_seconds
    return TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiry=timedelta(seconds=ttl) if ttl else None,
    )
