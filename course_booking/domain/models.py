from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class AuthenticatedContext:
    """Identity of a caller whose session token has been verified.

    Only the ``authenticate`` dependency builds one from a verified token;
    role checks accept it as a parameter instead of reading request state.
    """

    user_id: str
    email: str
    is_admin: bool = False

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> AuthenticatedContext:
        return cls(user_id=claims["id"], email=claims["email"], is_admin=claims["isAdmin"])
