from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from jose import JWTError, jwt

from shoplytics.app.core.config import settings

ALGORITHM = "HS256"


class InvalidTokenError(ValueError):
    pass


@dataclass(frozen=True)
class TokenUser:
    """Identity carried by a backend-issued access token."""

    id: str
    role: str
    type: str = "user"
    email: str | None = None


def decode_access_token(token: str) -> TokenUser:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError("Invalid authentication token") from exc

    user_id = payload.get("id")
    role = payload.get("role")
    if not user_id or not role:
        raise InvalidTokenError("Invalid authentication token")
    return TokenUser(
        id=str(user_id),
        role=str(role).upper(),
        type=payload.get("type", "user"),
        email=payload.get("email"),
    )


def create_access_token(
    user_id: str,
    role: str,
    token_type: str = "user",
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token in the backend's format (used by tests and local tooling)."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=24))
    to_encode = {"id": user_id, "role": role, "type": token_type, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=ALGORITHM)


def has_role(user: TokenUser, roles: Iterable[str]) -> bool:
    return user.role in {r.upper() for r in roles}
