"""Password hashing and bearer token utilities."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from pydantic import BaseModel, ValidationError

from .config import settings

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()

REQUIRED_CLAIMS = ("exp", "iat", "sub")


class InvalidToken(Exception):
    """Raised for any token that fails verification.

    Expired, forged and malformed tokens all raise this same exception with
    the same message so callers cannot tell the cases apart.
    """

    def __init__(self) -> None:
        super().__init__("Invalid token")


class TokenClaims(BaseModel):
    """Identity claims carried by a verified bearer token."""

    id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(plaintext: str) -> str:
    return _hasher.hash(plaintext)


def verify_password(plaintext: str, stored_hash: str | None) -> bool:
    """Compare a plaintext password against a stored argon2 hash."""

    if not plaintext or not stored_hash:
        return False
    try:
        return _hasher.verify(stored_hash, plaintext)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        logger.warning("Stored credential hash could not be verified")
        return False


def issue_token(user: Any, *, now: datetime | None = None) -> str:
    """Sign a token embedding the user's id, email and role."""

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "id": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.TOKEN_TTL_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """Decode a bearer token, raising :class:`InvalidToken` on any failure."""

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": list(REQUIRED_CLAIMS)},
        )
        return TokenClaims.model_validate(payload)
    except (jwt.InvalidTokenError, ValidationError) as exc:
        logger.debug("Rejected bearer token: %s", exc.__class__.__name__)
        raise InvalidToken() from None


def sanitize_user(user: Any) -> dict[str, Any] | None:
    """Return the public view of a user row, without its credential hash."""

    if user is None:
        return None
    created_at = user.created_at
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "createdAt": created_at.isoformat() if created_at else None,
    }
