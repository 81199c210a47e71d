"""Registration and login endpoints issuing bearer tokens."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..auth import require_user
from ..core import errors
from ..core.config import settings
from ..core.db import commit_or_raise, get_session
from ..core.rate_limiter import limiter
from ..core.security import TokenClaims, hash_password, issue_token, sanitize_user, verify_password
from ..models import User
from .common import CamelModel

router = APIRouter()

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect email or password"


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(session: Session, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    return session.execute(stmt).scalar_one_or_none()


def _token_response(user: User) -> dict[str, Any]:
    return {"token": issue_token(user), "user": sanitize_user(user)}


@router.post("/register", summary="Create an account and log in")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def register(
    payload: RegisterRequest,
    request: Request,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Register a regular user and return a token for it."""

    if not payload.name or not payload.email or not payload.password:
        raise errors.ValidationError("Missing required information")
    if find_user_by_email(session, payload.email) is not None:
        raise errors.ValidationError("Email is already in use")

    user = User(
        name=payload.name.strip(),
        email=normalize_email(payload.email),
        password_hash=hash_password(payload.password),
        role="user",
    )
    session.add(user)
    commit_or_raise(session, "register")
    session.refresh(user)
    logger.info("Registered user %s", user.id)
    return _token_response(user)


def _login(session: Session, payload: LoginRequest, *, admin_only: bool = False) -> dict[str, Any]:
    if not payload.email or not payload.password:
        raise errors.ValidationError("Missing required information")

    user = find_user_by_email(session, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login attempt admin_only=%s", admin_only)
        raise errors.ValidationError(INVALID_CREDENTIALS)
    if admin_only and not user.is_admin:
        raise errors.Forbidden("This account has no administrator access")
    return _token_response(user)


@router.post("/login", summary="Log in with email and password")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def login(
    payload: LoginRequest,
    request: Request,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    return _login(session, payload)


@router.post("/admin-login", summary="Log in to the administration area")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def admin_login(
    payload: LoginRequest,
    request: Request,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Same as ``/login`` but refuses accounts without the admin role."""

    return _login(session, payload, admin_only=True)


@router.get("/me", summary="Current user profile")
def read_current_user(
    claims: TokenClaims = Depends(require_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    user = session.get(User, claims.id)
    if user is None:
        raise errors.Unauthenticated()
    return {"user": sanitize_user(user)}
