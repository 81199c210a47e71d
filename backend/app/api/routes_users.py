"""Account administration endpoints."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..core import errors
from ..core.db import commit_or_raise, get_session
from ..core.security import TokenClaims, hash_password, sanitize_user
from ..models import User
from ..models.users import ROLES
from .common import CamelModel, SuccessResponse
from .routes_auth import find_user_by_email, normalize_email

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


class UserCreateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class RoleUpdateRequest(CamelModel):
    role: Optional[str] = None


def _get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise errors.NotFound("Account not found")
    return user


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise errors.ValidationError("Invalid role")
    return role


@router.get("", summary="List accounts")
def list_users(session: Session = Depends(get_session)) -> dict[str, Any]:
    users = session.execute(select(User).order_by(User.created_at.desc())).scalars().all()
    return {"users": [sanitize_user(user) for user in users]}


@router.post("", summary="Create an account")
def create_user(payload: UserCreateRequest, session: Session = Depends(get_session)) -> dict[str, Any]:
    if not payload.name or not payload.email or not payload.password:
        raise errors.ValidationError("Missing required information")
    if find_user_by_email(session, payload.email) is not None:
        raise errors.ValidationError("Email already exists")

    user = User(
        name=payload.name.strip(),
        email=normalize_email(payload.email),
        password_hash=hash_password(payload.password),
        role=_validate_role(payload.role or "user"),
    )
    session.add(user)
    commit_or_raise(session, "create_user")
    session.refresh(user)
    logger.info("Administrator created user %s role=%s", user.id, user.role)
    return {"user": sanitize_user(user)}


@router.put("/{user_id}/role", summary="Change an account's role")
def update_role(
    user_id: str, payload: RoleUpdateRequest, session: Session = Depends(get_session)
) -> dict[str, Any]:
    role = _validate_role(payload.role or "")
    user = _get_user(session, user_id)
    user.role = role
    commit_or_raise(session, "update_role")
    return {"user": sanitize_user(user)}


@router.put("/{user_id}", summary="Update an account")
def update_user(
    user_id: str, payload: UserUpdateRequest, session: Session = Depends(get_session)
) -> dict[str, Any]:
    """Update profile fields; omitted or empty fields keep their current value."""

    user = _get_user(session, user_id)

    if payload.email and normalize_email(payload.email) != user.email:
        stmt = select(User.id).where(
            func.lower(User.email) == normalize_email(payload.email), User.id != user_id
        )
        if session.execute(stmt).scalar_one_or_none() is not None:
            raise errors.ValidationError("Email already exists")
        user.email = normalize_email(payload.email)
    if payload.name:
        user.name = payload.name.strip()
    if payload.role:
        user.role = _validate_role(payload.role)
    if payload.password:
        user.password_hash = hash_password(payload.password)

    commit_or_raise(session, "update_user")
    return {"user": sanitize_user(user)}


@router.delete("/{user_id}", response_model=SuccessResponse, summary="Delete an account")
def delete_user(
    user_id: str,
    claims: TokenClaims = Depends(require_admin),
    session: Session = Depends(get_session),
) -> SuccessResponse:
    if claims.id == user_id:
        raise errors.ValidationError("You cannot delete your own account")
    user = _get_user(session, user_id)
    session.delete(user)
    commit_or_raise(session, "delete_user")
    logger.info("Administrator %s deleted user %s", claims.id, user_id)
    return SuccessResponse()
