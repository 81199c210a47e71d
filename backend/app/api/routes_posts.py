"""Blog post endpoints."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy import Select, select
from sqlalchemy.orm import Session, aliased

from ..auth import require_admin
from ..core import errors
from ..core.db import commit_or_raise, get_session
from ..models import Post, PostCategory
from ..services.categories import category_exists
from .common import CamelModel, SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter()

ParentCategory = aliased(PostCategory)


class PostCreateRequest(CamelModel):
    title: Optional[str] = Field(default=None, max_length=512)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[str] = None
    image: Optional[str] = None
    category_id: Optional[str] = None


class PostUpdateRequest(PostCreateRequest):
    pass


class PostOut(CamelModel):
    id: str
    title: str
    content: str
    excerpt: str
    status: str
    image: str
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    parent_category_id: Optional[str] = None
    parent_category_name: Optional[str] = None
    created_at: Optional[datetime] = None


def _posts_with_category() -> Select[Any]:
    return (
        select(
            Post,
            PostCategory.name.label("category_name"),
            PostCategory.parent_id.label("parent_category_id"),
            ParentCategory.name.label("parent_category_name"),
        )
        .join(PostCategory, Post.category_id == PostCategory.id, isouter=True)
        .join(ParentCategory, PostCategory.parent_id == ParentCategory.id, isouter=True)
    )


def _to_post_out(row: Any) -> PostOut:
    post = row[0]
    return PostOut(
        id=post.id,
        title=post.title,
        content=post.content,
        excerpt=post.excerpt,
        status=post.status,
        image=post.image,
        category_id=post.category_id,
        category_name=row.category_name,
        parent_category_id=row.parent_category_id,
        parent_category_name=row.parent_category_name,
        created_at=post.created_at,
    )


def _load_post(session: Session, post_id: str) -> PostOut:
    row = session.execute(_posts_with_category().where(Post.id == post_id)).one_or_none()
    if row is None:
        raise errors.NotFound("Post not found")
    return _to_post_out(row)


def _check_category(session: Session, category_id: str | None) -> None:
    if category_id and not category_exists(session, category_id):
        raise errors.ValidationError("Category does not exist")


@router.get("", summary="List posts")
def list_posts(session: Session = Depends(get_session)) -> dict[str, Any]:
    rows = session.execute(_posts_with_category().order_by(Post.created_at.desc())).all()
    return {"posts": [_to_post_out(row) for row in rows]}


@router.get("/{post_id}", summary="Get a post")
def get_post(post_id: str, session: Session = Depends(get_session)) -> dict[str, Any]:
    return {"post": _load_post(session, post_id)}


@router.post("", dependencies=[Depends(require_admin)], summary="Create a post")
def create_post(payload: PostCreateRequest, session: Session = Depends(get_session)) -> dict[str, Any]:
    if not payload.title:
        raise errors.ValidationError("Title is required")
    category_id = payload.category_id or None
    _check_category(session, category_id)

    post = Post(
        title=payload.title,
        content=payload.content or "",
        excerpt=payload.excerpt or "",
        status=payload.status or "published",
        image=payload.image or "",
        category_id=category_id,
    )
    session.add(post)
    commit_or_raise(session, "create_post")
    return {"post": _load_post(session, post.id)}


@router.put("/{post_id}", dependencies=[Depends(require_admin)], summary="Update a post")
def update_post(
    post_id: str, payload: PostUpdateRequest, session: Session = Depends(get_session)
) -> dict[str, Any]:
    """Update a post; a null ``categoryId`` keeps the category, ``""`` clears it."""

    post = session.get(Post, post_id)
    if post is None:
        raise errors.NotFound("Post not found")

    category_id = post.category_id
    if payload.category_id is not None:
        category_id = payload.category_id or None
    _check_category(session, category_id)

    for field_name in ("title", "content", "excerpt", "status", "image"):
        value = getattr(payload, field_name)
        if value is not None:
            setattr(post, field_name, value)
    post.category_id = category_id
    commit_or_raise(session, "update_post")
    return {"post": _load_post(session, post_id)}


@router.delete(
    "/{post_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a post",
)
def delete_post(post_id: str, session: Session = Depends(get_session)) -> SuccessResponse:
    post = session.get(Post, post_id)
    if post is None:
        raise errors.NotFound("Post not found")
    session.delete(post)
    commit_or_raise(session, "delete_post")
    return SuccessResponse()
