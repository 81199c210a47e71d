"""Post category endpoints."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..core.db import get_session
from ..services import categories as category_service
from .common import CamelModel, SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter()


class CategoryCreateRequest(CamelModel):
    name: Optional[str] = Field(default=None, max_length=255)
    parent_id: Optional[str] = None


class CategoryUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, max_length=255)
    parent_id: Optional[str] = None


class CategoryOut(CamelModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryNodeOut(CategoryOut):
    children: list["CategoryNodeOut"] = Field(default_factory=list)


class CategoryTreeResponse(CamelModel):
    tree: list[CategoryNodeOut]
    flat: list[CategoryOut]


class CategoryResponse(CamelModel):
    category: CategoryOut


@router.get("", response_model=CategoryTreeResponse, summary="Category forest and flat list")
def list_categories(session: Session = Depends(get_session)) -> CategoryTreeResponse:
    """Return the category tree together with the flat, name-ordered rows."""

    snapshot = category_service.build_tree(session)
    return CategoryTreeResponse.model_validate(snapshot)


@router.post(
    "",
    response_model=CategoryResponse,
    dependencies=[Depends(require_admin)],
    summary="Create a category",
)
def create_category(
    payload: CategoryCreateRequest, session: Session = Depends(get_session)
) -> CategoryResponse:
    category = category_service.create_category(session, payload.name, payload.parent_id)
    return CategoryResponse(category=CategoryOut.model_validate(category))


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_admin)],
    summary="Rename or re-parent a category",
)
def update_category(
    category_id: str,
    payload: CategoryUpdateRequest,
    session: Session = Depends(get_session),
) -> CategoryResponse:
    """Apply a rename and/or move; moves that would create a cycle are refused."""

    category = category_service.update_category(
        session, category_id, name=payload.name, parent_id=payload.parent_id
    )
    return CategoryResponse(category=CategoryOut.model_validate(category))


@router.delete(
    "/{category_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a category",
)
def delete_category(category_id: str, session: Session = Depends(get_session)) -> SuccessResponse:
    """Delete a category; children move to the root and posts lose the reference."""

    category_service.delete_category(session, category_id)
    return SuccessResponse()
