"""Category tree management.

Categories are stored as flat rows with a ``parent_id`` pointer. Every call
reads the rows it needs fresh from the session, so cycle checks always run
against committed state and never against a cached copy.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core import errors
from ..core.db import commit_or_raise, rollback_quietly
from ..models import Post, PostCategory

logger = logging.getLogger(__name__)

UNSET: Any = object()


@dataclass
class CategoryNode:
    """Detached snapshot of a category and its ordered children."""

    id: str
    name: str
    parent_id: Optional[str]
    created_at: Optional[datetime]
    children: list["CategoryNode"] = field(default_factory=list)


@dataclass
class CategoryTree:
    tree: list[CategoryNode]
    flat: list[CategoryNode]


def category_exists(session: Session, category_id: str | None) -> bool:
    """Return whether a category with ``category_id`` exists."""

    if not category_id:
        return False
    stmt = select(PostCategory.id).where(PostCategory.id == category_id)
    return session.execute(stmt).scalar_one_or_none() is not None


def get_category(session: Session, category_id: str) -> PostCategory:
    category = session.get(PostCategory, category_id)
    if category is None:
        raise errors.NotFound("Category not found")
    return category


def build_tree(session: Session) -> CategoryTree:
    """Assemble the category forest.

    Siblings are ordered case-insensitively by name at every level, ties
    broken by id. Rows whose parent is missing from the set are treated as
    roots so a dangling pointer never hides a subtree.
    """

    stmt = select(PostCategory).order_by(func.lower(PostCategory.name), PostCategory.id)
    rows = session.execute(stmt).scalars().all()

    flat = [
        CategoryNode(id=row.id, name=row.name, parent_id=row.parent_id, created_at=row.created_at)
        for row in rows
    ]
    known_ids = {node.id for node in flat}

    roots: list[CategoryNode] = []
    children_of: dict[str, list[CategoryNode]] = defaultdict(list)
    for node in flat:
        if node.parent_id and node.parent_id in known_ids:
            children_of[node.parent_id].append(node)
        else:
            roots.append(node)

    def _materialize(node: CategoryNode) -> CategoryNode:
        return CategoryNode(
            id=node.id,
            name=node.name,
            parent_id=node.parent_id,
            created_at=node.created_at,
            children=[_materialize(child) for child in children_of.get(node.id, [])],
        )

    return CategoryTree(tree=[_materialize(root) for root in roots], flat=flat)


def create_category(session: Session, name: str | None, parent_id: str | None = None) -> PostCategory:
    """Create a category, optionally below ``parent_id``."""

    cleaned = (name or "").strip()
    if not cleaned:
        raise errors.ValidationError("Category name is required")

    parent_id = parent_id or None
    if parent_id is not None and not category_exists(session, parent_id):
        raise errors.ParentNotFound()

    category = PostCategory(name=cleaned, parent_id=parent_id)
    session.add(category)
    commit_or_raise(session, "create_category")
    session.refresh(category)
    logger.info("Created category %s parent=%s", category.id, parent_id)
    return category


def update_category(
    session: Session,
    category_id: str,
    name: str | None = None,
    parent_id: Any = UNSET,
) -> PostCategory:
    """Rename and/or re-parent a category.

    ``parent_id`` left unset or ``None`` keeps the current parent; an empty
    string moves the category to the root level. Structural checks all run
    before anything is written.
    """

    category = get_category(session, category_id)

    new_parent_id = category.parent_id
    if parent_id is not UNSET and parent_id is not None:
        if parent_id == category_id:
            raise errors.InvalidParent()
        new_parent_id = parent_id or None
        if new_parent_id is not None:
            if not category_exists(session, new_parent_id):
                raise errors.ParentNotFound()
            if _is_descendant(session, new_parent_id, category_id):
                raise errors.InvalidParent()

    cleaned = (name or "").strip()
    if cleaned:
        category.name = cleaned
    category.parent_id = new_parent_id
    commit_or_raise(session, "update_category")
    session.refresh(category)
    logger.info("Updated category %s parent=%s", category.id, category.parent_id)
    return category


def delete_category(session: Session, category_id: str) -> None:
    """Delete a category, orphaning its children to root and clearing posts.

    The three statements commit together or not at all.
    """

    category = get_category(session, category_id)

    try:
        session.execute(
            update(PostCategory)
            .where(PostCategory.parent_id == category_id)
            .values(parent_id=None)
            .execution_options(synchronize_session=False)
        )
        session.execute(
            update(Post)
            .where(Post.category_id == category_id)
            .values(category_id=None)
            .execution_options(synchronize_session=False)
        )
        session.delete(category)
        session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Storage failure while deleting category %s", category_id)
        rollback_quietly(session, "delete_category")
        raise errors.StorageError() from exc
    session.expire_all()
    logger.info("Deleted category %s", category_id)


def _is_descendant(session: Session, candidate_id: str, ancestor_id: str) -> bool:
    """Return whether ``ancestor_id`` appears on the parent chain of ``candidate_id``."""

    parents = dict(session.execute(select(PostCategory.id, PostCategory.parent_id)).all())
    seen: set[str] = set()
    current: Optional[str] = candidate_id
    while current is not None and current not in seen:
        if current == ancestor_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False

