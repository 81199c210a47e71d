"""Hierarchical post categories."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String, func

from . import Base, generate_id


class PostCategory(Base):
    """A node of the category forest; ``parent_id`` is null for roots."""

    __tablename__ = "post_categories"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    parent_id = Column(
        String(64),
        ForeignKey("post_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"PostCategory(id={self.id!s}, name={self.name!r}, parent_id={self.parent_id!s})"
