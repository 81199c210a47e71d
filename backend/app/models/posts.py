"""Blog post model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from . import Base, generate_id


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(64), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="published", server_default="published")
    image = Column(Text, nullable=False, default="")
    category_id = Column(
        String(64),
        ForeignKey("post_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
