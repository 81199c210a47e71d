"""User model definition."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import relationship

from . import Base, generate_id

ROLES = ("user", "admin")


class User(Base):
    """Account holder authenticated with an email and password."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user", server_default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bird_nests = relationship(
        "BirdNest",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"User(id={self.id!s}, email={self.email!r}, role={self.role!r})"
