"""Incubation tracker records owned by a single user."""
from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from . import Base, generate_id


class BirdNest(Base):
    """A nest being incubated, counted down towards its hatch date.

    Rows are never edited one at a time: the owner's whole collection is
    replaced by :func:`backend.app.services.bird_nests.replace_all`.
    """

    __tablename__ = "bird_nests"

    id = Column(String(64), primary_key=True, default=generate_id)
    owner_id = Column(
        "user_id",
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False, default="")
    hatch_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)

    owner = relationship("User", back_populates="bird_nests")
