"""Customer order model."""
from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Float, String, Text, func

from . import Base, generate_id


class Order(Base):
    """An order placed through the shop or recorded by an administrator."""

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=generate_id)
    code = Column(String, nullable=False)
    customer_name = Column(String, nullable=False)
    total = Column(Float, nullable=False, default=0)
    date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default="pending", server_default="pending")
    phone = Column(String, nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
