"""Catalog product model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, func

from . import Base, generate_id


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="available", server_default="available")
    image = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
