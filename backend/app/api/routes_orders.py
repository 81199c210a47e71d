"""Order endpoints for the shop checkout and the admin area."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..core import errors
from ..core.db import commit_or_raise, get_session
from ..models import Order
from .common import CamelModel

logger = logging.getLogger(__name__)
router = APIRouter()


class OrderItem(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    price: float = 0
    qty: int = 1


class OrderCreateRequest(CamelModel):
    code: Optional[str] = None
    customer_name: Optional[str] = None
    total: Optional[float] = None
    date: Optional[datetime] = None
    status: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    items: list[dict[str, Any]] = Field(default_factory=list)


class PublicOrderRequest(CamelModel):
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    items: Optional[list[OrderItem]] = None


class OrderOut(CamelModel):
    id: str
    code: str
    customer_name: str
    total: float
    date: datetime
    status: str
    phone: str
    address: str
    items: list[Any]
    created_at: Optional[datetime] = None


def _order_code() -> str:
    return f"DH-{int(time.time() * 1000)}"


def order_total(items: list[OrderItem]) -> float:
    """Sum ``price * qty`` over the submitted line items."""

    return sum(item.price * (item.qty or 1) for item in items)


def _save(session: Session, order: Order, operation: str) -> dict[str, Any]:
    session.add(order)
    commit_or_raise(session, operation)
    session.refresh(order)
    logger.info("Stored order %s total=%.2f", order.code, order.total)
    return {"order": OrderOut.model_validate(order)}


@router.get("", dependencies=[Depends(require_admin)], summary="List orders")
def list_orders(session: Session = Depends(get_session)) -> dict[str, Any]:
    orders = session.execute(select(Order).order_by(Order.created_at.desc())).scalars().all()
    return {"orders": [OrderOut.model_validate(order) for order in orders]}


@router.post("", dependencies=[Depends(require_admin)], summary="Record an order")
def create_order(payload: OrderCreateRequest, session: Session = Depends(get_session)) -> dict[str, Any]:
    if not payload.customer_name:
        raise errors.ValidationError("Missing order information")
    order = Order(
        code=payload.code or _order_code(),
        customer_name=payload.customer_name,
        total=payload.total or 0,
        date=payload.date or datetime.now(timezone.utc),
        status=payload.status or "pending",
        phone=payload.phone or "",
        address=payload.address or "",
        items=payload.items,
    )
    return _save(session, order, "create_order")


@router.post("/public", summary="Place an order from the shop")
def create_public_order(
    payload: PublicOrderRequest, session: Session = Depends(get_session)
) -> dict[str, Any]:
    """Checkout for anonymous customers; the total is computed server-side."""

    if not payload.customer_name or not payload.phone or not payload.address or not payload.items:
        raise errors.ValidationError("Missing order information")
    order = Order(
        code=_order_code(),
        customer_name=payload.customer_name,
        total=order_total(payload.items),
        date=datetime.now(timezone.utc),
        status="pending",
        phone=payload.phone,
        address=payload.address,
        items=[item.model_dump(by_alias=True) for item in payload.items],
    )
    return _save(session, order, "create_public_order")
