"""Product catalog endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..core import errors
from ..core.db import commit_or_raise, get_session
from ..models import Product
from .common import CamelModel, SuccessResponse

router = APIRouter()


class ProductRequest(CamelModel):
    name: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    status: Optional[str] = None
    image: Optional[str] = None


class ProductOut(CamelModel):
    id: str
    name: str
    price: float
    stock: int
    status: str
    image: str
    created_at: Optional[datetime] = None


def _get_product(session: Session, product_id: str) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise errors.NotFound("Product not found")
    return product


@router.get("", summary="List products")
def list_products(session: Session = Depends(get_session)) -> dict[str, Any]:
    products = session.execute(select(Product).order_by(Product.created_at.desc())).scalars().all()
    return {"products": [ProductOut.model_validate(product) for product in products]}


@router.get("/{product_id}", summary="Get a product")
def get_product(product_id: str, session: Session = Depends(get_session)) -> dict[str, Any]:
    return {"product": ProductOut.model_validate(_get_product(session, product_id))}


@router.post("", dependencies=[Depends(require_admin)], summary="Create a product")
def create_product(payload: ProductRequest, session: Session = Depends(get_session)) -> dict[str, Any]:
    if not payload.name:
        raise errors.ValidationError("Product name is required")
    product = Product(
        name=payload.name,
        price=payload.price or 0,
        stock=payload.stock or 0,
        status=payload.status or "available",
        image=payload.image or "",
    )
    session.add(product)
    commit_or_raise(session, "create_product")
    session.refresh(product)
    return {"product": ProductOut.model_validate(product)}


@router.put("/{product_id}", dependencies=[Depends(require_admin)], summary="Update a product")
def update_product(
    product_id: str, payload: ProductRequest, session: Session = Depends(get_session)
) -> dict[str, Any]:
    product = _get_product(session, product_id)
    for field_name in ("name", "price", "stock", "status", "image"):
        value = getattr(payload, field_name)
        if value is not None:
            setattr(product, field_name, value)
    commit_or_raise(session, "update_product")
    session.refresh(product)
    return {"product": ProductOut.model_validate(product)}


@router.delete(
    "/{product_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a product",
)
def delete_product(product_id: str, session: Session = Depends(get_session)) -> SuccessResponse:
    product = _get_product(session, product_id)
    session.delete(product)
    commit_or_raise(session, "delete_product")
    return SuccessResponse()
