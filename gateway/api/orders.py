"""
Order endpoints.

POST /orders                   Create an order (authenticated).
GET  /orders/{id}              Get one of the merchant's orders.
GET  /orders/{id}/public       Minimal order view for the checkout page.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, StrictInt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.api.auth import require_merchant
from gateway.database import get_session
from gateway.engine.ids import generate_order_id
from gateway.errors import BadRequestError, NotFoundError
from gateway.models.enums import OrderStatus
from gateway.models.gateway import Merchant, Order

logger = logging.getLogger("payment_gateway.orders")

router = APIRouter(prefix="/orders", tags=["orders"])

MIN_ORDER_AMOUNT = 100


class OrderRequest(BaseModel):
    amount: Optional[StrictInt] = None
    currency: str = "INR"
    receipt: Optional[str] = None
    notes: Optional[dict[str, Any]] = None


class OrderDetail(BaseModel):
    id: str
    merchant_id: str
    amount: int
    currency: str
    receipt: Optional[str]
    notes: dict[str, Any]
    status: str
    created_at: Optional[str]
    updated_at: Optional[str] = None


class PublicOrder(BaseModel):
    id: str
    amount: int
    currency: str
    status: str


def _order_to_detail(order: Order, include_updated: bool = True) -> dict:
    detail = OrderDetail(
        id=order.id,
        merchant_id=order.merchant_id,
        amount=order.amount,
        currency=order.currency,
        receipt=order.receipt,
        notes=json.loads(order.notes) if order.notes else {},
        status=order.status,
        created_at=order.created_at.isoformat() if order.created_at else None,
        updated_at=order.updated_at.isoformat() if order.updated_at else None,
    )
    exclude = None if include_updated else {"updated_at"}
    return detail.model_dump(exclude=exclude)


async def get_merchant_order(session: AsyncSession, order_id: str, merchant_id: str) -> Order:
    """Fetch an order owned by the merchant, or raise NotFoundError."""
    result = await session.execute(
        select(Order).where(Order.id == order_id, Order.merchant_id == merchant_id)
    )
    order = result.scalars().first()
    if order is None:
        raise NotFoundError("Order not found")
    return order


async def get_order(session: AsyncSession, order_id: str) -> Order:
    order = await session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


@router.post("", status_code=201)
async def create_order(
    body: OrderRequest,
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
):
    """Create an order for at least 100 minor currency units."""
    if body.amount is None or body.amount < MIN_ORDER_AMOUNT:
        raise BadRequestError(f"amount must be at least {MIN_ORDER_AMOUNT}")

    order = Order(
        id=generate_order_id(),
        merchant_id=merchant.id,
        amount=body.amount,
        currency=body.currency,
        receipt=body.receipt,
        notes=json.dumps(body.notes) if body.notes else None,
        status=OrderStatus.CREATED.value,
    )
    session.add(order)
    await session.commit()

    logger.info("Order %s created: merchant=%s amount=%d %s", order.id, merchant.id, order.amount, order.currency)
    return _order_to_detail(order, include_updated=False)


@router.get("/{order_id}")
async def read_order(
    order_id: str,
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
):
    """Get one of the authenticated merchant's orders."""
    order = await get_merchant_order(session, order_id, merchant.id)
    return _order_to_detail(order)


@router.get("/{order_id}/public", response_model=PublicOrder)
async def read_public_order(order_id: str, session: AsyncSession = Depends(get_session)):
    """Checkout view of an order: id, amount, currency and status only."""
    order = await get_order(session, order_id)
    return PublicOrder(id=order.id, amount=order.amount, currency=order.currency, status=order.status)
