"""
Payment endpoints.

POST /payments                   Submit a payment for one of the merchant's orders.
GET  /payments                   List the merchant's payments, newest first.
GET  /payments/stats             Dashboard totals for the merchant.
GET  /payments/{id}              Get one of the merchant's payments.
POST /payments/public            Checkout variant, scoped only by order id.
GET  /payments/{id}/public       Checkout status polling.

Payments are returned in "processing"; the outcome is applied later by the
TransitionScheduler and observed by polling.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.api.auth import require_merchant
from gateway.api.orders import get_merchant_order, get_order
from gateway.database import get_session
from gateway.engine.processor import create_payment, validate_instrument
from gateway.engine.scheduler import TransitionScheduler
from gateway.errors import BadRequestError, NotFoundError
from gateway.models.enums import PaymentMethod, PaymentStatus
from gateway.models.gateway import Merchant, Order, Payment

router = APIRouter(prefix="/payments", tags=["payments"])


class CardDetails(BaseModel):
    number: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cvv: Optional[str] = None
    holder_name: Optional[str] = None

    model_config = {"coerce_numbers_to_str": True}


class PaymentRequest(BaseModel):
    order_id: Optional[str] = None
    method: Optional[str] = None
    vpa: Optional[str] = None
    card: Optional[CardDetails] = None


class PaymentStats(BaseModel):
    total_transactions: int
    total_amount: int
    success_rate: int


def get_scheduler(request: Request) -> TransitionScheduler:
    return request.app.state.scheduler


def _payment_to_response(p: Payment, include_updated: bool = True) -> dict:
    """Serialize a payment, omitting fields that do not apply to it."""
    data = {
        "id": p.id,
        "order_id": p.order_id,
        "amount": p.amount,
        "currency": p.currency,
        "method": p.method,
        "status": p.status,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }
    if include_updated:
        data["updated_at"] = p.updated_at.isoformat() if p.updated_at else None

    if p.vpa:
        data["vpa"] = p.vpa
    if p.method == PaymentMethod.CARD.value:
        data["card_network"] = p.card_network
        data["card_last4"] = p.card_last4
    if p.error_code:
        data["error_code"] = p.error_code
        data["error_description"] = p.error_description
    return data


def _require_order_and_method(body: PaymentRequest) -> None:
    if not body.order_id:
        raise BadRequestError("order_id is required")
    if not body.method:
        raise BadRequestError("method is required")


async def _submit_payment(
    session: AsyncSession,
    scheduler: TransitionScheduler,
    order: Order,
    body: PaymentRequest,
) -> dict:
    instrument = validate_instrument(
        body.method,
        vpa=body.vpa,
        card=body.card.model_dump() if body.card else None,
    )
    payment = await create_payment(session, order, instrument)
    scheduler.schedule(
        payment.id,
        payment.method,
        vpa=instrument.vpa,
        card_number=instrument.card_number,
    )
    return _payment_to_response(payment, include_updated=False)


@router.post("", status_code=201)
async def create_merchant_payment(
    body: PaymentRequest,
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
    scheduler: TransitionScheduler = Depends(get_scheduler),
):
    """Submit a UPI or card payment for one of the merchant's orders."""
    _require_order_and_method(body)
    order = await get_merchant_order(session, body.order_id, merchant.id)
    return await _submit_payment(session, scheduler, order, body)


@router.get("")
async def list_payments(
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
):
    """List the merchant's payments, newest first."""
    result = await session.execute(
        select(Payment)
        .where(Payment.merchant_id == merchant.id)
        .order_by(Payment.created_at.desc())
    )
    return [_payment_to_response(p) for p in result.scalars().all()]


@router.get("/stats", response_model=PaymentStats)
async def payment_stats(
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
):
    """
    Dashboard totals for the merchant.

    total_amount sums successful payments only; success_rate is a rounded
    percentage of all payments, 0 when there are none.
    """
    result = await session.execute(
        select(Payment.status, Payment.amount).where(Payment.merchant_id == merchant.id)
    )
    rows = result.all()

    successful = [amount for status, amount in rows if status == PaymentStatus.SUCCESS.value]
    total = len(rows)
    return PaymentStats(
        total_transactions=total,
        total_amount=sum(successful),
        success_rate=round(len(successful) * 100 / total) if total else 0,
    )


@router.post("/public", status_code=201)
async def create_public_payment(
    body: PaymentRequest,
    session: AsyncSession = Depends(get_session),
    scheduler: TransitionScheduler = Depends(get_scheduler),
):
    """Checkout payment submission; the order id is the only scope."""
    _require_order_and_method(body)
    order = await get_order(session, body.order_id)
    return await _submit_payment(session, scheduler, order, body)


@router.get("/{payment_id}")
async def get_payment(
    payment_id: str,
    merchant: Merchant = Depends(require_merchant),
    session: AsyncSession = Depends(get_session),
):
    """Get one of the merchant's payments."""
    result = await session.execute(
        select(Payment).where(Payment.id == payment_id, Payment.merchant_id == merchant.id)
    )
    payment = result.scalars().first()
    if payment is None:
        raise NotFoundError("Payment not found")
    return _payment_to_response(payment)


@router.get("/{payment_id}/public")
async def get_public_payment(payment_id: str, session: AsyncSession = Depends(get_session)):
    """Checkout status polling by payment id."""
    payment = await session.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")
    return _payment_to_response(payment)
