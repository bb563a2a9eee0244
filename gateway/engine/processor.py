"""
Payment processor: creation and the deferred status transition.

The lifecycle of a payment:

  1. Instrument validation (VPA syntax, or card Luhn + expiry)
  2. Persist in "processing", amount/currency copied from the order
  3. After the processing delay, decide the outcome and apply it

Step 3 is a single guarded UPDATE (``WHERE status = 'processing'``), so a
concurrent reader sees either "processing" or the complete terminal row, and
a payment can never be transitioned twice.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gateway.engine.ids import generate_payment_id
from gateway.engine.outcome import ProcessingConfig, decide_outcome, failure_details
from gateway.engine.validators import (
    clean_card_number,
    detect_card_network,
    validate_card_number,
    validate_expiry,
    validate_vpa,
)
from gateway.errors import BadRequestError, ExpiredCardError, InvalidCardError, InvalidVpaError
from gateway.models.enums import PaymentMethod, PaymentStatus
from gateway.models.gateway import Order, Payment

logger = logging.getLogger("payment_gateway.processor")

REQUIRED_CARD_FIELDS = ("number", "expiry_month", "expiry_year", "cvv", "holder_name")


@dataclass
class Instrument:
    """A validated payment instrument, ready to persist."""

    method: str
    vpa: Optional[str] = None
    card_number: Optional[str] = None  # cleaned; never persisted
    card_network: Optional[str] = None
    card_last4: Optional[str] = None


def validate_instrument(
    method: str,
    vpa: Optional[str] = None,
    card: Optional[dict[str, Any]] = None,
) -> Instrument:
    """
    Validate the method-specific part of a payment request.

    Raises:
        BadRequestError: Missing fields or unsupported method.
        InvalidVpaError: VPA fails the syntax check.
        InvalidCardError: Card number fails length or Luhn.
        ExpiredCardError: Expiry month is invalid or in the past.
    """
    if method == PaymentMethod.UPI.value:
        if not vpa:
            raise BadRequestError("vpa is required for UPI payments")
        if not validate_vpa(vpa):
            raise InvalidVpaError()
        return Instrument(method=method, vpa=vpa)

    if method == PaymentMethod.CARD.value:
        if not card or any(not card.get(field) for field in REQUIRED_CARD_FIELDS):
            raise BadRequestError(
                "card object must contain number, expiry_month, expiry_year, cvv, and holder_name"
            )
        if not validate_card_number(card["number"]):
            raise InvalidCardError()
        if not validate_expiry(card["expiry_month"], card["expiry_year"]):
            raise ExpiredCardError()

        cleaned = clean_card_number(card["number"])
        return Instrument(
            method=method,
            card_number=cleaned,
            card_network=detect_card_network(cleaned).value,
            card_last4=cleaned[-4:],
        )

    raise BadRequestError("Invalid payment method")


async def create_payment(session: AsyncSession, order: Order, instrument: Instrument) -> Payment:
    """
    Persist a new payment for an order in "processing".

    Amount and currency always come from the order, never from the caller.
    """
    payment = Payment(
        id=generate_payment_id(),
        order_id=order.id,
        merchant_id=order.merchant_id,
        amount=order.amount,
        currency=order.currency,
        method=instrument.method,
        status=PaymentStatus.PROCESSING.value,
        vpa=instrument.vpa,
        card_network=instrument.card_network,
        card_last4=instrument.card_last4,
    )
    session.add(payment)
    await session.commit()

    logger.info(
        "Payment %s created for order %s: method=%s amount=%d %s",
        payment.id,
        order.id,
        payment.method,
        payment.amount,
        payment.currency,
    )
    return payment


async def apply_outcome(session: AsyncSession, payment_id: str, method: str, succeeded: bool) -> bool:
    """
    Move a processing payment to its terminal state in one statement.

    Returns:
        True if the payment was transitioned, False if it was missing or
        already terminal.
    """
    values: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
    if succeeded:
        values["status"] = PaymentStatus.SUCCESS.value
    else:
        details = failure_details(method)
        values.update(
            status=PaymentStatus.FAILED.value,
            error_code=details.code,
            error_description=details.description,
        )

    result = await session.execute(
        update(Payment)
        .where(Payment.id == payment_id, Payment.status == PaymentStatus.PROCESSING.value)
        .values(**values)
    )
    await session.commit()
    return result.rowcount == 1


async def process_payment(
    session_factory: async_sessionmaker[AsyncSession],
    payment_id: str,
    method: str,
    config: ProcessingConfig,
    rng: random.Random,
    vpa: Optional[str] = None,
    card_number: Optional[str] = None,
) -> Optional[PaymentStatus]:
    """
    Decide and apply the outcome of a processing payment.

    Runs after the processing delay, outside any request. A store failure is
    logged and the payment is left in "processing"; it is not retried.

    Returns:
        The terminal status applied, or None if nothing changed.
    """
    succeeded = decide_outcome(method, config, rng, vpa=vpa, card_number=card_number)
    status = PaymentStatus.SUCCESS if succeeded else PaymentStatus.FAILED

    try:
        async with session_factory() as session:
            applied = await apply_outcome(session, payment_id, method, succeeded)
    except SQLAlchemyError:
        logger.exception("Failed to apply outcome for payment %s; left in processing", payment_id)
        return None

    if not applied:
        logger.warning("Payment %s was not in processing; outcome %s discarded", payment_id, status.value)
        return None

    logger.info("Payment %s -> %s", payment_id, status.value)
    return status


async def count_stalled_payments(session: AsyncSession) -> int:
    """Number of payments still in "processing"."""
    result = await session.execute(
        select(func.count()).select_from(Payment).where(
            Payment.status == PaymentStatus.PROCESSING.value
        )
    )
    return result.scalar_one()
