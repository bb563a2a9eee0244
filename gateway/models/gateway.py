"""SQLAlchemy models for the payment gateway."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Merchant(Base):
    """
    A merchant account holding an API key/secret pair.

    Seeded once at startup and never mutated by the API. Requests are
    authenticated by an exact key + secret match against an active merchant.
    """

    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    api_key = Column(String(64), nullable=False, unique=True)
    api_secret = Column(String(64), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    orders = relationship("Order", back_populates="merchant", lazy="raise")


class Order(Base):
    """
    A merchant's request to collect an amount.

    Amount is in the smallest currency unit (paise for INR). Amount and
    currency never change after creation.
    """

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    receipt = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)  # JSON object
    status = Column(String(20), nullable=False, default="created")
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    merchant = relationship("Merchant", back_populates="orders")
    payments = relationship("Payment", back_populates="order", lazy="raise")


class Payment(Base):
    """
    A single attempt to pay an order.

    Created in "processing" with amount/currency copied from the order, then
    moved once to "success" or "failed" by the deferred transition. Failed
    payments carry error_code/error_description.
    """

    __tablename__ = "payments"

    id = Column(String(64), primary_key=True)
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    method = Column(String(20), nullable=False)  # upi, card
    status = Column(String(20), nullable=False, default="processing")

    # Method-specific instrument details
    vpa = Column(String(255), nullable=True)
    card_network = Column(String(20), nullable=True)  # visa, mastercard, amex, rupay, unknown
    card_last4 = Column(String(4), nullable=True)

    error_code = Column(String(50), nullable=True)
    error_description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    order = relationship("Order", back_populates="payments")
