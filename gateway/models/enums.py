"""Enumerations for the payment gateway domain model."""

from enum import Enum


class OrderStatus(str, Enum):
    """Lifecycle states for an order."""

    CREATED = "created"


class PaymentStatus(str, Enum):
    """Lifecycle states for a payment.

    A payment starts in PROCESSING and moves exactly once to SUCCESS or FAILED.
    """

    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    UPI = "upi"
    CARD = "card"


class CardNetwork(str, Enum):
    """Card schemes inferred from the leading digits of a card number."""

    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    RUPAY = "rupay"
    UNKNOWN = "unknown"


class ErrorCode(str, Enum):
    """Error codes returned in the API error envelope."""

    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    BAD_REQUEST_ERROR = "BAD_REQUEST_ERROR"
    NOT_FOUND_ERROR = "NOT_FOUND_ERROR"
    INVALID_VPA = "INVALID_VPA"
    INVALID_CARD = "INVALID_CARD"
    EXPIRED_CARD = "EXPIRED_CARD"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    PAYMENT_FAILED = "PAYMENT_FAILED"
