from gateway.models.enums import CardNetwork, ErrorCode, OrderStatus, PaymentMethod, PaymentStatus
from gateway.models.gateway import Base, Merchant, Order, Payment

__all__ = [
    "Base",
    "Merchant",
    "Order",
    "Payment",
    "CardNetwork",
    "ErrorCode",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
]
