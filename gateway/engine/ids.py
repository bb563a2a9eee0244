"""Opaque prefixed identifiers for orders and payments."""

import secrets

ORDER_PREFIX = "order_"
PAYMENT_PREFIX = "pay_"


def _new_id(prefix: str) -> str:
    # 8 random bytes -> 16 hex characters
    return f"{prefix}{secrets.token_hex(8)}"


def generate_order_id() -> str:
    return _new_id(ORDER_PREFIX)


def generate_payment_id() -> str:
    return _new_id(PAYMENT_PREFIX)
