"""
Payment outcome decision.

Decides whether a processing payment ends in success or failure. The decision
is a pure function of the payment method, the instrument, an immutable
ProcessingConfig and an explicit random source, so tests can pin the outcome
with a seeded ``random.Random`` instead of touching process-wide state.

Rules, in order:
  1. Test mode forces the configured outcome.
  2. UPI succeeds only for the configured success VPA.
  3. Card: the configured decline card always fails; any other card succeeds
     with probability ``card_success_rate``.
  4. Anything else fails.
"""

import random
from dataclasses import dataclass
from typing import Optional

from gateway.config import Settings
from gateway.engine.validators import clean_card_number
from gateway.models.enums import ErrorCode, PaymentMethod


@dataclass(frozen=True)
class ProcessingConfig:
    """Processing knobs, frozen once at startup."""

    test_mode: bool = False
    test_payment_success: bool = True
    test_processing_delay_ms: int = 1000
    processing_delay_min_ms: int = 5000
    processing_delay_max_ms: int = 10000
    card_success_rate: float = 0.95
    upi_success_vpa: str = "username@bank"
    decline_card_number: str = "4000000000000002"

    def __post_init__(self):
        if not 0.0 <= self.card_success_rate <= 1.0:
            raise ValueError(f"card_success_rate must be in [0, 1], got {self.card_success_rate}")
        if self.processing_delay_min_ms > self.processing_delay_max_ms:
            raise ValueError(
                f"processing_delay_min_ms ({self.processing_delay_min_ms}) exceeds "
                f"processing_delay_max_ms ({self.processing_delay_max_ms})"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProcessingConfig":
        return cls(
            test_mode=settings.test_mode,
            test_payment_success=settings.test_payment_success,
            test_processing_delay_ms=settings.test_processing_delay_ms,
            processing_delay_min_ms=settings.processing_delay_min_ms,
            processing_delay_max_ms=settings.processing_delay_max_ms,
            card_success_rate=settings.card_success_rate,
            upi_success_vpa=settings.upi_success_vpa,
            decline_card_number=settings.decline_card_number,
        )


@dataclass(frozen=True)
class FailureDetails:
    """Error fields stamped on a failed payment."""

    code: str
    description: str


FAILURE_DESCRIPTIONS = {
    PaymentMethod.UPI.value: "UPI payment failed",
    PaymentMethod.CARD.value: "Card payment failed",
}
GENERIC_FAILURE_DESCRIPTION = "Payment processing failed"


def decide_outcome(
    method: str,
    config: ProcessingConfig,
    rng: random.Random,
    vpa: Optional[str] = None,
    card_number: Optional[str] = None,
) -> bool:
    """
    Decide whether a payment succeeds.

    Args:
        method: Payment method ("upi" or "card").
        config: Frozen processing configuration.
        rng: Random source used for the weighted card draw.
        vpa: The UPI address, for UPI payments.
        card_number: The full card number, for card payments.

    Returns:
        True for success, False for failure.
    """
    if config.test_mode:
        return config.test_payment_success

    if method == PaymentMethod.UPI.value:
        return vpa == config.upi_success_vpa

    if method == PaymentMethod.CARD.value:
        if card_number and clean_card_number(card_number) == config.decline_card_number:
            return False
        return rng.random() < config.card_success_rate

    return False


def failure_details(method: str) -> FailureDetails:
    """Error code and description for a failed payment of the given method."""
    return FailureDetails(
        code=ErrorCode.PAYMENT_FAILED.value,
        description=FAILURE_DESCRIPTIONS.get(method, GENERIC_FAILURE_DESCRIPTION),
    )
