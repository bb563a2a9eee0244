"""Tests for the outcome decider, delay policy and ID generation."""

import random
import re
from dataclasses import replace

import pytest

from gateway.config import Settings
from gateway.engine.delay import processing_delay_ms
from gateway.engine.ids import generate_order_id, generate_payment_id
from gateway.engine.outcome import ProcessingConfig, decide_outcome, failure_details


class FixedRandom:
    """Random source whose draws always return the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


LIVE = ProcessingConfig()


class TestTestMode:
    def test_forced_success(self):
        config = ProcessingConfig(test_mode=True, test_payment_success=True)
        assert decide_outcome("upi", config, FixedRandom(0.99), vpa="someone@else") is True
        assert decide_outcome("card", config, FixedRandom(0.99), card_number="4000000000000002") is True

    def test_forced_failure(self):
        config = ProcessingConfig(test_mode=True, test_payment_success=False)
        assert decide_outcome("upi", config, FixedRandom(0.0), vpa="username@bank") is False
        assert decide_outcome("card", config, FixedRandom(0.0), card_number="4532015112830366") is False


class TestUpi:
    def test_success_vpa(self):
        assert decide_outcome("upi", LIVE, FixedRandom(0.5), vpa="username@bank") is True

    def test_any_other_vpa_fails(self):
        assert decide_outcome("upi", LIVE, FixedRandom(0.0), vpa="user@bank") is False

    def test_configured_success_vpa(self):
        config = replace(LIVE, upi_success_vpa="merchant@okicici")
        assert decide_outcome("upi", config, FixedRandom(0.0), vpa="merchant@okicici") is True
        assert decide_outcome("upi", config, FixedRandom(0.0), vpa="username@bank") is False


class TestCard:
    def test_decline_card_always_fails(self):
        config = replace(LIVE, card_success_rate=1.0)
        assert decide_outcome("card", config, FixedRandom(0.0), card_number="4000000000000002") is False

    def test_decline_card_with_separators(self):
        config = replace(LIVE, card_success_rate=1.0)
        assert decide_outcome("card", config, FixedRandom(0.0), card_number="4000 0000 0000 0002") is False

    def test_draw_below_rate_succeeds(self):
        assert decide_outcome("card", LIVE, FixedRandom(0.94), card_number="4532015112830366") is True

    def test_draw_at_rate_fails(self):
        assert decide_outcome("card", LIVE, FixedRandom(0.95), card_number="4532015112830366") is False

    def test_seeded_rng_is_reproducible(self):
        draws = [
            decide_outcome("card", replace(LIVE, card_success_rate=0.5), random.Random(1234), card_number="4532015112830366")
            for _ in range(3)
        ]
        assert len(set(draws)) == 1


class TestOtherMethods:
    def test_unknown_method_fails(self):
        assert decide_outcome("netbanking", LIVE, FixedRandom(0.0)) is False


class TestFailureDetails:
    def test_upi(self):
        details = failure_details("upi")
        assert details.code == "PAYMENT_FAILED"
        assert details.description == "UPI payment failed"

    def test_card(self):
        assert failure_details("card").description == "Card payment failed"

    def test_generic(self):
        assert failure_details("wallet").description == "Payment processing failed"


class TestProcessingConfig:
    def test_from_settings(self):
        config = ProcessingConfig.from_settings(Settings(
            test_mode=True,
            card_success_rate=0.5,
            processing_delay_min_ms=10,
            processing_delay_max_ms=20,
        ))
        assert config.test_mode is True
        assert config.card_success_rate == 0.5
        assert config.processing_delay_min_ms == 10
        assert config.upi_success_vpa == "username@bank"
        assert config.decline_card_number == "4000000000000002"

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            LIVE.card_success_rate = 0.1  # type: ignore[misc]

    def test_rejects_bad_success_rate(self):
        with pytest.raises(ValueError):
            ProcessingConfig(card_success_rate=1.5)

    def test_rejects_inverted_delay_bounds(self):
        with pytest.raises(ValueError):
            ProcessingConfig(processing_delay_min_ms=100, processing_delay_max_ms=50)


class TestDelay:
    def test_test_mode_uses_fixed_delay(self):
        config = ProcessingConfig(test_mode=True, test_processing_delay_ms=1234)
        assert processing_delay_ms(config, random.Random(0)) == 1234

    def test_default_bounds(self):
        rng = random.Random(99)
        for _ in range(500):
            assert 5000 <= processing_delay_ms(LIVE, rng) <= 10000

    def test_bounds_are_inclusive(self):
        config = ProcessingConfig(processing_delay_min_ms=1, processing_delay_max_ms=2)
        rng = random.Random(5)
        seen = {processing_delay_ms(config, rng) for _ in range(200)}
        assert seen == {1, 2}

    def test_equal_bounds(self):
        config = ProcessingConfig(processing_delay_min_ms=0, processing_delay_max_ms=0)
        assert processing_delay_ms(config, random.Random(0)) == 0


class TestIds:
    def test_order_id_format(self):
        assert re.fullmatch(r"order_[0-9a-f]{16}", generate_order_id())

    def test_payment_id_format(self):
        assert re.fullmatch(r"pay_[0-9a-f]{16}", generate_payment_id())

    def test_ids_differ(self):
        assert len({generate_payment_id() for _ in range(100)}) == 100
