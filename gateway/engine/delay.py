"""Simulated processing latency before a payment outcome is applied."""

import random

from gateway.engine.outcome import ProcessingConfig


def processing_delay_ms(config: ProcessingConfig, rng: random.Random) -> int:
    """
    Milliseconds to wait before deciding a payment's outcome.

    Test mode returns the fixed test delay. Otherwise a uniform integer in
    [processing_delay_min_ms, processing_delay_max_ms], both ends inclusive.
    """
    if config.test_mode:
        return config.test_processing_delay_ms
    return rng.randint(config.processing_delay_min_ms, config.processing_delay_max_ms)
