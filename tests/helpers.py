"""Credentials and processing configs shared by the test suite."""

from gateway.engine.outcome import ProcessingConfig

API_KEY = "key_test_abc123"
API_SECRET = "secret_test_xyz789"
AUTH_HEADERS = {"X-Api-Key": API_KEY, "X-Api-Secret": API_SECRET}

OTHER_AUTH_HEADERS = {"X-Api-Key": "key_other_001", "X-Api-Secret": "secret_other_001"}

# Resolve payments immediately with a forced success.
INSTANT_SUCCESS = ProcessingConfig(
    test_mode=True,
    test_payment_success=True,
    test_processing_delay_ms=0,
)
