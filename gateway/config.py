"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./payment_gateway.db"
    log_level: str = "INFO"

    # Payment processing
    test_mode: bool = False
    test_payment_success: bool = True
    test_processing_delay_ms: int = 1000
    processing_delay_min_ms: int = 5000
    processing_delay_max_ms: int = 10000
    card_success_rate: float = 0.95  # 95% simulated card approval rate
    upi_success_vpa: str = "username@bank"
    decline_card_number: str = "4000000000000002"

    # Seeded demo merchant
    test_merchant_id: str = "550e8400-e29b-41d4-a716-446655440000"
    test_merchant_name: str = "Test Merchant"
    test_merchant_email: str = "test@example.com"
    test_api_key: str = "key_test_abc123"
    test_api_secret: str = "secret_test_xyz789"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
