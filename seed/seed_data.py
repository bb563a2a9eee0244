"""
Seed the database with the demo merchant.

Creates the test merchant whose credentials come from the environment
(TEST_MERCHANT_EMAIL, TEST_API_KEY, TEST_API_SECRET). Safe to run repeatedly.

Run:
    python -m seed.seed_data
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gateway.database import async_session, init_db, seed_test_merchant


async def seed():
    """Seed the database with the demo merchant."""
    await init_db()

    async with async_session() as session:
        merchant = await seed_test_merchant(session)
        print(f"Merchant {merchant.email}: api_key={merchant.api_key}")


if __name__ == "__main__":
    asyncio.run(seed())
