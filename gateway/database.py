"""Database engine and session management."""

import logging
from collections.abc import AsyncGenerator
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from gateway.config import Settings, settings
from gateway.models.gateway import Base, Merchant

logger = logging.getLogger("payment_gateway.database")

engine = create_async_engine(settings.database_url, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(bind: Optional[AsyncEngine] = None):
    """Create all tables. Safe to call multiple times (CREATE IF NOT EXISTS)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def check_connection(session: AsyncSession) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        result = await session.execute(text("SELECT 1"))
        return result.scalar() is not None
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database connection error: %s", e)
        return False


async def seed_test_merchant(session: AsyncSession, config: Settings = settings) -> Merchant:
    """Create the demo merchant if no merchant has its email yet."""
    result = await session.execute(
        select(Merchant).where(Merchant.email == config.test_merchant_email)
    )
    merchant = result.scalars().first()
    if merchant is not None:
        logger.info("Test merchant already exists")
        return merchant

    merchant = Merchant(
        id=config.test_merchant_id,
        name=config.test_merchant_name,
        email=config.test_merchant_email,
        api_key=config.test_api_key,
        api_secret=config.test_api_secret,
        is_active=True,
    )
    session.add(merchant)
    await session.commit()
    logger.info("Test merchant seeded: %s", merchant.email)
    return merchant
