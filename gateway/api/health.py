"""
Health and demo endpoints.

GET /health                  Always 200; reports database reachability.
GET /api/v1/test/merchant    Credentials lookup for the seeded demo merchant.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.config import settings
from gateway.database import check_connection, get_session
from gateway.errors import NotFoundError
from gateway.models.gateway import Merchant

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    status: str
    database: str
    timestamp: str


class SeededMerchant(BaseModel):
    id: str
    email: str
    api_key: str
    seeded: bool = True


@router.get("/health", response_model=HealthStatus)
async def health(session: AsyncSession = Depends(get_session)):
    connected = await check_connection(session)
    return HealthStatus(
        status="healthy",
        database="connected" if connected else "disconnected",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/api/v1/test/merchant", response_model=SeededMerchant)
async def test_merchant(session: AsyncSession = Depends(get_session)):
    """Return the seeded demo merchant's id, email and API key."""
    result = await session.execute(
        select(Merchant).where(Merchant.email == settings.test_merchant_email)
    )
    merchant = result.scalars().first()
    if merchant is None:
        raise NotFoundError("Test merchant not found")
    return SeededMerchant(id=merchant.id, email=merchant.email, api_key=merchant.api_key)
