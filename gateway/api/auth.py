"""Merchant authentication by API key/secret headers."""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.database import get_session
from gateway.errors import AuthenticationError
from gateway.models.gateway import Merchant

logger = logging.getLogger("payment_gateway.auth")


async def authenticate_merchant(session: AsyncSession, api_key: str, api_secret: str) -> Optional[Merchant]:
    """Look up an active merchant by exact key + secret match."""
    result = await session.execute(
        select(Merchant).where(
            Merchant.api_key == api_key,
            Merchant.api_secret == api_secret,
            Merchant.is_active.is_(True),
        )
    )
    return result.scalars().first()


async def require_merchant(
    x_api_key: Optional[str] = Header(None),
    x_api_secret: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_session),
) -> Merchant:
    """FastAPI dependency: the authenticated merchant, or 401."""
    if not x_api_key or not x_api_secret:
        raise AuthenticationError()

    merchant = await authenticate_merchant(session, x_api_key, x_api_secret)
    if merchant is None:
        logger.info("Rejected credentials for api_key=%s", x_api_key)
        raise AuthenticationError()
    return merchant
