"""
Payment Gateway: Mock Merchant Payments API.

A demo payment gateway: merchants create orders and submit UPI or card
payments; a hosted checkout page submits payments publicly and polls their
status until the simulated processor resolves them.

Start the server:
    uvicorn gateway.main:app --reload
"""

import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gateway.api.health import router as health_router
from gateway.api.orders import router as orders_router
from gateway.api.payments import router as payments_router
from gateway.config import settings
from gateway.database import async_session, init_db, seed_test_merchant
from gateway.engine.outcome import ProcessingConfig
from gateway.engine.processor import count_stalled_payments
from gateway.engine.scheduler import TransitionScheduler
from gateway.errors import BadRequestError, GatewayError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("payment_gateway")


def _validation_description(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def register_exception_handlers(application: FastAPI) -> None:
    """Render every error as {"error": {"code", "description"}}."""

    @application.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @application.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = BadRequestError(_validation_description(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @application.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = GatewayError()
        return JSONResponse(status_code=error.status_code, content=error.to_body())


def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    processing_config: Optional[ProcessingConfig] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """Build the API. Processing configuration is frozen here, once."""
    session_factory = session_factory or async_session
    processing_config = processing_config or ProcessingConfig.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables, seed the demo merchant, start the transition scheduler."""
        await init_db(session_factory.kw.get("bind"))
        async with session_factory() as session:
            await seed_test_merchant(session)
            stalled = await count_stalled_payments(session)
        if stalled:
            logger.warning(
                "%d payments left in processing by a previous run; their transitions were lost",
                stalled,
            )

        app.state.scheduler = TransitionScheduler(session_factory, processing_config, rng)
        logger.info("Payment Gateway API ready (test_mode=%s)", processing_config.test_mode)
        yield
        await app.state.scheduler.shutdown()

    application = FastAPI(
        title="Payment Gateway",
        description=(
            "Mock payment gateway for merchants: orders, UPI and card payments "
            "with simulated asynchronous processing."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(orders_router, prefix="/api/v1")
    application.include_router(payments_router, prefix="/api/v1")
    return application


app = create_app()
