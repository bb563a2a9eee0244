"""Shared test fixtures."""

import random

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gateway.database import get_session, seed_test_merchant
from gateway.engine.outcome import ProcessingConfig
from gateway.engine.scheduler import TransitionScheduler
from gateway.main import create_app
from gateway.models.gateway import Base, Merchant
from tests.helpers import AUTH_HEADERS, INSTANT_SUCCESS, OTHER_AUTH_HEADERS


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite file database per test, shared by requests and background tasks."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def merchant(db_session: AsyncSession) -> Merchant:
    """The seeded demo merchant."""
    return await seed_test_merchant(db_session)


@pytest_asyncio.fixture
async def other_merchant(db_session: AsyncSession) -> Merchant:
    """A second merchant, for ownership checks."""
    other = Merchant(
        id="9b2f5c1e-0000-4000-8000-000000000002",
        name="Other Merchant",
        email="other@example.com",
        api_key=OTHER_AUTH_HEADERS["X-Api-Key"],
        api_secret=OTHER_AUTH_HEADERS["X-Api-Secret"],
        is_active=True,
    )
    db_session.add(other)
    await db_session.commit()
    return other


@pytest_asyncio.fixture
async def make_client(session_factory, merchant):
    """
    Factory for an HTTP client bound to a fresh app.

    Returns (client, scheduler) so tests can drain pending transitions
    before polling.
    """
    opened: list[tuple[AsyncClient, TransitionScheduler]] = []

    async def _make(config: ProcessingConfig = INSTANT_SUCCESS, rng: random.Random | None = None):
        app = create_app(session_factory=session_factory, processing_config=config, rng=rng)

        async def override_get_session():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_session] = override_get_session
        scheduler = TransitionScheduler(session_factory, config, rng)
        app.state.scheduler = scheduler

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        client = AsyncClient(transport=transport, base_url="http://test")
        opened.append((client, scheduler))
        return client, scheduler

    yield _make

    for client, scheduler in opened:
        await scheduler.shutdown()
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client):
    client, _ = await make_client()
    return client


@pytest_asyncio.fixture
async def order(client):
    """A 500.00 INR order owned by the demo merchant."""
    response = await client.post("/api/v1/orders", json={"amount": 50000}, headers=AUTH_HEADERS)
    assert response.status_code == 201
    return response.json()
