"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

from watchbadges import redis_client
from watchbadges.badges.counter_service import BadgeCounterService
from watchbadges.badges.engine import BadgeEngine, BadgeEngineRegistry
from watchbadges.main import create_app
from watchbadges.store import RedisDocumentStore

# Wednesday of ISO week 2024-W10
FIXED_NOW = datetime(2024, 3, 6, 12, 0, 0, tzinfo=timezone.utc)

USER_ID = "user-1"


class FakeClock:
    """Settable clock handed to engines instead of the wall clock."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest_asyncio.fixture
async def redis() -> AsyncGenerator[FakeRedis, None]:
    """In-memory Redis with real WATCH/MULTI semantics."""
    client = FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def store(redis: FakeRedis) -> RedisDocumentStore:
    return RedisDocumentStore(redis, key_prefix="test:")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counters(store: RedisDocumentStore) -> BadgeCounterService:
    return BadgeCounterService(store)


@pytest.fixture
def registry(store: RedisDocumentStore, clock: FakeClock) -> BadgeEngineRegistry:
    return BadgeEngineRegistry(store, clock=clock, commit_retry_delay=0)


@pytest.fixture
def engine(registry: BadgeEngineRegistry) -> BadgeEngine:
    return registry.get(USER_ID)


@pytest_asyncio.fixture
async def client(
    redis: FakeRedis,
    registry: BadgeEngineRegistry,
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the fake Redis store."""
    monkeypatch.setattr(redis_client, "_pool", redis)

    app = create_app()
    app.state.badge_registry = registry

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
