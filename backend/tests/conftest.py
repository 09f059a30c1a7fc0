"""
Pytest fixtures for stores, services and the HTTP client.

Service and API tests run against the in-memory store; the SQL store is
exercised against an in-memory SQLite database through aiosqlite.
"""

import os

# Must be set before eventhub.core.config is first imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventhub.main import app
from eventhub.api.deps import get_event_store, get_user_store
from eventhub.db.base import Base
from eventhub.domain import Event
from eventhub.schemas.event import EventCreate
from eventhub.services.attendance_service import AttendanceManager
from eventhub.services.event_service import EventRegistry
from eventhub.stores import InMemoryEventStore, InMemoryUserStore, SqlEventStore, SqlUserStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CREATOR = "host@example.com"


@pytest.fixture
def event_store() -> InMemoryEventStore:
    # A zero-length round trip still yields to the loop, so gathered joins interleave
    return InMemoryEventStore(latency=0)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def registry(event_store: InMemoryEventStore) -> EventRegistry:
    return EventRegistry(event_store)


@pytest.fixture
def attendance(event_store: InMemoryEventStore, registry: EventRegistry) -> AttendanceManager:
    return AttendanceManager(event_store, registry)


@pytest_asyncio.fixture
async def client(
    event_store: InMemoryEventStore,
    user_store: InMemoryUserStore,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose store dependencies point at the in-memory stores."""

    async def override_event_store():
        return event_store

    async def override_user_store():
        return user_store

    app.dependency_overrides[get_event_store] = override_event_store
    app.dependency_overrides[get_user_store] = override_user_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_event(registry: EventRegistry, max_attendees=0, creator_email=CREATOR, **fields) -> Event:
    data = {"title": "Test Meetup", "max_attendees": max_attendees, "creator_email": creator_email}
    data.update(fields)
    return await registry.create(EventCreate(**data))


@pytest.fixture
def make_event():
    """Factory: await make_event(registry, max_attendees=..., **fields)."""
    return _make_event


@pytest_asyncio.fixture
async def test_event(registry: EventRegistry) -> Event:
    """An event with 10 spots created by CREATOR."""
    return await _make_event(registry, max_attendees=10, description="A test event")


@pytest_asyncio.fixture
async def unlimited_event(registry: EventRegistry) -> Event:
    return await _make_event(registry, max_attendees=0, title="Open House")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory SQLite schema per test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def sql_event_store(db_session: AsyncSession) -> SqlEventStore:
    return SqlEventStore(db_session)


@pytest.fixture
def sql_user_store(db_session: AsyncSession) -> SqlUserStore:
    return SqlUserStore(db_session)
