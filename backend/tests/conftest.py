"""Test fixtures: in-memory SQLite store, fixed clocks and FastAPI test client."""

import json
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from powermeter.database import get_db
from powermeter.main import create_app
from powermeter.models.base import Base
from powermeter.models.store import StoreListItem
from powermeter.services.store import SqlOrderedStore


def ms(value: datetime) -> int:
    """Epoch milliseconds, the timestamp format ingestion writes."""
    return int(value.timestamp() * 1000)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


async def seed_list(session: AsyncSession, name: str, records: list[dict]) -> None:
    """Append records to a rollup list in one transaction."""
    session.add_all(
        StoreListItem(list_name=name, value=json.dumps(record)) for record in records
    )
    await session.commit()


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def store(db_session: AsyncSession):
    return SqlOrderedStore(db_session)


@pytest.fixture
def now():
    """Thursday 2017-03-30, half past noon UTC."""
    return utc(2017, 3, 30, 12, 30)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest_asyncio.fixture
async def client(db_session: AsyncSession):
    """Provide an async test client with overridden DB dependency."""
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
