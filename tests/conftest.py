"""Pytest fixtures shared by API and service tests.

Provides an in-memory aiosqlite database, an async HTTP client bound to the
app with the ``get_db`` dependency overridden, and demo session helpers.
"""

import os

# Settings are read on import; point them at a throwaway database and keep
# the text-generation gateway disabled unless a test swaps the client.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["LLM_API_KEY"] = ""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from agentlens.database import Base, get_db
from agentlens.main import app
from agentlens.models import DemoSession

SESSION_HEADER = "X-Demo-Session"

DEMO_VISITOR = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "company": "Analytical Engines Ltd",
    "role": "Engineering Manager",
}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A bare session for service-level tests (no HTTP client involved)."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async client talking to the app in-process, one DB session per request."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def session_id(client: AsyncClient) -> str:
    """A fresh demo session created through the public endpoint."""
    response = await client.post("/api/demo-access", json=DEMO_VISITOR)
    assert response.status_code == 200
    return response.json()["demo_session_id"]


@pytest.fixture
def seed_session(session_factory):
    """Insert a demo session directly, for states the API cannot produce."""

    async def _seed(*, run_count: int = 0, expires_in: timedelta = timedelta(hours=48)) -> str:
        now = datetime.now(timezone.utc)
        async with session_factory() as session:
            demo = DemoSession(**DEMO_VISITOR, run_count=run_count, created_at=now, expires_at=now + expires_in)
            session.add(demo)
            await session.commit()
            return demo.id

    return _seed


def parse_ts(value: str) -> datetime:
    """Parse an API timestamp; older interpreters reject a trailing 'Z'."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
