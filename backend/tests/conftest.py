"""
Notes API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── sample_note_data: Field values for a stored note
    ├── test_settings: Settings pointing at in-memory SQLite
    ├── engine: In-memory SQLite engine with the notes table created
    ├── db_session / note_repository: Real session + repository on that engine
    └── test_client: HTTPX AsyncClient talking to an app built on that engine
"""

import os

# Settings are read from the environment; set them BEFORE any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notes_api.config import Settings
from notes_api.database import create_tables
from notes_api.repositories.note_repository import NoteRepository


# ══════════════════════════════════════════════════════════════════════════
# Mock Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
            result = await NoteRepository(mock_db_session).get_note(note_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_note_data():
    """Field values matching the Note model."""
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "title": "Groceries",
        "content": "Milk, eggs, bread",
        "category": "home",
        "published": False,
        "created_at": now,
        "updated_at": now,
    }


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures (in-memory SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        log_level="WARNING",
        max_page_size=50,
    )


@pytest_asyncio.fixture
async def engine():
    """
    One in-memory database per test.

    StaticPool keeps a single connection, so every session (and every request
    made through test_client) sees the same database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def note_repository(db_session):
    return NoteRepository(db_session)


@pytest.fixture
def app(engine, test_settings):
    """A fresh FastAPI app bound to the per-test engine."""
    from notes_api.main import create_app

    return create_app(settings=test_settings, engine=engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan; the engine fixture has already
    created the table.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
