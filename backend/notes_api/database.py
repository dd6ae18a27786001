"""
Notes API — Database Engine & Session Management
==================================================

What:  Async SQLAlchemy engine construction, session factory, and the
       FastAPI session dependency.
How:   build_engine() creates one pooled engine per process. The app factory
       stores the engine and its session factory on app.state; get_db_session()
       hands each request its own session from that factory.
Who:   Used by the app lifespan (engine lifecycle) and by route dependencies.
When:  Engine at startup, sessions per request, dispose at shutdown.

Connection Pooling:
    pool_size=10:     Fixed number of connections shared by all requests
    max_overflow=0:   No temporary connections; excess requests wait on the pool
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notes_api.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; owns the shared metadata."""
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine (and its connection pool) from settings.

    SQLite URLs get no pool sizing arguments; the aiosqlite dialect picks its
    own pool class and rejects pool_size/max_overflow for in-memory databases.
    """
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the engine.

    expire_on_commit=False keeps loaded attributes readable after the
    repository's commit, when the response is serialized.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def verify_connection(engine: AsyncEngine) -> None:
    """
    Run SELECT 1 against the store.

    Raises whatever the driver raises; the lifespan treats any failure as fatal.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables registered on Base.metadata."""
    # Models must be imported so they register with Base.metadata
    from notes_api.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections."""
    await engine.dispose()
    logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory on app.state
        2. Yields it to the route handler (through the repository)
        3. On error: rolls back the transaction and re-raises
        4. Always: closes the session (returns connection to pool)

    Writes are committed by NoteRepository before the handler returns; code
    after `yield` runs only once the response has been sent.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
