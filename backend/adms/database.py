"""Database engine and session factory.

Provides async database connectivity and session management for the ADMS core.
One AsyncSession backs one unit of work; services never share sessions.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import Settings, get_settings
from .models.base import Base


def create_engine_from_settings(settings: Optional[Settings] = None) -> AsyncEngine:
    """Create the async engine for the configured DATABASE_URL.

    Pool settings only apply to PostgreSQL (not SQLite).
    """
    settings = settings or get_settings()

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DATABASE_ECHO,
    }
    if not settings.DATABASE_URL.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)
    if settings.DATABASE_URL.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Have SQLite enforce foreign keys on every new connection.

    SQLite ignores REFERENCES clauses unless the pragma is set per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_foreign_keys_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for units of work.

    expire_on_commit is off so entities returned by an operation stay readable
    after its commit without another round trip.
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Context manager for one unit of work.

    Usage:
        async with session_scope(factory) as session:
            store = EntityStore(session)

    Services commit explicitly. Anything still pending when the block exits,
    including after cancellation, is rolled back when the session closes.
    """
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def create_all(engine: AsyncEngine) -> None:
    """Create every table directly from the models (tests and local tooling)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
