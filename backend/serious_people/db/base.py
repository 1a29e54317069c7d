"""Declarative base, engine lifecycle and the shared session factory."""

from sqlalchemy import JSON, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from serious_people.core.config import get_settings

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with per-backend connection options.

    SQLite gets a long busy timeout so concurrent generation writers queue
    instead of failing; server databases get pre-ping for dropped connections.
    """
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo, connect_args={"timeout": 30})
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


async def init_db(url: str | None = None, engine: AsyncEngine | None = None, create_tables: bool = True) -> None:
    """Install the engine and session factory used by get_session_factory().

    Args:
        url: Database URL (defaults to settings.database_url)
        engine: Pre-built engine to install instead of creating one
        create_tables: Run Base.metadata.create_all after installing
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    _engine = engine or make_engine(url or settings.database_url, echo=settings.debug)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    if create_tables:
        # Models must be imported for their tables to be on the metadata
        import serious_people.db.models  # noqa: F401

        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def ping_db() -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    async with get_session_factory()() as session:
        await session.execute(text("SELECT 1"))


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the installed session factory.

    Raises RuntimeError if init_db() has not been called.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
