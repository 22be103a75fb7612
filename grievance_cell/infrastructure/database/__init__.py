"""
Database Infrastructure
=======================

Async engine and sessions for the complaint store. PostgreSQL runs through
asyncpg; a `sqlite+aiosqlite` URL serves local runs and tests.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from grievance_cell.config import settings


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def _engine_options(url: str) -> tuple[str, dict]:
    if url.startswith("sqlite"):
        return url, {"echo": settings.debug}

    # asyncpg takes `ssl`, not libpq's `sslmode`
    return url.replace("sslmode=", "ssl="), {
        "echo": settings.debug,
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }


def init_database(database_url: Optional[str] = None) -> AsyncEngine:
    """Create the engine and session maker; called once from the lifespan."""
    global _engine, _session_maker

    url, options = _engine_options(database_url or settings.database_url)
    _engine = create_async_engine(url, **options)
    # Entities are built from models after commit, so nothing may expire
    _session_maker = async_sessionmaker(bind=_engine, expire_on_commit=False, autoflush=False)
    return _engine


async def close_database() -> None:
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_database() first.")
    return _engine


@asynccontextmanager
async def _transaction() -> AsyncGenerator[AsyncSession, None]:
    if _session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session for `Depends(get_session)`.

    Whatever a handler leaves pending is committed when the request ends;
    services that announce a change commit it themselves first.
    """
    async with _transaction() as session:
        yield session


def get_session_context():
    """Session for background work such as the escalation sweep."""
    return _transaction()


async def create_tables() -> None:
    """Create missing tables (development and serverless cold starts)."""
    import grievance_cell.complaints.infrastructure.models  # noqa: F401
    import grievance_cell.users.infrastructure.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
