"""Async database engine, session factory, and lifespan management.

Uses SQLAlchemy 2.0 async with the asyncpg driver for PostgreSQL.
SQLite (aiosqlite) is accepted for local runs and tests.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import settings


def _engine_options() -> dict[str, Any]:
    if settings.db.is_sqlite:
        return {}
    return {
        "pool_size": settings.db.pool_size,
        "max_overflow": settings.db.max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


# ── Async engine ─────────────────────────────────────────────────────

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)

# ── Session factory ──────────────────────────────────────────────────

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI — yields an async DB session.

    Usage:
        @router.get("/example")
        async def handler(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Lifespan helpers ─────────────────────────────────────────────────


async def init_db() -> None:
    """Initialize database connection pool.

    Called during FastAPI lifespan startup. In production, tables are
    created via Alembic migrations — this only verifies connectivity.
    """
    async with engine.begin() as conn:
        # Import here to ensure all models are registered with Base.metadata
        from src.models import Base

        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the database engine. Called during FastAPI lifespan shutdown."""
    await engine.dispose()


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Context manager for database lifecycle.

    Usage in FastAPI lifespan:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with db_lifespan():
                yield
    """
    await init_db()
    try:
        yield
    finally:
        await close_db()
