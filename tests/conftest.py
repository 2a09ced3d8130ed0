"""Shared fixtures: an in-memory SQLite database and an ASGI test client.

Environment defaults are set before any `src` import so the module-level
settings and engine never point at PostgreSQL during tests.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-only-signing-secret-0123456789abcdef")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.api.deps import get_audit_recorder  # noqa: E402
from src.audit.recorder import AuditRecorder  # noqa: E402
from src.db.engine import get_session  # noqa: E402
from src.main import app  # noqa: E402
from src.models import Base  # noqa: E402


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test, all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def recorder(session_factory: async_sessionmaker[AsyncSession]) -> AuditRecorder:
    return AuditRecorder(session_factory)


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    recorder: AuditRecorder,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with DB and recorder pointed at the test database."""

    async def _get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_audit_recorder] = lambda: recorder
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_token(sub: str, role: str = "ADMIN", expires_in: timedelta = timedelta(minutes=15)) -> str:
    """Sign an access token the way the auth service does."""
    claims = {"sub": sub, "role": role, "exp": datetime.now(UTC) + expires_in}
    return jwt.encode(claims, os.environ["JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Build an Authorization header for the given user id."""

    def _headers(sub: str, role: str = "ADMIN") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(sub, role)}"}

    return _headers


@pytest.fixture
def token_factory():
    return make_token
