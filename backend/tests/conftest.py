"""
DevFlow Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every database test gets a fresh SQLite file (aiosqlite) with all
       model tables created, so tests never share documents.

Fixture Hierarchy:
    engine → session_factory → db_session      real storage, per test
                             → test_client     HTTPX client, DB overridden
    mock_db_session                            AsyncMock, no storage
    user / other_user / auth_headers           session identities
"""

import os
import tempfile
import uuid

# Override settings for testing BEFORE any devflow imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="devflow_test_"), "health.db"
)
os.environ["AUTH_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from devflow.database import dispose_engine, get_db_session, init_models
from devflow.schemas.session import SessionUser
from devflow.services.session_service import session_service


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine on a throwaway SQLite file with every table created."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'devflow.db'}")
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    One AsyncSession for the whole test.

    Usage:
        async def test_create(db_session):
            tag = await Tag.create(db_session, {"name": "python"})
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_db_session():
    """AsyncMock standing in for AsyncSession where no storage is needed."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Identity Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user():
    return SessionUser(id=uuid.uuid4(), name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def other_user():
    return SessionUser(id=uuid.uuid4(), name="Grace Hopper")


@pytest.fixture
def auth_headers(user):
    """Bearer header accepted by the application's session provider."""
    return {"Authorization": f"Bearer {session_service.issue_token(user)}"}


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    The per-request session dependency is overridden to use the test engine,
    keeping the commit-on-success / rollback-on-error behaviour.
    """
    from devflow.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    # /health uses the application engine; its pooled connections belong to this loop
    await dispose_engine()
