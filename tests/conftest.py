"""
TechNotes Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_schema: creates all tables in a throwaway SQLite file, drops them after
    ├── db_session: AsyncSession on that schema (service-level tests)
    ├── test_client: HTTPX AsyncClient for endpoint tests
    ├── mock_db_session: AsyncMock session for store-failure paths
    └── alice / alice_note: a stored user and a note owned by her
"""

import os
import tempfile

# Override settings BEFORE any app imports: app.config reads the
# environment once, and app.database builds its engine at import time
_TEST_DB_DIR = tempfile.mkdtemp(prefix="technotes_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["PASSWORD_HASH_ROUNDS"] = "4"  # bcrypt's minimum; keeps the suite fast

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.database import Base, async_session_factory, engine
from app.models.counter import Counter  # noqa: F401
from app.models.note import Note
from app.models.user import User
from app.security import hash_password
from app.services.note_service import note_service


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_schema():
    """
    Fresh schema for every test.

    The engine is disposed afterwards so no pooled aiosqlite connection
    outlives the event loop of the test that opened it.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_schema):
    """
    A real AsyncSession, as get_db_session would hand to a route.

    Usage:
        async def test_create(db_session):
            await note_service.create_note(db_session, ...)
    """
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Data Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def alice(db_session) -> User:
    """A stored Employee called alice with password 'secret1'."""
    user = User(username="alice", password=hash_password("secret1"), roles=["Employee"])
    db_session.add(user)
    await db_session.flush()
    return user


@pytest_asyncio.fixture
async def alice_note(db_session, alice) -> Note:
    """A note titled 'Task A' assigned to alice, created through NoteService (ticket 500)."""
    await note_service.create_note(db_session, user=str(alice.id), title="Task A", text="do it")
    return await note_service.find_by_title(db_session, "Task A")


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Each request gets its own session via get_db_session and commits on
    success, exactly as under uvicorn.
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
