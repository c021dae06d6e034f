"""
Hypercontacts — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── mock_db_session:      AsyncMock session for pure service unit tests
    ├── sample_contact_data:  one valid contact as a dict
    ├── db_session_factory:   fresh SQLite database per test (aiosqlite)
    ├── db_session:           one session on that database
    └── test_client:          HTTPX AsyncClient wired to the app and that database
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="hypercontacts_test_"), "app.db")
)
os.environ["SESSION_SECRET_KEY"] = "test-secret-not-real"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hypercontacts.database import Base, get_db_session
from hypercontacts.models.contact import Contact


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = contact
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_contact_data():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": "555-0100",
        "email_address": "ada@example.com",
    }


@pytest_asyncio.fixture
async def db_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    A real database for each test.

    NullPool: every session opens its own connection inside the test's event
    loop, so nothing is shared between tests.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'contacts.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with db_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed_contacts(db_session_factory):
    """
    Inserts contacts and returns their ids.

    Usage:
        ids = await seed_contacts([{"first_name": ..., ...}, ...])
    """
    async def _seed(rows):
        async with db_session_factory() as session:
            contacts = [Contact(**row) for row in rows]
            session.add_all(contacts)
            await session.commit()
            return [c.id for c in contacts]

    return _seed


@pytest_asyncio.fixture
async def test_client(db_session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is overridden to use the per-test database, with the same
    commit/rollback behaviour as the real dependency. Redirects are not
    followed so tests can assert on them; cookies (flash messages) persist
    across requests of one client.
    """
    from hypercontacts.main import app

    async def override_get_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
