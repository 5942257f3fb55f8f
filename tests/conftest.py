"""Shared test configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Settings are cached on first import, so the environment must be set first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

# Ensure the project root is on sys.path so `bookmarkd.main` resolves
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from bookmarkd.auth.context import Viewer  # noqa: E402
from bookmarkd.database import Base  # noqa: E402
from bookmarkd.models import registry  # noqa: E402,F401
from bookmarkd.models.user import User  # noqa: E402
from bookmarkd.services.users import UserService  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave like on Postgres
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session):
    async def _make(username: str, password: str = "password123") -> User:
        result = await UserService(session).sign_up(username, f"{username}@readers.org", password)
        return result.user

    return _make


@pytest.fixture
def viewer():
    """Build the viewer identity a signed-in ``user`` would carry."""

    def _viewer(user: User) -> Viewer:
        return Viewer(id=user.id, username=user.username, email=user.email)

    return _viewer


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("bob")


@pytest_asyncio.fixture
async def carol(make_user):
    return await make_user("carol")
