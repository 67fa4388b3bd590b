"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# The app lifespan must not touch the real database
os.environ["NOTELINK_SKIP_LIFESPAN_DB"] = "1"

from src.notelink.config import Settings, get_settings
from src.notelink.core.models import BaseModel, User
from src.notelink.database import get_db_session
from src.notelink.main import app
from src.notelink.realtime import RealtimeHub, get_event_dispatcher
from src.notelink.security.jwt import create_access_token
from src.notelink.security.password import hash_password
from tests.fakes import FakeTransport

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@pytest.fixture(scope="session")
def test_settings():
    """Override settings for testing using SQLite in-memory DB."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key="test-secret-key",
        debug=True,
        backplane_enabled=False,
        node_id="test-node",
    )


@pytest.fixture
async def test_engine(test_settings):
    """Fresh SQLite in-memory engine with the full schema, per test."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # Ensure SQLite enforces foreign key constraints (required for CASCADE)
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_factory):
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def hub(test_settings, transport):
    """Realtime hub with a recording transport instead of Socket.IO."""
    realtime_hub = RealtimeHub(test_settings)
    realtime_hub.bind_transport(transport)
    return realtime_hub


@pytest.fixture
def dispatcher(hub):
    return hub.dispatcher


@pytest.fixture
def test_app(test_session, test_settings, hub):
    """FastAPI app with DB session, settings and dispatcher overridden."""

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_event_dispatcher] = lambda: hub.dispatcher
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


async def _make_user(session: AsyncSession, username: str, **extra) -> User:
    user = User(
        username=username,
        email=extra.pop("email", f"{username}@example.com"),
        password_hash=hash_password("TestPassword123!"),
        full_name=extra.pop("full_name", username.title()),
        is_active=extra.pop("is_active", True),
        is_verified=extra.pop("is_verified", True),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
def make_user(test_session):
    async def _factory(username: str = None, **extra) -> User:
        return await _make_user(test_session, username or f"user_{uuid4().hex[:8]}", **extra)

    return _factory


@pytest.fixture
async def alice(test_session):
    return await _make_user(test_session, "alice")


@pytest.fixture
async def bob(test_session):
    return await _make_user(test_session, "bob")


def auth_header_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def alice_headers(alice):
    return auth_header_for(alice)


@pytest.fixture
def bob_headers(bob):
    return auth_header_for(bob)
