"""Shared pytest fixtures for doceditor tests."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from doceditor.core.config import Settings
from doceditor.core.db import create_session_factory, init_models
from doceditor.domains.documents.cache import DocumentCache, VersionCache
from doceditor.domains.documents.services import DocumentService
from doceditor.domains.documents.store import DocumentSessionStore
from doceditor.infrastructure.auth_client import AuthClient
from doceditor.infrastructure.store_client import DocumentStoreClient
from doceditor.main import create_app

# Use in-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Secret123"


class FakeClock:
    """Manually advanced monotonic clock for freshness-window tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        jwt_secret="test-secret",
        document_cache_ttl_seconds=30.0,
        log_level="DEBUG",
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with SQLite."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store_client(session_factory) -> DocumentStoreClient:
    return DocumentStoreClient(session_factory)


@pytest.fixture
def remote(store_client) -> AsyncMock:
    """Spy over the real store client; counts remote calls per method."""
    return AsyncMock(wraps=store_client)


@pytest.fixture
def auth_client(session_factory, test_settings) -> AuthClient:
    return AuthClient(session_factory, test_settings)


@pytest.fixture
async def user(auth_client):
    """Create a test user."""
    response = await auth_client.sign_up("owner@example.com", TEST_PASSWORD)
    assert response.error is None
    return response.user


@pytest.fixture
async def other_user(auth_client):
    response = await auth_client.sign_up("other@example.com", TEST_PASSWORD)
    assert response.error is None
    return response.user


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def document_cache(clock) -> DocumentCache:
    return DocumentCache(ttl_seconds=30.0, clock=clock)


@pytest.fixture
def version_cache() -> VersionCache:
    return VersionCache()


@pytest.fixture
def service(remote, document_cache, version_cache) -> DocumentService:
    return DocumentService(remote, document_cache=document_cache, version_cache=version_cache)


@pytest.fixture
def session_store(service) -> DocumentSessionStore:
    return DocumentSessionStore(service)


@pytest.fixture
async def api_client(test_settings, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app instance sharing the test database."""
    app = create_app(settings=test_settings, session_factory=session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
