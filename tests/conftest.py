"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- SQLite database (file-backed so the async CRUD engine and the sync
  dashboard engine see the same data), rebuilt for every test
- HTTP client with dependency overrides
- In-memory record store and a fixed clock for service tests
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

TEST_DB_PATH = os.path.join(tempfile.gettempdir(), "agency_test.db")

# Set test environment variables BEFORE importing the app
os.environ["MODE"] = "test"
os.environ["POSTGRES_INTERNAL_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["POSTGRES_INTERNAL_URL_SYNC"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.pop("SENTRY_DSN", None)

from agency.main import app  # noqa: E402
from agency.api.dependencies import get_db, get_reminder_notifier  # noqa: E402
from agency.db.base import Base  # noqa: E402
from agency.db.session import SessionAsync, engine_internal, engine_internal_sync  # noqa: E402

from tests.fakes import NOW, InMemoryRecordStore, RecordingNotifier  # noqa: E402


# ==================== Database ====================

@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fresh schema per test.

    Endpoints commit, so isolation comes from dropping and recreating the
    tables rather than from a rolled-back transaction.
    """
    Base.metadata.drop_all(bind=engine_internal_sync)
    Base.metadata.create_all(bind=engine_internal_sync)

    async with SessionAsync() as session:
        yield session

    # Pooled aiosqlite connections must not outlive the test's event loop
    await engine_internal.dispose()
    Base.metadata.drop_all(bind=engine_internal_sync)


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    notifier: RecordingNotifier
) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for testing FastAPI endpoints.

    Async endpoints share the test's session; reminder delivery is recorded
    instead of queued on Celery.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reminder_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Service Fixtures ====================

@pytest.fixture
def clock():
    """Fixed evaluation time for tier and MRR calculations"""
    return lambda: NOW


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
