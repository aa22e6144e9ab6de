"""Shared test fixtures and configuration."""
import pytest
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CALL_STORE_BACKEND", "memory")

from app.main import app
from app.core.dependencies import get_call_tracker
from app.db.models import Base
from app.services.call_session import store as store_module
from app.services.call_session.manager import CallLifecycleTracker
from app.services.call_session.store import InMemoryCallSessionStore
from app.services.persistence.calls import DatabaseCallSessionStore


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock pinned to a fixed instant."""
    return FakeClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_store():
    """In-memory store with its own private dict."""
    return InMemoryCallSessionStore(sessions={})


@pytest.fixture
def tracker(memory_store, clock):
    """Tracker over a fresh in-memory store."""
    return CallLifecycleTracker(store=memory_store, clock=clock)


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def db_store(test_session_factory):
    """Database-backed call session store."""
    return DatabaseCallSessionStore(test_session_factory)


@pytest.fixture
def clean_call_sessions():
    """Clean up the process-wide call sessions before and after tests."""
    store_module._sessions.clear()
    yield
    store_module._sessions.clear()


@pytest.fixture
def test_client(tracker):
    """Create FastAPI test client wired to the test tracker."""
    app.dependency_overrides[get_call_tracker] = lambda: tracker

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def mock_openai():
    """Mock OpenAI API client."""
    mock_client = Mock()
    mock_completion = Mock()
    mock_completion.choices = [
        Mock(message=Mock(content="Take one small step today."))
    ]
    mock_client.chat.completions.create = AsyncMock(return_value=mock_completion)
    mock_client.audio.transcriptions.create = AsyncMock(
        return_value=Mock(text="hello aira")
    )
    mock_client.audio.speech.create = AsyncMock(
        return_value=Mock(content=b"ID3-fake-mp3")
    )
    return mock_client
