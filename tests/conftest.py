"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from chatsync.db import create_session_maker, init_db
from chatsync.models import Base
from chatsync.services import (
    ChatEngine,
    ChatState,
    InMemoryPreferenceStore,
    PrivacyPolicy,
    SelectionState,
    SqlPreferenceStore,
)
from tests.fakes import PUBLIC_CHANNEL_ID, FakeBackend, FakeClock, FocusSwitch, RecordingSink

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def focus() -> FocusSwitch:
    return FocusSwitch()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state() -> ChatState:
    return ChatState()


@pytest.fixture
def selection(state) -> SelectionState:
    return SelectionState(state, PUBLIC_CHANNEL_ID)


@pytest.fixture
def privacy(store, clock) -> PrivacyPolicy:
    return PrivacyPolicy(store, clock=clock)


@pytest.fixture
def chat_engine(backend, store, sink, focus, privacy, tmp_path) -> ChatEngine:
    """Engine wired to fakes; the poller is not started."""
    return ChatEngine(
        backend=backend,
        store=store,
        sink=sink,
        is_focused=focus,
        poll_interval=0.01,
        background_limit=10,
        conversation_limit=100,
        public_channel_id=PUBLIC_CHANNEL_ID,
        export_dir=tmp_path,
        privacy=privacy,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def sql_store(async_engine) -> SqlPreferenceStore:
    return SqlPreferenceStore(create_session_maker(async_engine))
