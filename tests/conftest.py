"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import Mock

import pytest
import pytest_asyncio

from lukunde.access import AccessControlManager, AccessSession
from lukunde.llm import LLMClient, LLMResponse
from lukunde.memory import InMemoryKeyValueStore, SQLiteKeyValueStore
from lukunde.sheets import Sheet
from lukunde.store import SheetStore

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock for expiration tests."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def access(clock) -> AccessControlManager:
    """Access manager on a fixed clock."""
    return AccessControlManager(clock=clock, code_length=6)


@pytest.fixture
def session() -> AccessSession:
    return AccessSession("owner")


@pytest.fixture
def other_session() -> AccessSession:
    return AccessSession("student")


@pytest.fixture
def grade_sheet() -> Sheet:
    """A small gradebook with a class column and two grades."""
    return Sheet(
        id="grades",
        name="Pauta 1",
        data=[
            ["Nome", "Turma", "Nota 1", "Nota 2", "Média"],
            ["Ana", "1A", "7,5", "8", ""],
            ["Bruno", "1B", "4", "5", ""],
            ["Carla", "1A", "9", "10", ""],
        ],
    )


@pytest.fixture
def store(access, grade_sheet) -> SheetStore:
    """Store holding the gradebook plus one empty sheet, active on the gradebook."""
    return SheetStore(access, [grade_sheet, Sheet(id="other", name="Pauta 2")])


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncGenerator[SQLiteKeyValueStore, None]:
    """Create a file-backed key-value store for testing."""
    store = SQLiteKeyValueStore(tmp_path / "test_lukunde.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def mock_llm_client() -> Mock:
    """Create a mocked LLM client answering with fixed text."""
    client = Mock(spec=LLMClient)
    client.create_message = Mock(
        return_value=LLMResponse(
            content=[Mock(text="Turma")],
            stop_reason="end_turn",
            usage={"input_tokens": 100, "output_tokens": 5},
        )
    )
    return client


# Configure pytest-asyncio
def pytest_configure(config):
    """Configure pytest with asyncio settings."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
