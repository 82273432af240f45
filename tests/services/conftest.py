"""Service test fixtures: in-memory engine, deterministic ids, failure injection.

Invariants:
    - Every test gets a fresh engine (no slot leaks between tests)
    - Identifiers are u1, u2, ... in generation order
    - flaky_engine fails the writes it is told to fail, then behaves normally
    - gated_engine holds every write until its gate is opened

Design Decisions:
    - Fakes over mocks: the engine contract is four coroutines, a subclass
      is shorter and clearer than patching
"""

import asyncio

import pytest

from itemdb.config import Settings
from itemdb.core.errors import StorageWriteError
from itemdb.infrastructure.memory_engine import InMemoryEngine
from itemdb.services.collection_store import CollectionStore
from itemdb.services.item_database import ItemDatabase


class FlakyEngine(InMemoryEngine):
    """InMemoryEngine whose next N writes raise StorageWriteError."""

    def __init__(self):
        super().__init__()
        self.failures_left = 0
        self.fail_clear = False
        self.writes: list[str] = []

    async def set(self, key: str, value: bytes) -> None:
        if self.failures_left:
            self.failures_left -= 1
            raise StorageWriteError("simulated disk full")
        self.writes.append(key)
        await super().set(key, value)

    async def clear_all(self) -> None:
        if self.fail_clear:
            raise StorageWriteError("simulated erase failure", "clear_all")
        await super().clear_all()


class GatedEngine(InMemoryEngine):
    """InMemoryEngine whose writes wait for the gate to open."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()
        self.gate.set()

    async def set(self, key: str, value: bytes) -> None:
        await self.gate.wait()
        await super().set(key, value)


@pytest.fixture
def sequential_ids():
    counter = iter(range(1, 10_000))
    return lambda: f"u{next(counter)}"


@pytest.fixture
def engine():
    return InMemoryEngine()


@pytest.fixture
def flaky_engine():
    return FlakyEngine()


@pytest.fixture
def gated_engine():
    return GatedEngine()


@pytest.fixture
def todos(engine, sequential_ids):
    return CollectionStore("todos", engine, id_generator=sequential_ids)


@pytest.fixture
def settings():
    return Settings(storage_backend="memory")


@pytest.fixture
def database(engine, settings, sequential_ids):
    return ItemDatabase(engine, settings, id_generator=sequential_ids)
