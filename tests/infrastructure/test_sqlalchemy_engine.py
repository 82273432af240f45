"""SQLAlchemy Engine: verifies the key-value contract against SQLite via aiosqlite.

Invariants:
    - set() upserts: a second write to the same key replaces the value
    - clear_all() removes every slot
    - Driver failures surface as StorageReadError / StorageWriteError

Design Decisions:
    - SQLite file under tmp_path: fast, no external dependency, isolated per test
"""

import pytest

from itemdb.core.errors import StorageReadError, StorageWriteError
from itemdb.infrastructure.database import SqlAlchemyEngine


@pytest.fixture
async def engine(tmp_path):
    kv = SqlAlchemyEngine(f"sqlite+aiosqlite:///{tmp_path / 'slots.db'}")
    await kv.create_schema()
    yield kv
    await kv.close()


async def test_get_missing_key_returns_none(engine):
    assert await engine.get("todos") is None


async def test_set_is_upsert(engine):
    await engine.set("todos", b"[]")
    await engine.set("todos", b'[{"id":"a"}]')
    assert await engine.get("todos") == b'[{"id":"a"}]'
    assert await engine.keys() == ["todos"]


async def test_delete_removes_one_slot(engine):
    await engine.set("a", b"[]")
    await engine.set("b", b"[]")
    await engine.delete("a")
    assert await engine.keys() == ["b"]


async def test_clear_all_removes_every_slot(engine):
    await engine.set("a", b"[]")
    await engine.set("b", b"[]")
    await engine.clear_all()
    assert await engine.keys() == []


async def test_health_check_ok(engine):
    assert await engine.health_check() is True


async def test_read_without_schema_raises_read_error(tmp_path):
    kv = SqlAlchemyEngine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(StorageReadError):
            await kv.get("todos")
    finally:
        await kv.close()


async def test_write_without_schema_raises_write_error(tmp_path):
    kv = SqlAlchemyEngine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(StorageWriteError):
            await kv.set("todos", b"[]")
    finally:
        await kv.close()


async def test_values_survive_engine_restart(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'slots.db'}"
    first = SqlAlchemyEngine(url)
    await first.create_schema()
    await first.set("todos", b'[{"id":"a"}]')
    await first.close()

    second = SqlAlchemyEngine(url)
    try:
        assert await second.get("todos") == b'[{"id":"a"}]'
    finally:
        await second.close()
