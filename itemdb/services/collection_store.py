"""Collection Store: a named record collection mirrored in memory over a KeyValueEngine.

Invariants:
    - After any completed operation, the in-memory sequence equals the decoded slot
    - Every operation runs under the write lock and computes its next sequence
      from the latest committed sequence (no stale base, no lost update)
    - The slot is hydrated once before the first operation; an absent slot is
      initialized to an encoded empty array
    - Memory is committed only after the slot write returns; a failed or
      cancelled write leaves it untouched (unless revert_on_write_failure is off)
    - list()/items return deep copies: callers cannot mutate committed state
    - update()/remove() with an unknown identifier are no-ops returning False

Design Decisions:
    - Whole-collection persistence: every mutation rewrites the full slot
    - clear()/overwrite() erase the ENTIRE engine namespace by default
      (ClearScope.GLOBAL, historical behavior); ClearScope.COLLECTION narrows
      erasure to this collection's slot
    - Lock may be shared: ItemDatabase passes one lock to every store so a
      global erase never races a sibling's write
"""

import asyncio
import copy
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from itemdb.core.collection_ops import (
    SequenceChange, apply_insert, apply_overwrite, apply_remove,
    apply_update, build_index,
)
from itemdb.core.domain_types import ClearScope, ItemId, JsonRecord, Operation
from itemdb.core.errors import (
    ConfigurationError, DecodeError, ErrorContext, InvalidRecordError,
    StorageError, StorageReadError, StorageWriteError,
)
from itemdb.core.record_codec import EMPTY_SEQUENCE, RecordCodec
from itemdb.core.repository_protocols import IdGenerator, KeyValueEngine
from itemdb.infrastructure.id_generator import new_item_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CollectionSnapshot(Generic[T]):
    """Committed state of one collection at one version."""
    name: str
    version: int
    items: tuple[T, ...]


class CollectionStore(Generic[T]):
    """In-memory mirror of one durable slot with CRUD operations."""

    def __init__(
        self,
        name: str,
        engine: KeyValueEngine,
        *,
        record_type: Any = JsonRecord,
        id_generator: IdGenerator = new_item_id,
        clear_scope: ClearScope = ClearScope.GLOBAL,
        revert_on_write_failure: bool = True,
        lock: asyncio.Lock | None = None,
        on_global_clear: Callable[["CollectionStore"], None] | None = None,
    ):
        if not name:
            raise ConfigurationError("Collection name must be a non-empty string", "name")
        self.name = name
        self.record_type = record_type
        self._engine = engine
        self._codec: RecordCodec[T] = RecordCodec(record_type)
        self._generate_id = id_generator
        self._clear_scope = ClearScope(clear_scope)
        self._revert = revert_on_write_failure
        self._lock = lock or asyncio.Lock()
        self._on_global_clear = on_global_clear

        self._items: tuple = ()
        self._index: dict[str, int] = {}
        self._version = 0
        self._loaded = False

    # -- Read-only views -------------------------------------------------------

    @property
    def items(self) -> tuple[T, ...]:
        """Always-current snapshot of the in-memory sequence (deep copy)."""
        return copy.deepcopy(self._items)

    @property
    def version(self) -> int:
        """Incremented on every committed state change, including (re)loads."""
        return self._version

    @property
    def loaded(self) -> bool:
        return self._loaded

    def snapshot(self) -> CollectionSnapshot[T]:
        return CollectionSnapshot(self.name, self._version, self.items)

    # -- Initialization --------------------------------------------------------

    async def load(self) -> tuple[T, ...]:
        """Hydrate from the slot once; later calls return the mirrored state."""
        async with self._lock:
            await self._ensure_loaded()
        return self.items

    async def refresh(self) -> tuple[T, ...]:
        """Discard the in-memory sequence and re-read the slot."""
        async with self._lock:
            self._loaded = False
            await self._ensure_loaded()
        return self.items

    def forget(self) -> None:
        """Drop in-memory state after an external erase; next operation reloads."""
        self._items, self._index = (), {}
        self._loaded = False
        self._version += 1

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        context = ErrorContext(collection=self.name, operation=Operation.LOAD.value)
        try:
            raw = await self._engine.get(self.name)
        except OSError as e:
            raise StorageReadError(str(e), "get", context) from e
        if raw is None:
            try:
                await self._engine.set(self.name, EMPTY_SEQUENCE)
            except OSError as e:
                raise StorageWriteError(str(e), "set", context) from e
            items: tuple = ()
        else:
            items = tuple(self._codec.decode(raw, self.name))
        try:
            index = build_index(items)
        except InvalidRecordError as e:
            raise DecodeError(e.message, context) from e
        self._items, self._index = items, index
        self._loaded = True
        self._version += 1
        logger.debug(
            f"Loaded collection {self.name}",
            extra={
                "collection": self.name, "operation": Operation.LOAD.value,
                "item_count": len(items), "version": self._version,
            },
        )

    # -- CRUD ------------------------------------------------------------------

    async def insert(self, record: T) -> ItemId:
        """Append record; generate its identifier iff it has none. Returns the identifier."""
        async with self._lock:
            await self._ensure_loaded()
            change = apply_insert(
                self._items, self._index, record, self._generate_id, self.name,
            )
            await self._persist(change, Operation.INSERT)
        return change.item_id

    async def update(self, record: T) -> bool:
        """Replace the entry sharing record's identifier in place.

        Returns False (and re-persists the unchanged sequence) when no entry matches;
        update never inserts.
        """
        async with self._lock:
            await self._ensure_loaded()
            change = apply_update(self._items, self._index, record, self.name)
            await self._persist(change, Operation.UPDATE)
        return change.matched

    async def remove(self, item_id: str) -> bool:
        """Delete the entry with item_id. Returns False when nothing matched."""
        async with self._lock:
            await self._ensure_loaded()
            change = apply_remove(self._items, self._index, item_id)
            await self._persist(change, Operation.REMOVE)
        return change.matched

    async def get(self, item_id: str) -> T | None:
        """Return a copy of the entry with item_id, or None."""
        async with self._lock:
            await self._ensure_loaded()
            position = self._index.get(item_id)
            return None if position is None else copy.deepcopy(self._items[position])

    async def list(self) -> tuple[T, ...]:
        """Return the whole collection in order. No persistence side effect."""
        async with self._lock:
            await self._ensure_loaded()
        return self.items

    async def clear(self) -> None:
        """Empty the collection. With GLOBAL scope, every slot in the engine is erased."""
        async with self._lock:
            await self._erase(Operation.CLEAR)
            await self._persist(SequenceChange(()), Operation.CLEAR)

    async def overwrite(self, records: Sequence[T]) -> None:
        """Replace the collection with records in caller order, after clear()."""
        change = apply_overwrite(records, self._generate_id, self.name)
        async with self._lock:
            await self._erase(Operation.OVERWRITE)
            await self._persist(change, Operation.OVERWRITE)

    # -- Synchronization -------------------------------------------------------

    async def _erase(self, operation: Operation) -> None:
        """Apply the configured clear scope before clear/overwrite persist."""
        if self._clear_scope is ClearScope.COLLECTION:
            # Slot is only replaced by the follow-up write; a failed write
            # leaves its current contents in memory.
            await self._ensure_loaded()
            return
        try:
            await self._engine.clear_all()
        except OSError as e:
            raise StorageWriteError(
                str(e), "clear_all", ErrorContext(collection=self.name, operation=operation.value),
            ) from e
        if self._on_global_clear is not None:
            self._on_global_clear(self)
        logger.info(
            f"{operation.value} on {self.name} erased every slot",
            extra={"collection": self.name, "operation": operation.value},
        )
        # Slot is gone: empty is what memory holds if the follow-up write fails.
        self._items, self._index = (), {}
        self._loaded = True
        self._version += 1

    async def _persist(self, change: SequenceChange, operation: Operation) -> None:
        """Write change.items to the slot, then commit it to memory."""
        payload = self._codec.encode(change.items)
        try:
            await self._engine.set(self.name, payload)
        except StorageError:
            self._write_failed(change, operation)
            raise
        except OSError as e:
            self._write_failed(change, operation)
            raise StorageWriteError(
                str(e), "set", ErrorContext(collection=self.name, operation=operation.value),
            ) from e
        self._commit(change)
        if change.matched:
            logger.debug(
                f"{operation.value} committed on {self.name}",
                extra={
                    "collection": self.name, "operation": operation.value,
                    "item_id": change.item_id, "item_count": len(change.items),
                    "version": self._version,
                },
            )
        else:
            logger.warning(
                f"{operation.value} found no item {change.item_id} in {self.name}",
                extra={
                    "collection": self.name, "operation": operation.value,
                    "item_id": change.item_id,
                },
            )

    def _commit(self, change: SequenceChange) -> None:
        self._items, self._index = change.items, change.index
        self._version += 1

    def _write_failed(self, change: SequenceChange, operation: Operation) -> None:
        if not self._revert:
            self._commit(change)
            logger.error(
                f"{operation.value} on {self.name} failed to persist; memory and slot diverge",
                extra={"collection": self.name, "operation": operation.value},
            )
            return
        logger.warning(
            f"{operation.value} on {self.name} failed to persist; in-memory sequence kept",
            extra={"collection": self.name, "operation": operation.value},
        )
