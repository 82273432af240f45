"""Item Database: hands out one CollectionStore per name over a shared engine.

Invariants:
    - collection(name) always returns the same store for the same name
    - All stores share one write lock: operations across collections never interleave
    - After a global erase, every sibling store forgets its in-memory sequence
      and reloads from the (now empty) slot on next use

Design Decisions:
    - Registry over free-standing stores: a single writer per collection is
      structural, not a caller discipline
    - Record type fixed on first open: reopening with a different type is a
      configuration error, not a silent re-decode
"""

import asyncio
import logging
from typing import Any

from itemdb.config import Settings, get_settings
from itemdb.core.domain_types import JsonRecord
from itemdb.core.errors import ConfigurationError
from itemdb.core.repository_protocols import IdGenerator, KeyValueEngine
from itemdb.infrastructure.id_generator import new_item_id
from itemdb.services.collection_store import CollectionStore

logger = logging.getLogger(__name__)


class ItemDatabase:
    """Named collections backed by one KeyValueEngine."""

    def __init__(
        self,
        engine: KeyValueEngine,
        settings: Settings | None = None,
        id_generator: IdGenerator = new_item_id,
    ):
        self.engine = engine
        self.settings = settings or get_settings()
        self._id_generator = id_generator
        self._lock = asyncio.Lock()
        self._collections: dict[str, CollectionStore] = {}

    def collection(self, name: str, record_type: Any = JsonRecord) -> CollectionStore:
        """Open (or return the already-open) store for name."""
        store = self._collections.get(name)
        if store is None:
            store = CollectionStore(
                name,
                self.engine,
                record_type=record_type,
                id_generator=self._id_generator,
                clear_scope=self.settings.clear_scope,
                revert_on_write_failure=self.settings.revert_on_write_failure,
                lock=self._lock,
                on_global_clear=self._forget_siblings,
            )
            self._collections[name] = store
            logger.debug(f"Opened collection {name}", extra={"collection": name})
        elif store.record_type != record_type:
            raise ConfigurationError(
                f"Collection '{name}' is already open with record type "
                f"{store.record_type!r}, not {record_type!r}",
                "record_type",
            )
        return store

    def names(self) -> list[str]:
        """Names of the collections opened through this database."""
        return sorted(self._collections)

    def _forget_siblings(self, origin: CollectionStore) -> None:
        for store in self._collections.values():
            if store is not origin:
                store.forget()

    async def close(self) -> None:
        await self.engine.close()
        logger.info("Item database closed", extra={"item_count": len(self._collections)})
