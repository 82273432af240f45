"""In-Memory Engine: process-local KeyValueEngine for tests and ephemeral stores.

Invariants:
    - Values are stored as immutable bytes, so callers cannot alias engine state
    - clear_all erases every key, matching the durable engines

Design Decisions:
    - Plain dict, no locking: all callers share one event loop and the
      Collection Store serializes writes itself
"""

import logging

logger = logging.getLogger(__name__)


class InMemoryEngine:
    """Dict-backed key-value namespace."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._slots: dict[str, bytes] = {
            key: bytes(value) for key, value in (initial or {}).items()
        }

    async def get(self, key: str) -> bytes | None:
        return self._slots.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._slots[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    async def clear_all(self) -> None:
        logger.debug("Erasing all slots", extra={"item_count": len(self._slots)})
        self._slots.clear()

    async def close(self) -> None:
        return None

    def keys(self) -> list[str]:
        """Slot names currently held: inspection helper, not part of the protocol."""
        return sorted(self._slots)
