"""Boundary Protocols: contracts between the Collection Store and its collaborators.

Invariants:
    - Core NEVER imports from infrastructure: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, any object with these methods
      can back a collection (tests use small fakes)
    - Async in Protocol: engine methods are async because implementations do IO;
      the pure transformations in collection_ops never are
"""

from typing import Protocol


class KeyValueEngine(Protocol):
    """Durable key-value namespace holding one encoded slot per collection."""
    async def get(self, key: str) -> bytes | None: ...
    async def set(self, key: str, value: bytes) -> None: ...
    async def clear_all(self) -> None: ...
    async def close(self) -> None: ...


class IdGenerator(Protocol):
    """Produces a non-empty, collision-resistant identifier per call."""
    def __call__(self) -> str: ...
