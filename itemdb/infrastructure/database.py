"""SQLAlchemy Engine: async KeyValueEngine over a single `slots` table.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to StorageReadError / StorageWriteError
    - set() is an upsert: one row per key, last write wins
    - clear_all() deletes every row of the table, not just one collection

Design Decisions:
    - One table, opaque bytes: the engine knows nothing about records,
      mirroring the key-value contract the Collection Store is written against
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Pool options only forwarded for server databases; SQLite pools reject them
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy import delete, select, text
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from itemdb.core.errors import (
    ErrorContext, StorageError, StorageReadError, StorageWriteError,
)
from itemdb.db.base import Base
from itemdb.models.slot import Slot

logger = logging.getLogger(__name__)

_READ_OPERATIONS = frozenset({"get", "keys"})


def _storage_error(operation: str, message: str, key: str | None) -> StorageError:
    context = ErrorContext(collection=key, operation=operation)
    if operation in _READ_OPERATIONS:
        return StorageReadError(message, operation, context)
    return StorageWriteError(message, operation, context)


class SqlAlchemyEngine:
    """Key-value namespace persisted through an async SQLAlchemy engine."""

    def __init__(self, database_url: str, **engine_kwargs: Any):
        self.engine = create_async_engine(
            database_url, pool_pre_ping=True, **engine_kwargs,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str, key: str | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and error mapping on exception."""
        session = self._session_factory()
        try:
            yield session
        except OperationalError as e:
            await session.rollback()
            logger.error(f"Slot {operation} operational error: {e}", extra={"key": key})
            raise _storage_error(operation, "Connection or operational error", key) from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"Slot {operation} driver error: {e}", extra={"key": key})
            raise _storage_error(operation, "Database driver error", key) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Slot {operation} SQLAlchemy error: {e}", extra={"key": key})
            raise _storage_error(operation, "Database operation failed", key) from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create the slots table if missing."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Slot schema creation failed: {e}")
            raise StorageWriteError("Could not create slots table", "create_schema") from e

    async def get(self, key: str) -> bytes | None:
        async with self.session("get", key) as db:
            result = await db.execute(select(Slot.value).where(Slot.key == key))
            return result.scalar_one_or_none()

    async def set(self, key: str, value: bytes) -> None:
        async with self.session("set", key) as db:
            await db.merge(Slot(
                key=key, value=value, updated_at=datetime.now(timezone.utc),
            ))
            await db.commit()

    async def delete(self, key: str) -> None:
        async with self.session("delete", key) as db:
            await db.execute(delete(Slot).where(Slot.key == key))
            await db.commit()

    async def clear_all(self) -> None:
        async with self.session("clear_all") as db:
            result = await db.execute(delete(Slot))
            await db.commit()
        logger.debug("Erased all slots", extra={"item_count": result.rowcount})

    async def keys(self) -> list[str]:
        """Slot names currently stored, sorted."""
        async with self.session("keys") as db:
            result = await db.execute(select(Slot.key).order_by(Slot.key))
            return list(result.scalars())

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except StorageError as e:
            logger.error(f"Slot engine health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()
