"""itemdb entry point: builds the configured engine and opens an ItemDatabase.

Invariants:
    - Engine chosen explicitly from settings (no auto-discovery)
    - The slot table exists before the first collection is opened
    - The engine is closed when the open_database context exits, even on error

Design Decisions:
    - Async context manager mirrors an application lifespan: setup before
      yield, teardown after
    - Logging only configured when settings ask for it: embedding
      applications usually own the root logger
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from itemdb.config import Settings, get_settings
from itemdb.core.domain_types import StorageBackend
from itemdb.core.errors import ConfigurationError
from itemdb.core.repository_protocols import KeyValueEngine
from itemdb.infrastructure.database import SqlAlchemyEngine
from itemdb.infrastructure.memory_engine import InMemoryEngine
from itemdb.infrastructure.observability import setup_logging
from itemdb.services.item_database import ItemDatabase

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> KeyValueEngine:
    """Construct the KeyValueEngine named by settings.storage_backend."""
    if settings.storage_backend == StorageBackend.MEMORY:
        return InMemoryEngine()
    if settings.storage_backend == StorageBackend.SQLALCHEMY:
        if settings.is_sqlite:
            return SqlAlchemyEngine(settings.database_url)
        return SqlAlchemyEngine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    raise ConfigurationError(
        f"Unsupported storage backend: {settings.storage_backend!r}", "storage_backend",
    )


@asynccontextmanager
async def open_database(settings: Settings | None = None) -> AsyncIterator[ItemDatabase]:
    """Open an ItemDatabase for the duration of the context."""
    settings = settings or get_settings()
    if settings.configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    engine = build_engine(settings)
    database = ItemDatabase(engine, settings)
    try:
        if isinstance(engine, SqlAlchemyEngine):
            await engine.create_schema()
        logger.info(
            f"Item database opened ({settings.storage_backend.value})",
            extra={"operation": "open"},
        )
        yield database
    finally:
        await database.close()
