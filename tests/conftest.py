"""Root conftest: shared test configuration."""

import os

# Ensure tests never write the default on-disk database
os.environ.setdefault("ITEMDB_STORAGE_BACKEND", "memory")
os.environ.setdefault("ITEMDB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
