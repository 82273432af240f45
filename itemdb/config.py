"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be supplied as ITEMDB_<FIELD> or in a .env file
    - get_settings() is cached (lru_cache): single instance per process
    - database_url always names an async driver

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out of the box: a local SQLite file, historical global clear
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from itemdb.core.domain_types import ClearScope, StorageBackend

_ASYNC_DRIVERS = {
    "sqlite://": "sqlite+aiosqlite://",
    "postgresql://": "postgresql+asyncpg://",
}


class Settings(BaseSettings):
    """itemdb settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ITEMDB_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Storage
    storage_backend: StorageBackend = StorageBackend.SQLALCHEMY
    database_url: str = "sqlite+aiosqlite:///itemdb.sqlite3"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Plain sqlite:// and postgresql:// URLs get their async driver."""
        if isinstance(v, str):
            for plain, driver in _ASYNC_DRIVERS.items():
                if v.startswith(plain):
                    return v.replace(plain, driver, 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Collection behavior
    clear_scope: ClearScope = ClearScope.GLOBAL
    revert_on_write_failure: bool = True

    # Observability
    configure_logging: bool = False
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
