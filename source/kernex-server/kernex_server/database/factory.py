"""Database factory for the server's shared SQLite engine."""

import logging
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from kernex_core.credentials.sqlite_store import SQLiteCredentialStore
from kernex_core.database.models import Base
from kernex_core.settings.sqlite_store import SQLiteSettingsStore
from kernex_server.config import get_settings

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """Factory for the shared database engine and the stores built on it."""

    _engine: AsyncEngine | None = None

    @classmethod
    def get_database_url(cls) -> str:
        """Get database URL from configuration."""
        sqlite_path = Path(get_settings().sqlite_path).expanduser()
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{sqlite_path}"

    @classmethod
    async def get_engine(cls) -> AsyncEngine:
        """Get or create async database engine."""
        if cls._engine is None:
            cls._engine = create_async_engine(
                cls.get_database_url(),
                echo=False,
                connect_args={"check_same_thread": False},
            )
            logger.info(f"Database engine created: {get_settings().sqlite_path}")
        return cls._engine

    @classmethod
    async def create_tables(cls) -> None:
        """Create all tables in the database."""
        engine = await cls.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    @classmethod
    async def create_credential_store(cls) -> SQLiteCredentialStore:
        """Create a credential store sharing the engine."""
        return SQLiteCredentialStore(engine=await cls.get_engine())

    @classmethod
    async def create_settings_store(cls) -> SQLiteSettingsStore:
        """Create a settings store sharing the engine."""
        return SQLiteSettingsStore(engine=await cls.get_engine())

    @classmethod
    async def close(cls) -> None:
        """Close database connections."""
        if cls._engine is not None:
            await cls._engine.dispose()
            cls._engine = None
            logger.info("Database connections closed")
