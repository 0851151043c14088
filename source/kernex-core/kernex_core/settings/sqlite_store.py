"""SQLite runtime settings storage backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from kernex_core.database.models import Base, SSetting
from kernex_core.errors import IOFailureError
from kernex_core.settings.store import SettingsStore

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class SQLiteSettingsStore(SettingsStore):
    """SQLite-backed settings storage.

    Args:
        db_path: Path to SQLite database file. Defaults to ~/.kernex/kernex.db
        engine: Optional existing SQLAlchemy async engine to share.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        if engine is not None:
            self._engine = engine
            self._owns_engine = False
            self.db_path = None
        else:
            if db_path is None:
                db_path = Path.home() / ".kernex" / "kernex.db"

            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            url = f"sqlite+aiosqlite:///{self.db_path}"
            self._engine = create_async_engine(url, echo=False)
            self._owns_engine = True

        self._session_factory = sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_tables(self) -> None:
        """Create the settings table if it doesn't exist."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Settings table initialized: {self.db_path}")

    async def close(self) -> None:
        """Close the database engine if owned."""
        if self._owns_engine:
            await self._engine.dispose()

    async def get_setting(self, key: str, default: Any = None) -> Any:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(SSetting).where(SSetting.key == key))
                model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read setting {key}: {e}")
            raise IOFailureError("Settings store unavailable") from e

        if model is None:
            return default
        try:
            return json.loads(model.value)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed value for setting {key}")
            return default

    async def set_setting(self, key: str, value: Any) -> None:
        encoded = json.dumps(value, ensure_ascii=False)
        try:
            async with self._session_factory() as db:
                model = await db.get(SSetting, key)
                if model is None:
                    db.add(SSetting(key=key, value=encoded))
                else:
                    model.value = encoded
                    model.updated_at = datetime.now()
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write setting {key}: {e}")
            raise IOFailureError("Settings store unavailable") from e
        logger.debug(f"Setting updated: {key}")

    async def get_all(self) -> dict[str, Any]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(SSetting))
                models = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list settings: {e}")
            raise IOFailureError("Settings store unavailable") from e

        values: dict[str, Any] = {}
        for model in models:
            try:
                values[model.key] = json.loads(model.value)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring malformed value for setting {model.key}")
        return values
