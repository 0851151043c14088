"""SQLite gateway credential storage backend."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from kernex_core.credentials.record import CredentialRecord
from kernex_core.credentials.store import CredentialStore
from kernex_core.database.models import Base, SGatewayAccount
from kernex_core.errors import ConflictError, IOFailureError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class SQLiteCredentialStore(CredentialStore):
    """SQLite-backed account storage.

    Uses SQLAlchemy async engine with aiosqlite.

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
        """Create the account table if it doesn't exist."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Gateway account table initialized: {self.db_path}")

    async def close(self) -> None:
        """Close the database engine if owned."""
        if self._owns_engine:
            await self._engine.dispose()
            logger.info("SQLite credential store closed")

    @staticmethod
    def _model_to_record(model: SGatewayAccount) -> CredentialRecord:
        return CredentialRecord(
            username=model.username,
            password_hash=model.password_hash,
            root_dir=model.root_dir or "",
            created_at=model.created_at,
        )

    async def get_record(self, username: str) -> CredentialRecord | None:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(SGatewayAccount).where(SGatewayAccount.username == username)
                )
                model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load gateway account: {e}")
            raise IOFailureError("Credential store unavailable") from e

        if model is None:
            return None
        return self._model_to_record(model)

    async def create_account(self, record: CredentialRecord) -> None:
        model = SGatewayAccount(
            username=record.username,
            password_hash=record.password_hash,
            root_dir=record.root_dir,
            created_at=record.created_at,
        )
        try:
            async with self._session_factory() as db:
                db.add(model)
                await db.commit()
        except IntegrityError as e:
            raise ConflictError(f"Account already exists: {record.username}") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to create gateway account: {e}")
            raise IOFailureError("Credential store unavailable") from e
        logger.info(f"Created gateway account: {record.username}")

    async def delete_account(self, username: str) -> bool:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    delete(SGatewayAccount).where(SGatewayAccount.username == username)
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete gateway account: {e}")
            raise IOFailureError("Credential store unavailable") from e

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted gateway account: {username}")
        return deleted

    async def list_accounts(self) -> list[CredentialRecord]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(SGatewayAccount).order_by(SGatewayAccount.username)
                )
                models = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list gateway accounts: {e}")
            raise IOFailureError("Credential store unavailable") from e
        return [self._model_to_record(m) for m in models]
