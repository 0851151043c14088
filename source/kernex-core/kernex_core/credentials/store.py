"""Gateway credential storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from kernex_core.credentials.record import CredentialRecord
from kernex_core.errors import ConflictError


class CredentialStore(ABC):
    """Abstract base class for gateway account storage."""

    @abstractmethod
    async def get_record(self, username: str) -> CredentialRecord | None:
        """Get an account by exact username.

        Args:
            username: Login name.

        Returns:
            The record, or None if no such account exists.
        """
        pass

    @abstractmethod
    async def create_account(self, record: CredentialRecord) -> None:
        """Store a new account.

        Raises:
            ConflictError: If the username is already taken.
        """
        pass

    @abstractmethod
    async def delete_account(self, username: str) -> bool:
        """Delete an account.

        Returns:
            True if the account was deleted, False if not found.
        """
        pass

    @abstractmethod
    async def list_accounts(self) -> list[CredentialRecord]:
        """List all accounts ordered by username."""
        pass


class MemoryCredentialStore(CredentialStore):
    """In-memory account storage."""

    def __init__(self) -> None:
        self._records: dict[str, CredentialRecord] = {}

    async def get_record(self, username: str) -> CredentialRecord | None:
        return self._records.get(username)

    async def create_account(self, record: CredentialRecord) -> None:
        if record.username in self._records:
            raise ConflictError(f"Account already exists: {record.username}")
        self._records[record.username] = record

    async def delete_account(self, username: str) -> bool:
        return self._records.pop(username, None) is not None

    async def list_accounts(self) -> list[CredentialRecord]:
        return [self._records[name] for name in sorted(self._records)]
