"""Gateway credentials: account records, password hashing and storage."""

from kernex_core.credentials.record import CredentialRecord
from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.store import CredentialStore, MemoryCredentialStore
from kernex_core.credentials.sqlite_store import SQLiteCredentialStore

__all__ = [
    "CredentialRecord",
    "PasswordHasher",
    "CredentialStore",
    "MemoryCredentialStore",
    "SQLiteCredentialStore",
]
