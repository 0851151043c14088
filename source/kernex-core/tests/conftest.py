"""Pytest configuration and fixtures for Kernex Core tests."""

from datetime import datetime

import pytest

from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.record import CredentialRecord
from kernex_core.credentials.store import MemoryCredentialStore


@pytest.fixture(scope="session")
def hasher():
    """Fast bcrypt hasher (minimum cost) for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def workspace(tmp_path):
    """Create an empty workspace boundary directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def make_record(hasher):
    """Build a credential record with a hashed password."""
    def _make(username: str, password: str, root_dir: str = "") -> CredentialRecord:
        return CredentialRecord(
            username=username,
            password_hash=hasher.hash(password),
            root_dir=root_dir,
            created_at=datetime(2024, 1, 1, 12, 0, 0),
        )
    return _make


@pytest.fixture
def credential_store():
    """Create an empty in-memory credential store."""
    return MemoryCredentialStore()
