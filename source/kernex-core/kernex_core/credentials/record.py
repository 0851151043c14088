"""Gateway account record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CredentialRecord:
    """A gateway login account.

    Attributes:
        username: Unique login name.
        password_hash: bcrypt hash of the password.
        root_dir: Home directory relative to the workspace root. Untrusted.
        created_at: Creation time.
    """

    username: str
    password_hash: str
    root_dir: str = ""
    created_at: datetime = field(default_factory=datetime.now)
