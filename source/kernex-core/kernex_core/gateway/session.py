"""Gateway session and handshake outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Session:
    """Sandbox parameters for one authenticated connection.

    Attributes:
        username: Authenticated account.
        root: Absolute directory the connection is confined to.
        cwd: Working directory relative to ``root``.
        blacklist: Entry names hidden from and inaccessible to the client.
        created_at: Login time.
    """

    username: str
    root: Path
    cwd: str = "/"
    blacklist: frozenset[str] = frozenset()
    created_at: datetime = field(default_factory=datetime.now)


class DenialReason(str, Enum):
    """Why a login was refused."""

    INVALID_CREDENTIALS = "invalid_credentials"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Granted:
    """Successful login."""

    session: Session


@dataclass(frozen=True)
class Denied:
    """Refused login. ``message`` is safe to show to the client."""

    reason: DenialReason
    message: str


AuthResult = Granted | Denied
