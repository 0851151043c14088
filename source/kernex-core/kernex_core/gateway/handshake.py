"""Gateway login handshake."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.store import CredentialStore
from kernex_core.errors import IOFailureError, InvalidCredentialsError, PathTraversalError
from kernex_core.gateway.session import AuthResult, Denied, DenialReason, Granted, Session
from kernex_core.workspace.resolver import SessionRootResolver

logger = logging.getLogger(__name__)

DEFAULT_BLACKLIST = ("node_modules", ".git")

UNAVAILABLE_MESSAGE = "Service temporarily unavailable"


class AuthHandshake:
    """Authenticates a login and decides where its session is confined.

    The handshake only produces policy. Enforcing the session root on
    each command is left to the transport.

    Args:
        credentials: Account storage.
        hasher: Password hasher used for verification.
        resolver: Maps accounts to confined root directories.
        blacklist: Entry names hidden from every session.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        hasher: PasswordHasher,
        resolver: SessionRootResolver,
        blacklist: Iterable[str] = DEFAULT_BLACKLIST,
    ) -> None:
        self.credentials = credentials
        self.hasher = hasher
        self.resolver = resolver
        self.blacklist = frozenset(blacklist)

    @staticmethod
    def _invalid() -> Denied:
        return Denied(DenialReason.INVALID_CREDENTIALS, InvalidCredentialsError().message)

    def _verify_missing(self, password: str) -> bool:
        # Same bcrypt cost as a real account
        return self.hasher.verify(password, self.hasher.dummy_hash)

    async def authenticate(self, username: str, password: str) -> AuthResult:
        """Verify a login attempt.

        Args:
            username: Login name supplied by the client.
            password: Plaintext password supplied by the client.

        Returns:
            ``Granted`` with the session sandbox, or ``Denied``. A missing
            account and a wrong password produce identical denials.
        """
        try:
            record = await self.credentials.get_record(username)
        except IOFailureError as e:
            logger.error(f"Gateway login unavailable for {username}: {e}")
            return Denied(DenialReason.UNAVAILABLE, UNAVAILABLE_MESSAGE)

        if record is None:
            await asyncio.to_thread(self._verify_missing, password)
            logger.info(f"Gateway login denied: {username}")
            return self._invalid()

        valid = await asyncio.to_thread(self.hasher.verify, password, record.password_hash)
        if not valid:
            logger.info(f"Gateway login denied: {username}")
            return self._invalid()

        try:
            root = await asyncio.to_thread(self.resolver.resolve_root, record)
        except PathTraversalError:
            logger.warning(f"Gateway login denied for {username}: invalid home directory")
            return self._invalid()
        except OSError as e:
            logger.error(f"Failed to prepare home directory for {username}: {e}")
            return Denied(DenialReason.UNAVAILABLE, UNAVAILABLE_MESSAGE)

        logger.info(f"Gateway login: {username}")
        return Granted(Session(username=username, root=root, blacklist=self.blacklist))
