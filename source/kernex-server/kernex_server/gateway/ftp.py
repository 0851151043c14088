"""FTP transport for the gateway, built on pyftpdlib.

Each connection is served by its own thread (``ThreadedFTPServer``).
Logins are delegated to the asyncio :class:`AuthHandshake` running on
the application event loop, and every filesystem command is confined
to the session root by :class:`ConfinedFilesystem`.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path

from pyftpdlib.authorizers import AuthenticationFailed
from pyftpdlib.filesystems import AbstractedFS
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import ThreadedFTPServer

from kernex_core.errors import LifecycleError
from kernex_core.gateway.handshake import AuthHandshake
from kernex_core.gateway.session import Denied, Session
from kernex_core.workspace.confine import confine

logger = logging.getLogger(__name__)

# Full read/write access inside the session root
SESSION_PERMS = "elradfmwMT"

POLL_INTERVAL = 0.1


class HandshakeAuthorizer:
    """pyftpdlib authorizer backed by :class:`AuthHandshake`.

    pyftpdlib calls the authorizer from the connection's thread, so the
    session granted at login is kept in thread-local storage and read
    back by the other authorizer hooks of the same connection.

    Args:
        handshake: Login handshake to delegate to.
        loop: Event loop the handshake runs on.
        auth_timeout: Seconds to wait for the handshake before denying.
    """

    def __init__(
        self,
        handshake: AuthHandshake,
        loop: asyncio.AbstractEventLoop,
        auth_timeout: float = 30.0,
    ) -> None:
        self.handshake = handshake
        self.loop = loop
        self.auth_timeout = auth_timeout
        self._local = threading.local()

    @property
    def current_session(self) -> Session | None:
        return getattr(self._local, "session", None)

    def validate_authentication(self, username: str, password: str, handler) -> None:
        self._local.session = None
        future = asyncio.run_coroutine_threadsafe(
            self.handshake.authenticate(username, password), self.loop
        )
        try:
            result = future.result(timeout=self.auth_timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            logger.warning(f"Gateway login timed out: {username}")
            raise AuthenticationFailed("Login timed out.")

        if isinstance(result, Denied):
            raise AuthenticationFailed(result.message)

        self._local.session = result.session

    def get_home_dir(self, username: str) -> str:
        session = self.current_session
        if session is None or session.username != username:
            raise AuthenticationFailed("Login required.")
        return str(session.root)

    def has_user(self, username: str) -> bool:
        session = self.current_session
        return session is not None and session.username == username

    def has_perm(self, username: str, perm: str, path: str | None = None) -> bool:
        if perm not in SESSION_PERMS or not self.has_user(username):
            return False
        if path is None:
            return True
        target = Path(os.path.normpath(path))
        root = self.current_session.root
        return target == root or target.is_relative_to(root)

    def get_perms(self, username: str) -> str:
        return SESSION_PERMS if self.has_user(username) else ""

    def get_msg_login(self, username: str) -> str:
        return "Login successful."

    def get_msg_quit(self, username: str) -> str:
        return "Goodbye."

    def impersonate_user(self, username: str, password: str) -> None:
        pass

    def terminate_impersonation(self, username: str) -> None:
        pass


class ConfinedFilesystem(AbstractedFS):
    """pyftpdlib filesystem confined to the session root.

    FTP paths are mapped through :func:`confine`; paths whose real path
    leaves the root or crosses a blacklisted name are rejected, and
    blacklisted entries are hidden from listings.
    """

    blacklist: frozenset[str] = frozenset()

    def ftp2fs(self, ftppath: str) -> str:
        return str(confine(self.root, self.ftpnorm(ftppath)))

    def _blacklisted(self, path: str) -> bool:
        root = Path(self.realpath(self.root))
        try:
            parts = Path(self.realpath(path)).relative_to(root).parts
        except ValueError:
            return True
        return any(part in self.blacklist for part in parts)

    def validpath(self, path: str) -> bool:
        if not super().validpath(path):
            return False
        return not self._blacklisted(path)

    def _visible(self, names: Iterable[str]) -> list[str]:
        return [name for name in names if name not in self.blacklist]

    def listdir(self, path: str) -> list[str]:
        return self._visible(super().listdir(path))

    def listdirinfo(self, path: str) -> list[str]:
        return self._visible(super().listdirinfo(path))


class KernexFTPHandler(FTPHandler):
    """FTP handler with the gateway's sandbox wired in."""

    abstracted_fs = ConfinedFilesystem
    permit_foreign_addresses = False
    permit_privileged_ports = False


class FtpListener:
    """A bound FTP server serving connections on a background thread.

    Args:
        handshake: Login handshake.
        host: Interface to bind.
        port: Control port to bind. 0 picks a free port.
        passive_ports: Ports offered for passive data connections. None lets
            the OS pick.
        external_address: Address advertised in passive replies.
        banner: Greeting sent on connect.
        blacklist: Entry names hidden from every session.
        max_login_attempts: Failed logins before disconnecting.
        auth_timeout: Seconds to wait for the handshake.
        auth_failed_timeout: Delay before replying to a failed login.
        loop: Event loop the handshake runs on. Defaults to the running loop.
    """

    def __init__(
        self,
        handshake: AuthHandshake,
        host: str = "0.0.0.0",
        port: int = 2121,
        passive_ports: Iterable[int] | None = range(30000, 30101),
        external_address: str | None = None,
        banner: str = "Welcome to Kernex FTP",
        blacklist: Iterable[str] = ("node_modules", ".git"),
        max_login_attempts: int = 3,
        auth_timeout: float = 30.0,
        auth_failed_timeout: float = 3.0,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.passive_ports = list(passive_ports) if passive_ports is not None else None
        self.external_address = external_address or None
        self.banner = banner
        self.blacklist = frozenset(blacklist)
        self.max_login_attempts = max_login_attempts
        self.auth_failed_timeout = auth_failed_timeout
        self.authorizer = HandshakeAuthorizer(
            handshake,
            loop if loop is not None else asyncio.get_running_loop(),
            auth_timeout,
        )
        self._server: ThreadedFTPServer | None = None
        self._thread: threading.Thread | None = None
        self._active = threading.Event()

    def _handler_class(self) -> type[KernexFTPHandler]:
        filesystem = type(
            "SessionFilesystem",
            (ConfinedFilesystem,),
            {"blacklist": self.blacklist},
        )
        return type(
            "SessionFTPHandler",
            (KernexFTPHandler,),
            {
                "authorizer": self.authorizer,
                "abstracted_fs": filesystem,
                "passive_ports": self.passive_ports,
                "masquerade_address": self.external_address,
                "banner": self.banner,
                "max_login_attempts": self.max_login_attempts,
                "auth_failed_timeout": self.auth_failed_timeout,
            },
        )

    @property
    def address(self) -> tuple[str, int] | None:
        """Bound (host, port), or None when not started."""
        if self._server is None:
            return None
        return self._server.address

    def start(self) -> None:
        """Bind the control port and start serving.

        Raises:
            LifecycleError: If the port cannot be bound.
        """
        if self._server is not None:
            raise LifecycleError("FTP listener already started")
        try:
            self._server = ThreadedFTPServer((self.host, self.port), self._handler_class())
        except OSError as e:
            raise LifecycleError(f"Cannot bind FTP port {self.port}: {e.strerror or e}") from e

        self._active.set()
        self._thread = threading.Thread(
            target=self._serve, name=f"kernex-ftp-{self.port}", daemon=True
        )
        self._thread.start()
        host, port = self._server.address
        logger.info(f"FTP listener bound on {host}:{port}")

    def _serve(self) -> None:
        server = self._server
        try:
            while self._active.is_set():
                server.serve_forever(timeout=POLL_INTERVAL, blocking=False, handle_exit=False)
        finally:
            server.close_all()

    def close(self, timeout: float = 10.0) -> None:
        """Stop accepting, disconnect every session and release the port."""
        if self._server is None:
            return
        self._active.clear()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("FTP listener thread did not exit in time")
        self._server = None
        self._thread = None
        logger.info("FTP listener closed")
