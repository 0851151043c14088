"""End-to-end tests for the FTP gateway using ftplib."""

import asyncio
import ftplib
import io
import os

import pytest

from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.record import CredentialRecord
from kernex_core.credentials.store import MemoryCredentialStore
from kernex_core.gateway.handshake import AuthHandshake
from kernex_core.workspace.resolver import SessionRootResolver
from kernex_server.gateway.ftp import ConfinedFilesystem, FtpListener


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "workspace"
    (root / "team-a" / "node_modules").mkdir(parents=True)
    (root / "team-a" / "readme.txt").write_text("team a files")
    (root / "team-b").mkdir()
    (root / "team-b" / "private.txt").write_text("team b only")
    return root


@pytest.fixture
async def listener(workspace):
    hasher = PasswordHasher(rounds=4)
    store = MemoryCredentialStore()
    await store.create_account(
        CredentialRecord(username="alice", password_hash=hasher.hash("alice-pass"), root_dir="team-a")
    )
    handshake = AuthHandshake(store, hasher, SessionRootResolver(workspace))
    listener = FtpListener(
        handshake,
        host="127.0.0.1",
        port=0,
        passive_ports=None,
        auth_failed_timeout=0.05,
    )
    await asyncio.to_thread(listener.start)
    yield listener
    await asyncio.to_thread(listener.close)


def _connect(listener) -> ftplib.FTP:
    ftp = ftplib.FTP()
    ftp.connect("127.0.0.1", listener.address[1], timeout=10)
    return ftp


def _login(listener, username="alice", password="alice-pass") -> ftplib.FTP:
    ftp = _connect(listener)
    ftp.login(username, password)
    return ftp


class TestFtpGateway:
    """Scenarios against a live FTP listener."""

    @pytest.mark.asyncio
    async def test_banner(self, listener):
        def scenario():
            ftp = _connect(listener)
            try:
                return ftp.getwelcome()
            finally:
                ftp.close()

        assert "Welcome to Kernex FTP" in await asyncio.to_thread(scenario)

    @pytest.mark.asyncio
    async def test_login_confined_to_home(self, listener, workspace):
        def scenario():
            ftp = _login(listener)
            try:
                pwd = ftp.pwd()
                with pytest.raises(ftplib.error_perm) as exc_info:
                    ftp.cwd("../team-b")
                return pwd, str(exc_info.value), ftp.pwd(), ftp.nlst()
            finally:
                ftp.quit()

        pwd, cwd_error, pwd_after, names = await asyncio.to_thread(scenario)

        assert pwd == "/"
        assert cwd_error.startswith("550")
        assert pwd_after == "/"
        assert "readme.txt" in names
        assert "private.txt" not in names
        assert (workspace / "team-a").is_dir()

    @pytest.mark.asyncio
    async def test_cannot_read_other_home(self, listener):
        def scenario():
            ftp = _login(listener)
            try:
                with pytest.raises(ftplib.error_perm):
                    ftp.retrbinary("RETR ../team-b/private.txt", lambda data: None)
            finally:
                ftp.quit()

        await asyncio.to_thread(scenario)

    @pytest.mark.asyncio
    async def test_upload_lands_in_home(self, listener, workspace):
        def scenario():
            ftp = _login(listener)
            try:
                ftp.storbinary("STOR hello.txt", io.BytesIO(b"hello"))
                chunks = []
                ftp.retrbinary("RETR hello.txt", chunks.append)
                return b"".join(chunks)
            finally:
                ftp.quit()

        assert await asyncio.to_thread(scenario) == b"hello"
        assert (workspace / "team-a" / "hello.txt").read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_blacklisted_entries_hidden_and_denied(self, listener):
        def scenario():
            ftp = _login(listener)
            try:
                names = ftp.nlst()
                with pytest.raises(ftplib.error_perm) as exc_info:
                    ftp.cwd("node_modules")
                return names, str(exc_info.value)
            finally:
                ftp.quit()

        names, error = await asyncio.to_thread(scenario)

        assert "node_modules" not in names
        assert error.startswith("550")

    @pytest.mark.asyncio
    async def test_bad_logins_are_indistinguishable(self, listener):
        def attempt(username, password):
            ftp = _connect(listener)
            try:
                with pytest.raises(ftplib.error_perm) as exc_info:
                    ftp.login(username, password)
                return str(exc_info.value)
            finally:
                ftp.close()

        wrong_password = await asyncio.to_thread(attempt, "alice", "wrong-pass")
        missing_user = await asyncio.to_thread(attempt, "nobody", "wrong-pass")

        assert wrong_password.startswith("530")
        assert wrong_password == missing_user

    @pytest.mark.asyncio
    async def test_close_releases_port(self, listener):
        port = listener.address[1]

        await asyncio.to_thread(listener.close)

        with pytest.raises(OSError):
            await asyncio.to_thread(ftplib.FTP().connect, "127.0.0.1", port, 2)


class TestConfinedFilesystem:
    """Direct tests for the pyftpdlib filesystem adapter."""

    @pytest.fixture
    def fs(self, workspace):
        filesystem = type("TestFS", (ConfinedFilesystem,), {"blacklist": frozenset({"node_modules"})})
        return filesystem(str(workspace / "team-a"), None)

    def test_ftp2fs_clamps_to_root(self, fs, workspace):
        assert fs.ftp2fs("/../../team-b") == str(workspace / "team-a" / "team-b")

    def test_validpath_rejects_blacklisted(self, fs, workspace):
        assert fs.validpath(str(workspace / "team-a" / "readme.txt")) is True
        assert fs.validpath(str(workspace / "team-a" / "node_modules")) is False

    def test_validpath_rejects_outside(self, fs, workspace):
        assert fs.validpath(str(workspace / "team-b")) is False

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_validpath_rejects_symlink_escape(self, fs, workspace):
        (workspace / "team-a" / "escape").symlink_to(workspace / "team-b", target_is_directory=True)

        assert fs.validpath(str(workspace / "team-a" / "escape")) is False

    def test_listdir_hides_blacklisted(self, fs):
        assert "node_modules" not in fs.listdir(fs.root)
        assert "readme.txt" in fs.listdir(fs.root)
