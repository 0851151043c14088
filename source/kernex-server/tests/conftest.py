"""Test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.store import MemoryCredentialStore
from kernex_core.errors import LifecycleError
from kernex_core.settings.store import MemorySettingsStore
from kernex_core.workspace.files import ProjectFiles
from kernex_server.config import get_settings
from kernex_server.gateway.lifecycle import GatewayLifecycle
from kernex_server.gateway.log_buffer import GatewayLogBuffer
from kernex_server.main import create_app


class FakeListener:
    """Listener double recording start/close calls."""

    def __init__(self, external_address, fail_with=None, port=2121, passive_ports=range(30000, 30101)):
        self.external_address = external_address
        self.fail_with = fail_with
        self.port = port
        self.passive_ports = passive_ports
        self.started = False
        self.closed = False

    @property
    def address(self):
        return ("127.0.0.1", self.port) if self.started and not self.closed else None

    def start(self):
        if self.fail_with is not None:
            raise self.fail_with
        self.started = True

    def close(self):
        self.closed = True


class FakeListenerFactory:
    """Creates FakeListeners and remembers them."""

    def __init__(self):
        self.created: list[FakeListener] = []
        self.fail_with: Exception | None = None
        self.passive_ports = range(30000, 30101)

    def __call__(self, external_address):
        listener = FakeListener(
            external_address, fail_with=self.fail_with, passive_ports=self.passive_ports
        )
        self.created.append(listener)
        return listener

    @property
    def started(self):
        return [listener for listener in self.created if listener.started]


@pytest.fixture
def listener_factory():
    return FakeListenerFactory()


@pytest.fixture
def settings_store():
    return MemorySettingsStore()


@pytest.fixture
def lifecycle(settings_store, listener_factory):
    return GatewayLifecycle(settings_store, listener_factory, port=2121)


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def workspace_root(tmp_path, monkeypatch):
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("KERNEX_WORKSPACE_ROOT", str(root))
    get_settings.cache_clear()
    yield root
    get_settings.cache_clear()


@pytest.fixture
def app(project_root, workspace_root, settings_store, lifecycle):
    """Create test FastAPI app with initialized state (bypassing lifespan)."""
    app = create_app()
    app.state.project_files = ProjectFiles(project_root)
    app.state.credential_store = MemoryCredentialStore()
    app.state.settings_store = settings_store
    app.state.password_hasher = PasswordHasher(rounds=4)
    app.state.gateway = lifecycle
    app.state.gateway_log_buffer = GatewayLogBuffer(capacity=50)
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def bind_failure():
    return LifecycleError("Cannot bind FTP port 2121: Address already in use")
