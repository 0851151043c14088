"""Tests for server settings."""

import pytest
from hypothesis import HealthCheck, given, settings as hypothesis_settings
from hypothesis import strategies as st
from pydantic import ValidationError

from kernex_server.config import ServerSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ["KERNEX_PORT", "KERNEX_GATEWAY_PORT", "KERNEX_API_KEYS", "KERNEX_AUTH_DISABLED"]:
        monkeypatch.delenv(name, raising=False)


class TestServerSettingsDefaults:
    """Test that ServerSettings provides the documented defaults."""

    def test_server_defaults(self):
        settings = ServerSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 3000
        assert settings.workers == 1
        assert settings.api_keys == []
        assert settings.auth_disabled is True
        assert settings.is_auth_enabled is False

    def test_gateway_defaults(self):
        settings = ServerSettings()
        assert settings.gateway_port == 2121
        assert settings.passive_ports == range(30000, 30101)
        assert settings.gateway_banner == "Welcome to Kernex FTP"
        assert settings.gateway_blacklist == ["node_modules", ".git"]
        assert settings.gateway_strict_home_dirs is False
        assert settings.password_hash_rounds == 10

    def test_sqlite_path_under_home(self):
        assert ServerSettings().sqlite_path.endswith("kernex.db")


class TestServerSettingsEnvironment:
    """Environment variables override defaults."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("KERNEX_GATEWAY_PORT", "2222")
        monkeypatch.setenv("KERNEX_GATEWAY_STRICT_HOME_DIRS", "true")

        settings = ServerSettings()

        assert settings.gateway_port == 2222
        assert settings.gateway_strict_home_dirs is True

    def test_api_keys_json(self, monkeypatch):
        monkeypatch.setenv("KERNEX_API_KEYS", '["k1", "k2"]')
        monkeypatch.setenv("KERNEX_AUTH_DISABLED", "false")

        settings = ServerSettings()

        assert settings.api_keys == ["k1", "k2"]
        assert settings.is_auth_enabled is True

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("KERNEX_PORT=4567\n")

        assert ServerSettings().port == 4567


class TestPassiveRange:
    """Validation of the passive port range."""

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError):
            ServerSettings(gateway_passive_port_min=30100, gateway_passive_port_max=30000)

    @given(st.integers(1024, 65535), st.integers(0, 500))
    @hypothesis_settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_range_is_inclusive(self, low, width):
        high = min(low + width, 65535)

        settings = ServerSettings(gateway_passive_port_min=low, gateway_passive_port_max=high)

        assert settings.passive_ports[0] == low
        assert settings.passive_ports[-1] == high
