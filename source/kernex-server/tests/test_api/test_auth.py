"""Tests for management API key authentication."""

import string

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from hypothesis import given, settings, strategies as st

from kernex_server.api.deps import setup_exception_handlers
from kernex_server.auth import APIKeyAuth, get_api_key
from kernex_server.config import get_settings


def _app(auth: APIKeyAuth) -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/protected")
    async def protected(api_key: str | None = Depends(auth)):
        return {"api_key": api_key}

    return app


class TestAPIKeyAuth:
    """Tests for APIKeyAuth."""

    @pytest.fixture
    def client(self):
        return TestClient(_app(APIKeyAuth(api_keys=["valid-key-1", "valid-key-2"], disabled=False)))

    def test_missing_key(self, client):
        response = client.get("/protected")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"
        assert response.json()["message"] == "Missing API key"

    def test_invalid_key(self, client):
        response = client.get("/protected", headers={"X-API-Key": "nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid API key"

    def test_valid_keys(self, client):
        for key in ["valid-key-1", "valid-key-2"]:
            response = client.get("/protected", headers={"X-API-Key": key})
            assert response.status_code == 200
            assert response.json() == {"api_key": key}

    def test_disabled_allows_all(self):
        client = TestClient(_app(APIKeyAuth(api_keys=["valid-key"], disabled=True)))

        assert client.get("/protected").json() == {"api_key": None}

    def test_no_keys_configured_allows_all(self):
        client = TestClient(_app(APIKeyAuth(api_keys=[], disabled=False)))

        assert client.get("/protected").status_code == 200

    def test_reads_keys_from_settings(self, monkeypatch):
        monkeypatch.setenv("KERNEX_API_KEYS", '["from-env"]')
        monkeypatch.setenv("KERNEX_AUTH_DISABLED", "false")
        get_settings.cache_clear()
        try:
            client = TestClient(_app(APIKeyAuth()))

            assert client.get("/protected").status_code == 401
            response = client.get("/protected", headers={"X-API-Key": "from-env"})
            assert response.status_code == 200
        finally:
            get_settings.cache_clear()

    @given(
        st.text(alphabet=string.ascii_letters + string.digits + "-_", min_size=1, max_size=40)
        .filter(lambda k: k not in ("valid-key-1", "valid-key-2"))
    )
    @settings(max_examples=50)
    def test_arbitrary_keys_rejected(self, key):
        """Property: any key outside the configured set is refused."""
        client = TestClient(_app(APIKeyAuth(api_keys=["valid-key-1", "valid-key-2"], disabled=False)))

        response = client.get("/protected", headers={"X-API-Key": key})

        assert response.status_code == 401


class TestProtectedRoutes:
    """API key enforcement on the mounted routers."""

    @pytest.fixture
    def client(self, app):
        app.dependency_overrides[get_api_key] = APIKeyAuth(api_keys=["secret"], disabled=False)
        return TestClient(app)

    @pytest.mark.parametrize(
        "path", ["/api/v1/gateway/accounts", "/api/v1/gateway/status", "/api/v1/files/tree"]
    )
    def test_management_routes_require_key(self, client, path):
        assert client.get(path).status_code == 401
        assert client.get(path, headers={"X-API-Key": "secret"}).status_code == 200

    def test_health_is_public(self, client):
        assert client.get("/api/v1/health").status_code == 200

    def test_key_documented_in_openapi(self, client):
        schema = client.get("/openapi.json").json()

        schemes = schema["components"]["securitySchemes"]
        assert schemes["APIKeyHeader"] == {
            "type": "apiKey",
            "in": "header",
            "name": "X-API-Key",
            "description": "Management API key",
        }
        assert "security" in schema["paths"]["/api/v1/files/tree"]["get"]
        assert "security" not in schema["paths"]["/api/v1/health"]["get"]
