"""Management API key check.

Mounted on the ``/files`` and ``/gateway`` routers; ``/health`` stays
public. Keys come from ``KERNEX_API_KEYS``. Nothing is enforced while
``KERNEX_AUTH_DISABLED`` is true or no key is configured.
"""

import secrets

from fastapi import Security, status
from fastapi.security import APIKeyHeader

from kernex_server.api.deps import KernexException
from kernex_server.config import get_settings

API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(
    name=API_KEY_HEADER,
    description="Management API key",
    auto_error=False,
)


class InvalidAPIKeyError(KernexException):
    """Missing or unknown management API key."""

    def __init__(self, message: str):
        super().__init__(
            error_code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class APIKeyAuth:
    """Router dependency checking ``X-API-Key`` against the accepted keys.

    Args:
        api_keys: Accepted keys. None reads ``api_keys`` from settings.
        disabled: Skip the check. None reads ``auth_disabled`` from settings.
    """

    def __init__(self, api_keys: list[str] | None = None, disabled: bool | None = None):
        self.api_keys = api_keys
        self.disabled = disabled

    def accepted_keys(self) -> list[str]:
        """Keys to enforce; empty when the check is off."""
        settings = get_settings()
        disabled = settings.auth_disabled if self.disabled is None else self.disabled
        if disabled:
            return []
        return settings.api_keys if self.api_keys is None else self.api_keys

    async def __call__(self, api_key: str | None = Security(api_key_header)) -> str | None:
        keys = self.accepted_keys()
        if not keys:
            return None
        if not api_key:
            raise InvalidAPIKeyError("Missing API key")

        supplied = api_key.encode("utf-8")
        if not any(secrets.compare_digest(supplied, key.encode("utf-8")) for key in keys):
            raise InvalidAPIKeyError("Invalid API key")
        return api_key


# Default dependency; tests swap it through app.dependency_overrides
get_api_key = APIKeyAuth()
