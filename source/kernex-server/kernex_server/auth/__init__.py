"""Authentication module."""

from kernex_server.auth.api_key import APIKeyAuth, InvalidAPIKeyError, get_api_key

__all__ = ["APIKeyAuth", "InvalidAPIKeyError", "get_api_key"]
