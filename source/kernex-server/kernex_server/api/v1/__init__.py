"""API v1 routes."""

from kernex_server.api.v1 import files, gateway, health

__all__ = ["files", "gateway", "health"]
