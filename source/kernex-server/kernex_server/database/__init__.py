"""Database module for Kernex Server."""

from kernex_server.database.factory import DatabaseFactory

__all__ = ["DatabaseFactory"]
