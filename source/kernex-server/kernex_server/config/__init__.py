"""Configuration module."""

from kernex_server.config.settings import ServerSettings, get_settings

__all__ = ["ServerSettings", "get_settings"]
