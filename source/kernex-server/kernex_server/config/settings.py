"""Server configuration settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Server configuration loaded from environment variables.

    All settings can be configured via environment variables with the
    KERNEX_ prefix (e.g., KERNEX_PORT, KERNEX_GATEWAY_PORT).
    """

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1

    # Authentication
    api_keys: list[str] = []
    auth_disabled: bool = True  # Disabled by default for development

    # CORS
    cors_origins: list[str] = ["*"]

    # SQLite database for accounts and runtime settings
    sqlite_path: str = str(Path.home() / ".kernex" / "kernex.db")

    # Boundary of the HTTP file browser
    project_root: str = os.getcwd()

    # Boundary of the FTP gateway
    workspace_root: str = str(Path.cwd() / "workspace")

    # FTP gateway
    gateway_host: str = "0.0.0.0"
    gateway_port: int = 2121
    gateway_passive_port_min: int = 30000
    gateway_passive_port_max: int = 30100
    gateway_banner: str = "Welcome to Kernex FTP"
    gateway_blacklist: list[str] = ["node_modules", ".git"]
    gateway_strict_home_dirs: bool = False
    gateway_auth_timeout: float = 30.0
    gateway_max_login_attempts: int = 3
    gateway_log_buffer_size: int = 200

    # bcrypt cost for new gateway passwords
    password_hash_rounds: int = 10

    model_config = SettingsConfigDict(
        env_prefix="KERNEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_passive_range(self) -> "ServerSettings":
        if self.gateway_passive_port_min > self.gateway_passive_port_max:
            raise ValueError("gateway_passive_port_min must not exceed gateway_passive_port_max")
        return self

    @property
    def is_auth_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return not self.auth_disabled and len(self.api_keys) > 0

    @property
    def passive_ports(self) -> range:
        """Passive data port range, inclusive of both ends."""
        return range(self.gateway_passive_port_min, self.gateway_passive_port_max + 1)


@lru_cache
def get_settings() -> ServerSettings:
    """Get cached server settings instance."""
    return ServerSettings()
