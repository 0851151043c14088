"""Runtime settings storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

GATEWAY_ENABLED = "gateway_enabled"
GATEWAY_EXTERNAL_ADDRESS = "gateway_external_address"


class SettingsStore(ABC):
    """Key/value store for settings that change while the server runs.

    Values must be JSON-serializable.
    """

    @abstractmethod
    async def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value, or ``default`` when unset."""
        pass

    @abstractmethod
    async def set_setting(self, key: str, value: Any) -> None:
        """Create or replace a setting value."""
        pass

    @abstractmethod
    async def get_all(self) -> dict[str, Any]:
        """Get every stored setting."""
        pass


class MemorySettingsStore(SettingsStore):
    """In-memory settings storage."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    async def get_setting(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    async def set_setting(self, key: str, value: Any) -> None:
        self._values[key] = value

    async def get_all(self) -> dict[str, Any]:
        return dict(self._values)
