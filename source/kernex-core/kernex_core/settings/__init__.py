"""Runtime settings storage."""

from kernex_core.settings.store import (
    GATEWAY_ENABLED,
    GATEWAY_EXTERNAL_ADDRESS,
    MemorySettingsStore,
    SettingsStore,
)
from kernex_core.settings.sqlite_store import SQLiteSettingsStore

__all__ = [
    "GATEWAY_ENABLED",
    "GATEWAY_EXTERNAL_ADDRESS",
    "SettingsStore",
    "MemorySettingsStore",
    "SQLiteSettingsStore",
]
