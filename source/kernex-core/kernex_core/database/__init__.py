"""Database models for Kernex Core."""

from kernex_core.database.models import Base, SGatewayAccount, SSetting

__all__ = [
    "Base",
    "SGatewayAccount",
    "SSetting",
]
