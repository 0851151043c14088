"""Gateway authentication: login handshake and session policy."""

from kernex_core.gateway.session import AuthResult, Denied, DenialReason, Granted, Session
from kernex_core.gateway.handshake import DEFAULT_BLACKLIST, AuthHandshake

__all__ = [
    "AuthHandshake",
    "AuthResult",
    "DEFAULT_BLACKLIST",
    "Denied",
    "DenialReason",
    "Granted",
    "Session",
]
