"""FTP gateway: transport, lifecycle supervisor and log capture."""

from kernex_server.gateway.ftp import ConfinedFilesystem, FtpListener, HandshakeAuthorizer
from kernex_server.gateway.lifecycle import GatewayLifecycle, GatewayState, GatewayStatus
from kernex_server.gateway.log_buffer import GatewayLogBuffer

__all__ = [
    "ConfinedFilesystem",
    "FtpListener",
    "HandshakeAuthorizer",
    "GatewayLifecycle",
    "GatewayState",
    "GatewayStatus",
    "GatewayLogBuffer",
]
