"""Pydantic data models."""

from kernex_server.models.common import ErrorResponse, HealthResponse
from kernex_server.models.files import (
    FileContentResponse,
    FileCreateRequest,
    FileDeleteRequest,
    FileNodeResponse,
    FileOperationResponse,
    FileRenameRequest,
    FileTreeResponse,
    FileWriteRequest,
)
from kernex_server.models.gateway import (
    GatewayAccountCreateRequest,
    GatewayAccountListResponse,
    GatewayAccountResponse,
    GatewayLogResponse,
    GatewaySettingsRequest,
    GatewayStatusResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "FileContentResponse",
    "FileCreateRequest",
    "FileDeleteRequest",
    "FileNodeResponse",
    "FileOperationResponse",
    "FileRenameRequest",
    "FileTreeResponse",
    "FileWriteRequest",
    "GatewayAccountCreateRequest",
    "GatewayAccountListResponse",
    "GatewayAccountResponse",
    "GatewayLogResponse",
    "GatewaySettingsRequest",
    "GatewayStatusResponse",
]
