"""Gateway management models."""

import ipaddress
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class GatewayStatusResponse(BaseModel):
    """Current gateway state."""

    running: bool = Field(..., description="Whether the FTP listener is accepting connections")
    state: str = Field(..., description="Lifecycle state: running or stopped")
    port: int = Field(..., description="Control connection port")
    passive_ports: list[int] | None = Field(
        None, description="Passive port range as [min, max]; null when the OS picks the ports"
    )
    external_address: str | None = Field(None, description="Address advertised for passive mode")
    enabled: bool = Field(..., description="Persisted enabled flag")
    last_error: str | None = Field(None, description="Last start failure, if any")


class GatewaySettingsRequest(BaseModel):
    """Update of runtime gateway settings. Omitted fields are unchanged."""

    enabled: bool | None = Field(None, description="Enable or disable the gateway")
    external_address: str | None = Field(
        None, max_length=255, description="Address advertised to clients in passive mode"
    )

    @field_validator("external_address")
    @classmethod
    def _check_address(cls, value: str | None) -> str | None:
        if value:
            ipaddress.ip_address(value)  # passive replies need a literal IP
        return value


class GatewayAccountCreateRequest(BaseModel):
    """Request body for creating a gateway account."""

    username: str = Field(
        ..., min_length=1, max_length=128, pattern=r"^[A-Za-z0-9._-]+$", description="Login name"
    )
    password: str = Field(..., min_length=8, max_length=72, description="Plaintext password")
    root_dir: str = Field("", max_length=1024, description="Home directory inside the workspace")


class GatewayAccountResponse(BaseModel):
    """A gateway account without its password hash."""

    username: str
    root_dir: str
    created_at: datetime


class GatewayAccountListResponse(BaseModel):
    """List of gateway accounts."""

    accounts: list[GatewayAccountResponse]
    total: int


class GatewayLogResponse(BaseModel):
    """Recent gateway log lines, oldest first."""

    lines: list[str]
