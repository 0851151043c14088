"""FTP gateway management API endpoints."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query, status

from kernex_core.credentials.password import PasswordHasher
from kernex_core.credentials.record import CredentialRecord
from kernex_core.credentials.store import CredentialStore
from kernex_core.settings.store import (
    GATEWAY_ENABLED,
    GATEWAY_EXTERNAL_ADDRESS,
    SettingsStore,
)
from kernex_core.workspace.confine import confine, relative_path
from kernex_server.api.deps import (
    AccountNotFoundError,
    KernexException,
    get_credential_store,
    get_gateway,
    get_gateway_log_buffer,
    get_password_hasher,
    get_settings_store,
)
from kernex_server.config import get_settings
from kernex_server.gateway.lifecycle import GatewayLifecycle, GatewayStatus
from kernex_server.gateway.log_buffer import GatewayLogBuffer
from kernex_server.models.gateway import (
    GatewayAccountCreateRequest,
    GatewayAccountListResponse,
    GatewayAccountResponse,
    GatewayLogResponse,
    GatewaySettingsRequest,
    GatewayStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gateway", tags=["gateway"])


async def _status_response(
    gateway_status: GatewayStatus, settings_store: SettingsStore
) -> GatewayStatusResponse:
    enabled = bool(await settings_store.get_setting(GATEWAY_ENABLED, False))
    external_address = gateway_status.external_address
    if external_address is None:
        external_address = await settings_store.get_setting(GATEWAY_EXTERNAL_ADDRESS)
    return GatewayStatusResponse(
        running=gateway_status.running,
        state=gateway_status.state.value,
        port=gateway_status.port,
        passive_ports=list(gateway_status.passive_ports) if gateway_status.passive_ports else None,
        external_address=external_address or None,
        enabled=enabled,
        last_error=gateway_status.last_error,
    )


def _account_response(record: CredentialRecord) -> GatewayAccountResponse:
    return GatewayAccountResponse(
        username=record.username,
        root_dir=record.root_dir,
        created_at=record.created_at,
    )


@router.get("/status", response_model=GatewayStatusResponse)
async def get_gateway_status(
    gateway: GatewayLifecycle = Depends(get_gateway),
    settings_store: SettingsStore = Depends(get_settings_store),
) -> GatewayStatusResponse:
    """Get the gateway state."""
    return await _status_response(gateway.status(), settings_store)


@router.post("/restart", response_model=GatewayStatusResponse)
async def restart_gateway(
    gateway: GatewayLifecycle = Depends(get_gateway),
    settings_store: SettingsStore = Depends(get_settings_store),
) -> GatewayStatusResponse:
    """Restart the gateway if enabled, or stop it if disabled."""
    gateway_status = await gateway.reconcile(force_restart=True)
    return await _status_response(gateway_status, settings_store)


@router.put("/settings", response_model=GatewayStatusResponse)
async def update_gateway_settings(
    request: GatewaySettingsRequest,
    gateway: GatewayLifecycle = Depends(get_gateway),
    settings_store: SettingsStore = Depends(get_settings_store),
) -> GatewayStatusResponse:
    """Update runtime gateway settings and apply them."""
    address_changed = False
    if request.external_address is not None:
        current = await settings_store.get_setting(GATEWAY_EXTERNAL_ADDRESS)
        address_changed = (current or "") != request.external_address
        await settings_store.set_setting(GATEWAY_EXTERNAL_ADDRESS, request.external_address)
    if request.enabled is not None:
        await settings_store.set_setting(GATEWAY_ENABLED, request.enabled)
        logger.info(f"Gateway {'enabled' if request.enabled else 'disabled'}")

    gateway_status = await gateway.reconcile(force_restart=address_changed)
    return await _status_response(gateway_status, settings_store)


@router.get("/logs", response_model=GatewayLogResponse)
async def get_gateway_logs(
    limit: int | None = Query(None, ge=1, le=10000, description="Return only the last N lines"),
    log_buffer: GatewayLogBuffer = Depends(get_gateway_log_buffer),
) -> GatewayLogResponse:
    """Get recent gateway log lines, oldest first."""
    return GatewayLogResponse(lines=log_buffer.lines(limit))


@router.get("/accounts", response_model=GatewayAccountListResponse)
async def list_accounts(
    credential_store: CredentialStore = Depends(get_credential_store),
) -> GatewayAccountListResponse:
    """List gateway accounts."""
    records = await credential_store.list_accounts()
    accounts = [_account_response(r) for r in records]
    return GatewayAccountListResponse(accounts=accounts, total=len(accounts))


@router.post(
    "/accounts",
    response_model=GatewayAccountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_account(
    request: GatewayAccountCreateRequest,
    credential_store: CredentialStore = Depends(get_credential_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> GatewayAccountResponse:
    """Create a gateway account.

    ``root_dir`` must stay inside the workspace; it is stored in its
    normalized relative form.
    """
    workspace_root = get_settings().workspace_root
    root_dir = relative_path(workspace_root, confine(workspace_root, request.root_dir))

    try:
        password_hash = await asyncio.to_thread(hasher.hash, request.password)
    except ValueError as e:
        raise KernexException(
            error_code="VALIDATION_ERROR",
            message=str(e),
            status_code=status.HTTP_400_BAD_REQUEST,
        ) from e

    record = CredentialRecord(
        username=request.username,
        password_hash=password_hash,
        root_dir=root_dir,
    )
    await credential_store.create_account(record)
    logger.info(f"Gateway account created: {record.username}")
    return _account_response(record)


@router.delete("/accounts/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    username: str,
    credential_store: CredentialStore = Depends(get_credential_store),
) -> None:
    """Delete a gateway account. Open sessions are not affected."""
    if not await credential_store.delete_account(username):
        raise AccountNotFoundError(username)
    logger.info(f"Gateway account deleted: {username}")
