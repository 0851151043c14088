"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from kernex_core.credentials.password import PasswordHasher
from kernex_core.gateway.handshake import AuthHandshake
from kernex_core.workspace.files import ProjectFiles
from kernex_core.workspace.resolver import SessionRootResolver
from kernex_server import __version__
from kernex_server.api.deps import request_id_middleware, setup_exception_handlers
from kernex_server.api.v1 import files, gateway, health
from kernex_server.auth import get_api_key
from kernex_server.config import ServerSettings, get_settings
from kernex_server.database import DatabaseFactory
from kernex_server.gateway.ftp import FtpListener
from kernex_server.gateway.lifecycle import GatewayLifecycle, ListenerFactory
from kernex_server.gateway.log_buffer import GatewayLogBuffer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("kernex_core").setLevel(logging.INFO)
logging.getLogger("kernex_server").setLevel(logging.INFO)


def create_listener_factory(
    settings: ServerSettings,
    handshake: AuthHandshake,
    loop: asyncio.AbstractEventLoop,
) -> ListenerFactory:
    """Build the factory the lifecycle uses to create FTP listeners."""

    def factory(external_address: str | None) -> FtpListener:
        return FtpListener(
            handshake,
            host=settings.gateway_host,
            port=settings.gateway_port,
            passive_ports=settings.passive_ports,
            external_address=external_address,
            banner=settings.gateway_banner,
            blacklist=settings.gateway_blacklist,
            max_login_attempts=settings.gateway_max_login_attempts,
            auth_timeout=settings.gateway_auth_timeout,
            loop=loop,
        )

    return factory


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Opens the stores, reconciles the gateway with its persisted enabled
    flag on startup, and stops it on shutdown.
    """
    settings = get_settings()

    await DatabaseFactory.create_tables()
    credential_store = await DatabaseFactory.create_credential_store()
    settings_store = await DatabaseFactory.create_settings_store()
    logger.info(f"Using SQLite store: {settings.sqlite_path}")

    hasher = PasswordHasher(rounds=settings.password_hash_rounds)
    workspace_root = Path(settings.workspace_root)
    workspace_root.mkdir(parents=True, exist_ok=True)

    handshake = AuthHandshake(
        credential_store,
        hasher,
        SessionRootResolver(workspace_root, strict=settings.gateway_strict_home_dirs),
        blacklist=settings.gateway_blacklist,
    )

    log_buffer = GatewayLogBuffer(capacity=settings.gateway_log_buffer_size)
    log_buffer.attach()

    lifecycle = GatewayLifecycle(
        settings_store,
        create_listener_factory(settings, handshake, asyncio.get_running_loop()),
        port=settings.gateway_port,
        passive_ports=settings.passive_ports,
    )

    app.state.credential_store = credential_store
    app.state.settings_store = settings_store
    app.state.password_hasher = hasher
    app.state.project_files = ProjectFiles(settings.project_root)
    app.state.gateway_log_buffer = log_buffer
    app.state.gateway = lifecycle

    logger.info(f"Kernex Server v{__version__} starting...")
    logger.info(f"Listening on {settings.host}:{settings.port}")
    logger.info(f"Project root: {settings.project_root}")
    logger.info(f"Gateway workspace: {workspace_root}")

    await lifecycle.reconcile()

    yield

    await lifecycle.stop()
    log_buffer.detach()
    await DatabaseFactory.close()
    logger.info("Kernex Server shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Kernex Server",
        description="Kernex workspace file browser and FTP gateway",
        version=__version__,
        lifespan=lifespan,
    )

    # Setup CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup request ID middleware
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_id_middleware)

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include API routers; health stays public
    protected = [Depends(get_api_key)]
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(files.router, prefix="/api/v1", dependencies=protected)
    app.include_router(gateway.router, prefix="/api/v1", dependencies=protected)

    return app


# Create app instance
app = create_app()


def run():
    """Run the server using uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "kernex_server.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=False,
    )
