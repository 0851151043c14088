"""Health check endpoint."""

import time

from fastapi import APIRouter, Request

from kernex_server import __version__
from kernex_server.models import HealthResponse

router = APIRouter(tags=["health"])

# Server start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns service status, version, uptime and gateway state.
    """
    gateway = getattr(request.app.state, "gateway", None)
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime=time.time() - _start_time,
        gateway=gateway.status().state.value if gateway is not None else "stopped",
    )
