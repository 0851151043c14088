"""API dependencies and exception handlers."""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from kernex_core.errors import (
    ConflictError,
    IOFailureError,
    InvalidCredentialsError,
    KernexError,
    LifecycleError,
    NotFoundError,
    PathTraversalError,
)
from kernex_server.models import ErrorResponse

logger = logging.getLogger(__name__)

# Context variable for request ID
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

# Core error class -> (error_code, HTTP status)
_CORE_ERROR_MAP: dict[type[KernexError], tuple[str, int]] = {
    PathTraversalError: ("PATH_TRAVERSAL", status.HTTP_400_BAD_REQUEST),
    NotFoundError: ("NOT_FOUND", status.HTTP_404_NOT_FOUND),
    ConflictError: ("CONFLICT", status.HTTP_409_CONFLICT),
    InvalidCredentialsError: ("INVALID_CREDENTIALS", status.HTTP_401_UNAUTHORIZED),
    IOFailureError: ("IO_FAILURE", status.HTTP_500_INTERNAL_SERVER_ERROR),
    LifecycleError: ("GATEWAY_UNAVAILABLE", status.HTTP_503_SERVICE_UNAVAILABLE),
}


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_ctx.get()


class KernexException(Exception):
    """Base exception for Kernex Server."""

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class AccountNotFoundError(KernexException):
    """Gateway account not found error."""

    def __init__(self, username: str):
        super().__init__(
            error_code="ACCOUNT_NOT_FOUND",
            message=f"Gateway account {username} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"username": username},
        )


class ServiceUnavailableError(KernexException):
    """Service unavailable error."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(
            error_code="SERVICE_UNAVAILABLE",
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


def core_error_response(exc: KernexError) -> JSONResponse:
    """Render a core error as an ErrorResponse."""
    error_code, status_code = "INTERNAL_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR
    for cls in type(exc).__mro__:
        if cls in _CORE_ERROR_MAP:
            error_code, status_code = _CORE_ERROR_MAP[cls]
            break
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error_code=error_code,
            message=exc.message or error_code,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup global exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(KernexException)
    async def kernex_exception_handler(
        request: Request,
        exc: KernexException,
    ) -> JSONResponse:
        """Handle Kernex server exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ).model_dump(),
        )

    @app.exception_handler(KernexError)
    async def core_exception_handler(
        request: Request,
        exc: KernexError,
    ) -> JSONResponse:
        """Handle transport-free core errors."""
        return core_error_response(exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions without leaking internals."""
        logger.exception(f"Unhandled error for request {get_request_id()}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error_code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            ).model_dump(),
        )


async def request_id_middleware(request: Request, call_next):
    """Middleware to generate and track request IDs.

    Args:
        request: FastAPI request object.
        call_next: Next middleware/handler in chain.

    Returns:
        Response with X-Request-ID header.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

    token = request_id_ctx.set(request_id)

    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_ctx.reset(token)


def _from_state(request: Request, name: str, label: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ServiceUnavailableError(f"{label} not initialized")
    return value


def get_project_files(request: Request):
    """Get the project file browser from app state."""
    return _from_state(request, "project_files", "Project file browser")


def get_credential_store(request: Request):
    """Get the gateway credential store from app state."""
    return _from_state(request, "credential_store", "Credential store")


def get_settings_store(request: Request):
    """Get the runtime settings store from app state."""
    return _from_state(request, "settings_store", "Settings store")


def get_password_hasher(request: Request):
    """Get the password hasher from app state."""
    return _from_state(request, "password_hasher", "Password hasher")


def get_gateway(request: Request):
    """Get the gateway lifecycle supervisor from app state."""
    return _from_state(request, "gateway", "Gateway")


def get_gateway_log_buffer(request: Request):
    """Get the gateway log buffer from app state."""
    return _from_state(request, "gateway_log_buffer", "Gateway log buffer")
