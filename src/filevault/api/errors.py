"""FileVault API error handling.

Provides VaultHttpError and FastAPI exception handlers that render every
failure as the shared error envelope with request_id tracing.

Global exception handlers:
- VaultHttpError: Transport-level errors (InvalidKey, PayloadTooLarge)
- FileVaultError: Storage taxonomy errors (BadPath, NotFound, ...)
- HTTPException: FastAPI/Starlette HTTP exceptions (unknown routes, methods)
- Exception: Catch-all for unhandled exceptions (fail closed, no stack traces)
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from filevault.api.error_model import get_error_code_for_status, make_error_response
from filevault.storage.errors import (
    FileVaultError,
    InvalidVersionError,
    StorageBackendError,
)

logger = logging.getLogger(__name__)

OPAQUE_FAILURE_MESSAGE = "Server failed to complete the file operation"


class VaultHttpError(Exception):
    """Application-level HTTP error raised by the transport layer.

    Attributes:
        status_code: HTTP status code (e.g., 401, 413).
        code: Machine-readable error code (e.g., "InvalidKey").
        message: Human-readable error message.
        details: Optional dict with additional error context.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


async def vault_http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for VaultHttpError."""
    assert isinstance(exc, VaultHttpError)

    return make_error_response(
        request,
        code=exc.code,
        message=exc.message,
        http_status=exc.status_code,
        details=exc.details,
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for the storage error taxonomy.

    Backend failures are logged with full detail and rendered opaquely so no
    internal filesystem path reaches the caller.
    """
    assert isinstance(exc, FileVaultError)

    if isinstance(exc, StorageBackendError):
        logger.error(
            "Storage backend failure on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc.cause or exc,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return make_error_response(
            request,
            code=exc.code,
            message=OPAQUE_FAILURE_MESSAGE,
            http_status=exc.http_status,
        )

    details: dict[str, Any] | None = None
    if isinstance(exc, InvalidVersionError) and exc.available is not None:
        details = {"version": exc.version, "available": exc.available}

    return make_error_response(
        request,
        code=exc.code,
        message=exc.message,
        http_status=exc.http_status,
        details=details,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for HTTPException."""
    assert isinstance(exc, StarletteHTTPException)

    code = get_error_code_for_status(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    return make_error_response(
        request,
        code=code,
        message=message,
        http_status=exc.status_code,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler for unhandled exceptions.

    Fails closed: returns 500 with safe generic message.
    Does NOT expose stack traces or exception details to clients.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception: %s",
        type(exc).__name__,
        extra={"request_id": request_id},
    )

    return make_error_response(
        request,
        code="IOFailure",
        message=OPAQUE_FAILURE_MESSAGE,
        http_status=500,
    )
