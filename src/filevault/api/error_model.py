"""Error envelope for the FileVault API.

Every failure, whichever layer raises it, reaches the client as:

    {"code": "NotFound", "message": "...", "details": null, "request_id": "..."}

ErrorEnvelope is also published in the OpenAPI schema of the keyed routers.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from filevault.api.middleware.request_id import REQUEST_ID_HEADER


class ErrorEnvelope(BaseModel):
    """Body of every non-2xx response."""

    code: str
    message: str
    details: dict[str, Any] | None = None
    request_id: str


def _get_request_id(request: Request) -> str:
    """Return the request id set by RequestIdMiddleware.

    Falls back to the incoming header, then a new uuid4, when the middleware
    did not run.
    """
    request_id: str | None = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


def make_error_response(
    request: Request,
    *,
    code: str,
    message: str,
    http_status: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Render an ErrorEnvelope with the X-Request-Id header set.

    Args:
        request: The request being answered.
        code: Error kind (e.g., "BadPath", "InvalidKey").
        message: Human-readable text. Must not contain filesystem paths.
        http_status: HTTP status code.
        details: Optional structured context, such as the limit that was exceeded.
    """
    envelope = ErrorEnvelope(
        code=code,
        message=message,
        details=details,
        request_id=_get_request_id(request),
    )
    return JSONResponse(
        status_code=http_status,
        content=envelope.model_dump(),
        headers={REQUEST_ID_HEADER: envelope.request_id},
    )


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorEnvelope, "description": "Missing or invalid API key"},
    500: {"model": ErrorEnvelope, "description": "Storage failure"},
}

HTTP_STATUS_TO_CODE: dict[int, str] = {
    400: "BadRequest",
    401: "InvalidKey",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "Conflict",
    413: "PayloadTooLarge",
    500: "IOFailure",
}


def get_error_code_for_status(status_code: int) -> str:
    """Error code for a bare HTTP status (unknown routes, wrong methods)."""
    return HTTP_STATUS_TO_CODE.get(status_code, "Error")
