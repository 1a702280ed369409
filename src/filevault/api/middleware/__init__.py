"""FileVault API middleware."""

from filevault.api.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIdMiddleware,
    resolve_request_id,
)

__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "resolve_request_id"]
