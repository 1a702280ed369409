"""Request helpers shared by the FileVault routes."""

from __future__ import annotations

import logging

from fastapi import Request

from filevault.api.errors import VaultHttpError
from filevault.storage.vault import FileVault

logger = logging.getLogger(__name__)


def get_vault(request: Request) -> FileVault:
    """Return the FileVault bound to the application."""
    vault: FileVault = request.app.state.vault
    return vault


def raw_request_path(request: Request) -> str:
    """Return the percent-decoded request path, routing prefix included.

    The sandbox strips the route's prefix (e.g. "/fs/upload") before
    validating what remains.
    """
    path: str = request.scope["path"]
    return path


async def read_limited_body(request: Request) -> bytes:
    """Read the request body, enforcing the configured upload limit.

    Raises:
        VaultHttpError: 413 PayloadTooLarge if the body exceeds the limit.
    """
    limit = get_vault(request).config.max_upload_bytes

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        logger.warning("Rejected body of declared length %s (limit %d)", declared, limit)
        raise VaultHttpError(
            status_code=413,
            code="PayloadTooLarge",
            message="Request body exceeds the upload limit",
            details={"limit_bytes": limit},
        )

    body = await request.body()
    if len(body) > limit:
        logger.warning("Rejected body of %d bytes (limit %d)", len(body), limit)
        raise VaultHttpError(
            status_code=413,
            code="PayloadTooLarge",
            message="Request body exceeds the upload limit",
            details={"limit_bytes": limit},
        )
    return body
