"""File routes for the FileVault API.

Provides active-content endpoints:
- POST /fs/upload/{path} (raw body)
- GET /fs/download/{path}
- DELETE /fs/delete/{path}
- PUT /fs/replace/{path} (raw body)

All endpoints require the X-Api-Key header. Upload and replace validate the
path before reading the body. Filesystem work runs in the thread pool so
concurrent requests never block the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from filevault.api.auth import require_api_key
from filevault.api.deps import get_vault, raw_request_path, read_limited_body
from filevault.api.error_model import ERROR_RESPONSES

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Files"],
    dependencies=[Depends(require_api_key)],
    responses=ERROR_RESPONSES,
)

UPLOAD_ROUTE = "/fs/upload"
DOWNLOAD_ROUTE = "/fs/download"
DELETE_ROUTE = "/fs/delete"
REPLACE_ROUTE = "/fs/replace"

CONTENT_SHA256_HEADER = "X-Content-SHA256"


class FileOperationResponse(BaseModel):
    """Response body for successful upload, delete and replace."""

    status: str = "success"
    path: str


@router.post(f"{UPLOAD_ROUTE}/{{path:path}}", status_code=201, response_model=FileOperationResponse)
async def upload_file(request: Request) -> FileOperationResponse:
    """Store a new file. Fails with 409 if the path already holds content."""
    vault = get_vault(request)
    raw_path = raw_request_path(request)
    vault.resolve(raw_path, route_prefix=UPLOAD_ROUTE)
    body = await read_limited_body(request)

    logical_path = await run_in_threadpool(
        vault.upload,
        raw_path,
        body,
        route_prefix=UPLOAD_ROUTE,
    )
    return FileOperationResponse(path=logical_path)


@router.get(f"{DOWNLOAD_ROUTE}/{{path:path}}")
async def download_file(request: Request) -> Response:
    """Return the raw bytes of the active file."""
    stored = await run_in_threadpool(
        get_vault(request).download,
        raw_request_path(request),
        route_prefix=DOWNLOAD_ROUTE,
    )
    return Response(
        content=stored.body,
        media_type="application/octet-stream",
        headers={CONTENT_SHA256_HEADER: stored.sha256},
    )


@router.delete(f"{DELETE_ROUTE}/{{path:path}}", response_model=FileOperationResponse)
async def delete_file(request: Request) -> FileOperationResponse:
    """Delete the active file. Deleted content is not archived."""
    logical_path = await run_in_threadpool(
        get_vault(request).delete,
        raw_request_path(request),
        route_prefix=DELETE_ROUTE,
    )
    return FileOperationResponse(path=logical_path)


@router.put(f"{REPLACE_ROUTE}/{{path:path}}", response_model=FileOperationResponse)
async def replace_file(request: Request) -> FileOperationResponse:
    """Archive the current content and store the request body in its place."""
    vault = get_vault(request)
    raw_path = raw_request_path(request)
    vault.resolve(raw_path, route_prefix=REPLACE_ROUTE)
    body = await read_limited_body(request)

    logical_path = await run_in_threadpool(
        vault.replace,
        raw_path,
        body,
        route_prefix=REPLACE_ROUTE,
    )
    return FileOperationResponse(path=logical_path)
