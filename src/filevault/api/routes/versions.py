"""Version routes for the FileVault API.

- GET /list-versions/{path}: ordinal -> {file, date, timestamp}, oldest first
- POST /fs/rollback/{path}: body {"version": n}, restores snapshot n

Ordinals are recomputed per call; a replace landing between a listing and a
rollback shifts them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from filevault.api.auth import require_api_key
from filevault.api.deps import get_vault, raw_request_path, read_limited_body
from filevault.api.error_model import ERROR_RESPONSES

router = APIRouter(
    tags=["Versions"],
    dependencies=[Depends(require_api_key)],
    responses=ERROR_RESPONSES,
)

LIST_VERSIONS_ROUTE = "/list-versions"
ROLLBACK_ROUTE = "/fs/rollback"


class VersionEntry(BaseModel):
    """One archived snapshot in a list-versions response."""

    file: str
    date: str
    timestamp: int


class RollbackResponse(BaseModel):
    """Response body for a successful rollback."""

    status: str = "success"
    path: str
    version: int


@router.get(f"{LIST_VERSIONS_ROUTE}/{{path:path}}", response_model=dict[str, VersionEntry])
async def list_versions(request: Request) -> dict[str, VersionEntry]:
    """List archived snapshots keyed by their 1-based ordinal."""
    snapshots = await run_in_threadpool(
        get_vault(request).list_versions,
        raw_request_path(request),
        route_prefix=LIST_VERSIONS_ROUTE,
    )
    return {str(s.ordinal): VersionEntry(**s.to_dict()) for s in snapshots}


@router.post(f"{ROLLBACK_ROUTE}/{{path:path}}", response_model=RollbackResponse)
async def rollback_file(request: Request) -> RollbackResponse:
    """Restore the requested snapshot as the active content."""
    vault = get_vault(request)
    raw_path = raw_request_path(request)
    logical_path = vault.resolve(raw_path, route_prefix=ROLLBACK_ROUTE)
    body = await read_limited_body(request)

    snapshot = await run_in_threadpool(
        vault.rollback,
        raw_path,
        body,
        route_prefix=ROLLBACK_ROUTE,
    )
    return RollbackResponse(path=logical_path, version=snapshot.ordinal)
