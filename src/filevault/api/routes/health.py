"""Health and banner endpoints for the FileVault API (no key required)."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["Health"])

FILEVAULT_VERSION = "1.0.0"

_STARTED_AT = time.monotonic()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    time: str
    version: str
    uptime_seconds: int


class BannerResponse(BaseModel):
    """Root banner response schema."""

    name: str
    version: str
    message: str


@router.get("/", response_model=BannerResponse)
def get_banner() -> BannerResponse:
    """Identify the service. Not intended for public use."""
    return BannerResponse(
        name="FileVault File Server API",
        version=FILEVAULT_VERSION,
        message="This API is not intended for public usage.",
    )


@router.get("/health", response_model=HealthResponse)
def get_health() -> HealthResponse:
    """Health check endpoint.

    Returns:
        HealthResponse with status "ok", current time (ISO-8601), version,
        and whole seconds since the module was loaded.
    """
    return HealthResponse(
        status="ok",
        time=datetime.now(UTC).isoformat(),
        version=FILEVAULT_VERSION,
        uptime_seconds=int(time.monotonic() - _STARTED_AT),
    )
