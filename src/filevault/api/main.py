"""FileVault FastAPI application factory.

This module provides the create_app() factory for bootstrapping the API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from filevault.api.errors import (
    VaultHttpError,
    generic_exception_handler,
    http_exception_handler,
    storage_error_handler,
    vault_http_error_handler,
)
from filevault.api.middleware.request_id import RequestIdMiddleware
from filevault.api.routes.files import router as files_router
from filevault.api.routes.health import FILEVAULT_VERSION
from filevault.api.routes.health import router as health_router
from filevault.api.routes.versions import router as versions_router
from filevault.audit.sink import AuditSink
from filevault.config import VaultConfig
from filevault.storage.errors import FileVaultError
from filevault.storage.vault import FileVault

logger = logging.getLogger(__name__)


def create_app(
    config: VaultConfig | None = None,
    audit_sink: AuditSink | None = None,
    vault: FileVault | None = None,
) -> FastAPI:
    """Create and configure the FileVault FastAPI application.

    This factory:
    - Builds (or takes) the FileVault and creates its directory layout
    - Registers the request ID middleware
    - Registers exception handlers for the error envelope
    - Mounts the health router (no key) and the file/version routers (key required)

    Args:
        config: Vault configuration. If None, read from FILEVAULT_* env vars.
            Ignored when vault is given.
        audit_sink: Optional AuditSink override for testing.
        vault: Optional prebuilt FileVault.

    Returns:
        Configured FastAPI application instance.
    """
    if vault is None:
        vault = FileVault(config or VaultConfig.from_env(), audit_sink=audit_sink)
    vault.ensure_layout()

    app = FastAPI(
        title="FileVault API",
        description="Sandboxed, versioned and audited file storage",
        version=FILEVAULT_VERSION,
    )
    app.state.vault = vault

    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(VaultHttpError, vault_http_error_handler)
    app.add_exception_handler(FileVaultError, storage_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(files_router)
    app.include_router(versions_router)

    logger.info("FileVault API ready with root=%s", vault.config.root)
    return app
