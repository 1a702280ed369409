"""FileVault storage facade.

FileVault is the single entry point the API and CLI use. Every operation
validates the raw path against the active root first; a rejected path raises
PathTraversalError before any filesystem access.

Layout under the configured root:
    active/{logical_path}                       current revisions
    archive/{dirname}/{base}_{epoch_millis}{ext} snapshots of replaced revisions
    audit/{YYYY-MM-DD}.log                      JSONL audit trail
"""

from __future__ import annotations

import logging

from filevault.audit.sink import AuditSink, DailyJsonlAuditSink
from filevault.audit.writer import AuditLogWriter
from filevault.config import VaultConfig
from filevault.storage.active_store import ActiveFileStore
from filevault.storage.archive_store import ArchiveStore
from filevault.storage.errors import StorageBackendError
from filevault.storage.locks import PathLockRegistry
from filevault.storage.models import ArchiveSnapshot, StoredFile
from filevault.storage.rollback import VersionPayload, VersionResolver
from filevault.storage.sandbox import validate_logical_path
from filevault.storage.tracing import traced_storage_operation

logger = logging.getLogger(__name__)


class FileVault:
    """Sandboxed, versioned, audited file store."""

    def __init__(self, config: VaultConfig, audit_sink: AuditSink | None = None) -> None:
        """Initialize the vault.

        Args:
            config: Vault configuration (root directory and limits).
            audit_sink: Optional sink override. Defaults to daily JSONL files
                under config.audit_root.
        """
        self._config = config
        self._locks = PathLockRegistry()
        self._audit = AuditLogWriter(audit_sink or DailyJsonlAuditSink(config.audit_root))
        self._archive = ArchiveStore(config.archive_root)
        self._active = ActiveFileStore(config.active_root, self._archive, self._audit, self._locks)
        self._resolver = VersionResolver(self._active, self._archive, self._audit, self._locks)
        logger.debug("FileVault initialized with root=%s", config.root)

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "filesystem"

    @property
    def config(self) -> VaultConfig:
        """Return the vault configuration."""
        return self._config

    @property
    def audit_writer(self) -> AuditLogWriter:
        """Return the audit writer."""
        return self._audit

    def ensure_layout(self) -> None:
        """Create the active, archive and audit directories if missing.

        Raises:
            StorageBackendError: If a directory cannot be created.
        """
        for directory in (
            self._config.active_root,
            self._config.archive_root,
            self._config.audit_root,
        ):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageBackendError(
                    message=f"Failed to create storage directory: {e}", cause=e
                ) from e

    def resolve(self, raw_path: str | None, *, route_prefix: str | None = None) -> str:
        """Validate a raw path and return its logical path.

        Raises:
            PathTraversalError: If the path escapes the active root.
        """
        return validate_logical_path(
            self._config.active_root, raw_path, route_prefix=route_prefix
        )

    @traced_storage_operation("upload")
    def upload(self, raw_path: str, data: bytes, *, route_prefix: str | None = None) -> str:
        """Store new content at a path. Returns the logical path."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        self._active.upload(logical_path, data)
        return logical_path

    @traced_storage_operation("download")
    def download(self, raw_path: str, *, route_prefix: str | None = None) -> StoredFile:
        """Return the active content of a path."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        return self._active.download(logical_path)

    @traced_storage_operation("delete")
    def delete(self, raw_path: str, *, route_prefix: str | None = None) -> str:
        """Delete the active content of a path. Returns the logical path."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        self._active.delete(logical_path)
        return logical_path

    @traced_storage_operation("replace")
    def replace(self, raw_path: str, data: bytes, *, route_prefix: str | None = None) -> str:
        """Archive the current content of a path and store data in its place."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        self._active.replace(logical_path, data)
        return logical_path

    @traced_storage_operation("list_versions")
    def list_versions(
        self, raw_path: str, *, route_prefix: str | None = None
    ) -> list[ArchiveSnapshot]:
        """List a path's snapshots, oldest first, with ordinals 1..N."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        return self._resolver.list_versions(logical_path)

    @traced_storage_operation("rollback")
    def rollback(
        self,
        raw_path: str,
        payload: VersionPayload,
        *,
        route_prefix: str | None = None,
    ) -> ArchiveSnapshot:
        """Restore the snapshot selected by payload. Returns that snapshot."""
        logical_path = self.resolve(raw_path, route_prefix=route_prefix)
        return self._resolver.rollback(logical_path, payload)
