"""Active file store: the current revision of every logical path.

Files live at {active_root}/{logical_path}. Overwrites go through a temp file
and os.replace, so readers see either the old or the new content. Replace
archives the previous content before overwriting; upload and delete never
touch the archive.
"""

from __future__ import annotations

import errno
import logging
import uuid
from pathlib import Path

from filevault.audit.records import AuditAction, compute_sha256
from filevault.audit.writer import AuditLogWriter
from filevault.storage.archive_store import ArchiveStore
from filevault.storage.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    EmptyPayloadError,
    ObjectNotFoundError,
    PathTraversalError,
    StorageBackendError,
)
from filevault.storage.locks import PathLockRegistry
from filevault.storage.models import StoredFile
from filevault.storage.sandbox import ROOT_MARKER

logger = logging.getLogger(__name__)

_MISSING_ERRORS = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


class ActiveFileStore:
    """Upload, download, delete and replace of active content."""

    def __init__(
        self,
        active_root: str | Path,
        archive: ArchiveStore,
        audit: AuditLogWriter,
        locks: PathLockRegistry,
    ) -> None:
        self._active_root = Path(active_root)
        self._archive = archive
        self._audit = audit
        self._locks = locks

    @property
    def active_root(self) -> Path:
        """Return the active root directory."""
        return self._active_root

    def full_path(self, logical_path: str) -> Path:
        """Filesystem location of a validated logical path."""
        if logical_path == ROOT_MARKER:
            return self._active_root
        return self._active_root / logical_path

    def _read_file(self, logical_path: str, missing_message: str) -> bytes:
        """Read an active file, mapping absence (or a directory) to NotFound."""
        try:
            return self.full_path(logical_path).read_bytes()
        except _MISSING_ERRORS as e:
            raise ObjectNotFoundError(missing_message, path=logical_path) from e
        except OSError as e:
            raise StorageBackendError(
                message=f"Failed to read active file: {e}",
                path=logical_path,
                cause=e,
            ) from e

    def _write_atomic(self, logical_path: str, data: bytes) -> None:
        """Write data to the active file atomically, creating parents."""
        target = self.full_path(logical_path)
        tmp_file = target.parent / f".{target.name}.{uuid.uuid4().hex}.tmp"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp_file.write_bytes(data)
            tmp_file.replace(target)
        except OSError as e:
            if tmp_file.exists():
                tmp_file.unlink(missing_ok=True)
            raise StorageBackendError(
                message=f"Failed to write active file: {e}",
                path=logical_path,
                cause=e,
            ) from e

    def upload(self, logical_path: str, data: bytes) -> None:
        """Store data at a path that holds nothing yet.

        Raises:
            PathTraversalError: If the path is the storage root itself.
            AlreadyExistsError: If anything exists at the path.
            EmptyPayloadError: If data is empty.
            StorageBackendError: If the write fails.
        """
        if logical_path == ROOT_MARKER:
            raise PathTraversalError("Cannot upload to the storage root", path=logical_path)

        with self._locks.hold(logical_path):
            target = self.full_path(logical_path)
            if target.exists() or target.is_symlink():
                raise AlreadyExistsError(path=logical_path)
            if not data:
                raise EmptyPayloadError(path=logical_path)

            self._write_atomic(logical_path, data)

        logger.info("Uploaded %s (%d bytes)", logical_path, len(data))
        self._audit.append(AuditAction.UPLOAD, logical_path, data)

    def download(self, logical_path: str) -> StoredFile:
        """Return the active content of a path.

        Raises:
            ObjectNotFoundError: If no active file exists.
            StorageBackendError: If the read fails.
        """
        data = self._read_file(logical_path, "File not found")
        self._audit.append(AuditAction.DOWNLOAD, logical_path, data)
        return StoredFile(path=logical_path, body=data, sha256=compute_sha256(data))

    def delete(self, logical_path: str) -> None:
        """Remove the active file (or empty directory) at a path.

        Deleted content is not archived and cannot be rolled back.

        Raises:
            PathTraversalError: If the path is the storage root itself.
            ObjectNotFoundError: If nothing exists at the path.
            DirectoryNotEmptyError: If the path is a non-empty directory.
            StorageBackendError: If the removal fails.
        """
        if logical_path == ROOT_MARKER:
            raise PathTraversalError("Cannot delete the storage root", path=logical_path)

        with self._locks.hold(logical_path):
            target = self.full_path(logical_path)
            if target.is_dir() and not target.is_symlink():
                data = b""
                self._remove_directory(logical_path, target)
            else:
                data = self._read_file(logical_path, "File not found")
                try:
                    target.unlink()
                except FileNotFoundError as e:
                    raise ObjectNotFoundError(path=logical_path) from e
                except OSError as e:
                    raise StorageBackendError(
                        message=f"Failed to delete active file: {e}",
                        path=logical_path,
                        cause=e,
                    ) from e

        logger.info("Deleted %s", logical_path)
        self._audit.append(AuditAction.DELETE, logical_path, data)

    def _remove_directory(self, logical_path: str, target: Path) -> None:
        try:
            target.rmdir()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(path=logical_path) from e
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise DirectoryNotEmptyError(path=logical_path) from e
            raise StorageBackendError(
                message=f"Failed to delete directory: {e}",
                path=logical_path,
                cause=e,
            ) from e

    def replace(self, logical_path: str, data: bytes) -> None:
        """Archive the current content of a path, then overwrite it with data.

        Raises:
            EmptyPayloadError: If data is empty.
            ObjectNotFoundError: If no active file exists (use upload).
            StorageBackendError: If archiving or writing fails.
        """
        if not data:
            raise EmptyPayloadError("No replacement file data provided", path=logical_path)

        with self._locks.hold(logical_path):
            old_data = self._read_file(
                logical_path,
                "The file you are trying to replace was not found, use upload instead",
            )
            self._archive.snapshot(logical_path, old_data)
            self._write_atomic(logical_path, data)

        logger.info("Replaced %s (%d -> %d bytes)", logical_path, len(old_data), len(data))
        self._audit.append(AuditAction.REPLACE, logical_path, data)

    def overwrite(self, logical_path: str, data: bytes) -> None:
        """Write data as the active content without archiving or auditing.

        The caller must hold the path lock for logical_path.
        """
        self._write_atomic(logical_path, data)
