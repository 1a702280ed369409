"""Version listing and rollback.

Ordinals are recomputed from the archive on every call. A rollback restores
the chosen snapshot as the active content without archiving what it
overwrites: the restored revision is itself already in the archive.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from filevault.audit.records import AuditAction
from filevault.audit.writer import AuditLogWriter
from filevault.storage.active_store import ActiveFileStore
from filevault.storage.archive_store import ArchiveStore
from filevault.storage.errors import InvalidRequestError, InvalidVersionError
from filevault.storage.locks import PathLockRegistry
from filevault.storage.models import ArchiveSnapshot

logger = logging.getLogger(__name__)

VersionPayload = bytes | str | Mapping[str, Any] | None


def parse_version_payload(payload: VersionPayload) -> int:
    """Extract the requested ordinal from a rollback payload.

    Accepts raw JSON (bytes or str) or an already decoded mapping with a
    "version" field holding an integer or a decimal string.

    Raises:
        InvalidRequestError: If the payload is missing, not valid JSON, not an
            object, or has no integer "version".
    """
    if payload is None or (isinstance(payload, (bytes, str)) and not payload.strip()):
        raise InvalidRequestError("Version parameter required for rollback")

    if isinstance(payload, (bytes, str)):
        try:
            decoded = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRequestError("Invalid JSON in request body") from e
    else:
        decoded = payload

    if not isinstance(decoded, Mapping):
        raise InvalidRequestError("Request body must be a JSON object")

    version = decoded.get("version")
    if version is None or isinstance(version, bool):
        raise InvalidRequestError("Version parameter required for rollback")

    if isinstance(version, int):
        return version
    if isinstance(version, float) and version.is_integer():
        return int(version)
    if isinstance(version, str):
        try:
            return int(version.strip())
        except ValueError as e:
            raise InvalidRequestError("Version must be an integer") from e

    raise InvalidRequestError("Version must be an integer")


class VersionResolver:
    """Lists snapshots of a path and restores a chosen one."""

    def __init__(
        self,
        active: ActiveFileStore,
        archive: ArchiveStore,
        audit: AuditLogWriter,
        locks: PathLockRegistry,
    ) -> None:
        self._active = active
        self._archive = archive
        self._audit = audit
        self._locks = locks

    def list_versions(self, logical_path: str) -> list[ArchiveSnapshot]:
        """Return the path's snapshots, ordinal 1 being the oldest.

        Raises:
            NoVersionsError: If the path has no snapshots.
        """
        return self._archive.list_versions(logical_path)

    def rollback(self, logical_path: str, payload: VersionPayload) -> ArchiveSnapshot:
        """Restore the snapshot selected by payload as the active content.

        Returns:
            The snapshot that was restored.

        Raises:
            NoVersionsError: If the path has no snapshots.
            InvalidRequestError: If the payload carries no usable ordinal.
            InvalidVersionError: If the ordinal is outside [1, N].
            StorageBackendError: If reading or writing fails.
        """
        with self._locks.hold(logical_path):
            versions = self._archive.list_versions(logical_path)
            ordinal = parse_version_payload(payload)

            if ordinal < 1 or ordinal > len(versions):
                raise InvalidVersionError(
                    path=logical_path,
                    version=ordinal,
                    available=len(versions),
                )

            chosen = versions[ordinal - 1]
            data = self._archive.read_snapshot(logical_path, chosen)
            self._active.overwrite(logical_path, data)

        logger.info("Rolled back %s to version %d (%s)", logical_path, ordinal, chosen.file_name)
        self._audit.append(AuditAction.ROLLBACK, logical_path, data)
        return chosen
