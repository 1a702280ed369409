"""Archive store holding immutable snapshots of replaced revisions.

Snapshots of a logical path live next to each other under a directory that
mirrors the path's directory:

    {archive_root}/{dirname}/{base}_{epoch_millis}{ext}

The millisecond stamp in the file name is the snapshot's identity and its
sort key. Stamps are minted as max(now, newest + 1) while the caller holds
the path lock, so they are unique and strictly increasing per logical path
even when several replaces land within one millisecond. Files are created
exclusively and made read-only; this store never rewrites or removes them.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
import stat
import time
from pathlib import Path

from filevault.storage.errors import NoVersionsError, StorageBackendError
from filevault.storage.models import ArchiveSnapshot

logger = logging.getLogger(__name__)

_MAX_MINT_ATTEMPTS = 16
_READ_ONLY = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def split_logical_path(logical_path: str) -> tuple[str, str, str]:
    """Split a logical path into (dirname, base name, extension)."""
    dirname, name = posixpath.split(logical_path)
    base, ext = os.path.splitext(name)
    return dirname, base, ext


def snapshot_file_name(logical_path: str, timestamp_ms: int) -> str:
    """Build the archive file name of a snapshot taken at timestamp_ms."""
    _, base, ext = split_logical_path(logical_path)
    return f"{base}_{timestamp_ms}{ext}"


def _snapshot_pattern(base: str, ext: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(base)}_(\d+){re.escape(ext)}$")


class ArchiveStore:
    """Filesystem archive of snapshots, one directory per logical directory."""

    def __init__(self, archive_root: str | Path) -> None:
        self._archive_root = Path(archive_root)

    @property
    def archive_root(self) -> Path:
        """Return the archive root directory."""
        return self._archive_root

    def archive_dir(self, logical_path: str) -> Path:
        """Directory holding the snapshots of logical_path."""
        dirname, _, _ = split_logical_path(logical_path)
        return self._archive_root / dirname if dirname else self._archive_root

    def _scan(self, logical_path: str) -> list[tuple[int, str]]:
        """Return (timestamp_ms, file_name) for every snapshot, oldest first.

        Only regular files count. Directories such as archive/report_2024/,
        created for the logical directory report_2024, share the name shape
        of a snapshot of "report".

        Raises:
            OSError: If the archive directory cannot be listed.
        """
        _, base, ext = split_logical_path(logical_path)
        pattern = _snapshot_pattern(base, ext)

        found: list[tuple[int, str]] = []
        with os.scandir(self.archive_dir(logical_path)) as entries:
            for entry in entries:
                match = pattern.match(entry.name)
                if match and entry.is_file(follow_symlinks=False):
                    found.append((int(match.group(1)), entry.name))

        found.sort()
        return found

    def list_versions(self, logical_path: str) -> list[ArchiveSnapshot]:
        """List snapshots of logical_path with ordinals 1..N, oldest first.

        Raises:
            NoVersionsError: If there are no snapshots or the archive
                directory cannot be listed.
        """
        try:
            found = self._scan(logical_path)
        except OSError as e:
            logger.debug("Archive listing failed for %s: %s", logical_path, e)
            raise NoVersionsError(path=logical_path) from e

        if not found:
            raise NoVersionsError(path=logical_path)

        return [
            ArchiveSnapshot(ordinal=index, file_name=name, timestamp_ms=timestamp_ms)
            for index, (timestamp_ms, name) in enumerate(found, start=1)
        ]

    def snapshot(self, logical_path: str, data: bytes) -> ArchiveSnapshot:
        """Archive data as the newest snapshot of logical_path.

        The caller must hold the path lock for logical_path.

        Raises:
            StorageBackendError: If the snapshot cannot be written.
        """
        archive_dir = self.archive_dir(logical_path)
        try:
            archive_dir.mkdir(parents=True, exist_ok=True)
            existing = self._scan(logical_path)
        except OSError as e:
            raise StorageBackendError(
                message=f"Failed to prepare archive directory: {e}",
                path=logical_path,
                cause=e,
            ) from e

        newest = existing[-1][0] if existing else -1
        timestamp_ms = max(_now_ms(), newest + 1)

        for _ in range(_MAX_MINT_ATTEMPTS):
            file_name = snapshot_file_name(logical_path, timestamp_ms)
            target = archive_dir / file_name
            try:
                with open(target, "xb") as f:
                    f.write(data)
            except FileExistsError:
                timestamp_ms += 1
                continue
            except OSError as e:
                raise StorageBackendError(
                    message=f"Failed to write snapshot: {e}",
                    path=logical_path,
                    cause=e,
                ) from e

            try:
                os.chmod(target, _READ_ONLY)
            except OSError as e:
                logger.warning("Could not mark snapshot %s read-only: %s", file_name, e)

            logger.info("Archived snapshot of %s as %s", logical_path, file_name)
            return ArchiveSnapshot(
                ordinal=len(existing) + 1,
                file_name=file_name,
                timestamp_ms=timestamp_ms,
            )

        raise StorageBackendError(
            message="Could not mint a unique snapshot name",
            path=logical_path,
        )

    def read_snapshot(self, logical_path: str, snapshot: ArchiveSnapshot) -> bytes:
        """Return the bytes of one snapshot of logical_path.

        Raises:
            StorageBackendError: If the snapshot cannot be read.
        """
        target = self.archive_dir(logical_path) / snapshot.file_name
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageBackendError(
                message=f"Failed to read snapshot {snapshot.file_name}: {e}",
                path=logical_path,
                cause=e,
            ) from e
