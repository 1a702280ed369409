"""FileVault storage data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class ArchiveSnapshot:
    """One archived revision of a logical path.

    Attributes:
        ordinal: 1-based rank among the path's snapshots, oldest first.
            Recomputed on every listing, never stored.
        file_name: Archive file name, "<base>_<millis><ext>".
        timestamp_ms: Creation time in epoch milliseconds (from the file name).
    """

    ordinal: int
    file_name: str
    timestamp_ms: int

    @property
    def created_at(self) -> datetime:
        """Creation instant as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp_ms / 1000, tz=UTC)

    @property
    def date(self) -> str:
        """Creation date as YYYY-MM-DD (UTC)."""
        return self.created_at.date().isoformat()

    def to_dict(self) -> dict[str, str | int]:
        """Convert to the list-versions wire shape."""
        return {
            "file": self.file_name,
            "date": self.date,
            "timestamp": self.timestamp_ms,
        }


@dataclass(frozen=True)
class StoredFile:
    """Active content returned by a download.

    Attributes:
        path: Logical path of the file.
        body: File content.
        sha256: Hex SHA-256 of body.
    """

    path: str
    body: bytes
    sha256: str

    @property
    def size_bytes(self) -> int:
        """Length of body in bytes."""
        return len(self.body)
