"""Audit record model for FileVault.

An audit record captures one access to a logical path: when it happened,
what was done, and the SHA-256 of the exact bytes involved.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Operations that produce an audit record."""

    UPLOAD = "upload"
    DOWNLOAD = "download"
    DELETE = "delete"
    REPLACE = "replace"
    ROLLBACK = "rollback"


def compute_sha256(data: bytes) -> str:
    """Compute SHA256 hash of data and return as hex string."""
    return hashlib.sha256(data).hexdigest()


def format_timestamp(instant: datetime) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision and a Z suffix."""
    return instant.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class AuditRecord:
    """A single append-only audit log entry.

    Attributes:
        timestamp: Instant of the operation (aware, UTC).
        action: Operation performed.
        hash: Hex SHA-256 of the content read or written.
        path: Logical path the operation touched.
    """

    timestamp: datetime
    action: AuditAction
    hash: str
    path: str

    @classmethod
    def create(
        cls,
        action: AuditAction,
        path: str,
        content: bytes,
        *,
        now: datetime | None = None,
    ) -> AuditRecord:
        """Build a record for content handled right now."""
        return cls(
            timestamp=now or datetime.now(UTC),
            action=action,
            hash=compute_sha256(content),
            path=path,
        )

    @property
    def day(self) -> date:
        """UTC calendar day the record belongs to."""
        return self.timestamp.astimezone(UTC).date()

    def to_dict(self) -> dict[str, str]:
        """Convert to the on-disk JSON object (field order is part of the format)."""
        return {
            "timestamp": format_timestamp(self.timestamp),
            "action": self.action.value,
            "hash": self.hash,
            "path": self.path,
        }

    def to_json_line(self) -> str:
        """Serialize as one compact JSON line including the trailing newline."""
        return json.dumps(self.to_dict(), separators=(",", ":")) + "\n"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditRecord:
        """Create a record from its on-disk JSON object.

        Raises:
            KeyError: If a field is missing.
            ValueError: If the timestamp or action is malformed.
        """
        return cls(
            timestamp=datetime.fromisoformat(str(data["timestamp"])),
            action=AuditAction(data["action"]),
            hash=str(data["hash"]),
            path=str(data["path"]),
        )
