"""Audit record sink implementations for FileVault.

Provides append-only sinks for audit record persistence.
All sinks implement the AuditSink protocol.

Design requirements:
- Append-only: never truncate/overwrite
- Fail closed: any IO failure raises AuditSinkError
- One log file per UTC day: {audit_root}/YYYY-MM-DD.log
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from filevault.audit.records import AuditRecord

logger = logging.getLogger(__name__)

AUDIT_LOG_SUFFIX = ".log"


class AuditSinkError(Exception):
    """Raised when audit record emission fails.

    Callers that treat auditing as best-effort catch and log this.
    """

    pass


@runtime_checkable
class AuditSink(Protocol):
    """Protocol for audit record sinks.

    All implementations must be append-only and fail closed on errors.
    """

    def emit(self, record: AuditRecord) -> None:
        """Emit an audit record to the sink.

        Args:
            record: Audit record to persist

        Raises:
            AuditSinkError: If emission fails for any reason
        """
        ...


class DailyJsonlAuditSink:
    """Append-only JSONL sink writing one file per UTC day.

    Layout:
    - {audit_root}/{YYYY-MM-DD}.log, day taken from the record timestamp
    - Creates audit_root if missing
    - Appends one compact JSON line per record
    - Never truncates/overwrites existing content

    Fail-closed behavior:
    - Directory creation failure raises AuditSinkError
    - Any IO error on append raises AuditSinkError
    """

    def __init__(self, audit_root: str | Path) -> None:
        """Initialize the daily JSONL sink.

        Args:
            audit_root: Directory that holds the per-day log files.
        """
        self._audit_root = Path(audit_root)

    @property
    def audit_root(self) -> Path:
        """Return the configured audit directory."""
        return self._audit_root

    def log_path_for(self, record: AuditRecord) -> Path:
        """Return the log file a record is appended to."""
        return self._audit_root / f"{record.day.isoformat()}{AUDIT_LOG_SUFFIX}"

    def _ensure_directory(self) -> None:
        """Create the audit directory if it doesn't exist.

        Raises:
            AuditSinkError: If directory creation fails
        """
        if not self._audit_root.exists():
            try:
                self._audit_root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise AuditSinkError(
                    f"Failed to create audit log directory {self._audit_root}: {e}"
                ) from e

    def emit(self, record: AuditRecord) -> None:
        """Append an audit record to its day's log file.

        Args:
            record: Audit record to persist

        Raises:
            AuditSinkError: If serialization or file write fails
        """
        try:
            line = record.to_json_line()
        except (TypeError, ValueError) as e:
            raise AuditSinkError(f"Failed to serialize audit record: {e}") from e

        self._ensure_directory()
        log_path = self.log_path_for(record)

        try:
            with open(log_path, mode="a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            raise AuditSinkError(f"Failed to write audit record to {log_path}: {e}") from e


class InMemoryAuditSink:
    """In-memory audit sink for testing (no disk writes).

    Stores emitted records in a list for later inspection.
    Thread-safe for concurrent test usage.
    """

    def __init__(self) -> None:
        """Initialize the in-memory sink."""
        self._records: list[AuditRecord] = []
        self._lock = threading.Lock()

    def emit(self, record: AuditRecord) -> None:
        """Emit an audit record to memory.

        Args:
            record: Audit record to keep
        """
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[AuditRecord]:
        """Return all emitted records."""
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        """Clear all stored records."""
        with self._lock:
            self._records.clear()
