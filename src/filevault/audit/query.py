"""Read-back of FileVault audit logs.

Reads the per-day JSONL files written by DailyJsonlAuditSink. Records come
back in append order. Malformed lines are skipped with a warning rather than
failing the whole read.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from filevault.audit.records import AuditRecord
from filevault.audit.sink import AUDIT_LOG_SUFFIX

logger = logging.getLogger(__name__)


class AuditLogReader:
    """Query audit records from a directory of per-day logs."""

    def __init__(self, audit_root: str | Path) -> None:
        self._audit_root = Path(audit_root)

    def log_path(self, day: date) -> Path:
        """Return the log file for a UTC day."""
        return self._audit_root / f"{day.isoformat()}{AUDIT_LOG_SUFFIX}"

    def available_days(self) -> list[date]:
        """List days that have a log file, oldest first."""
        if not self._audit_root.is_dir():
            return []

        days: list[date] = []
        for entry in self._audit_root.iterdir():
            if not entry.name.endswith(AUDIT_LOG_SUFFIX):
                continue
            try:
                days.append(date.fromisoformat(entry.name[: -len(AUDIT_LOG_SUFFIX)]))
            except ValueError:
                continue
        return sorted(days)

    def read_day(self, day: date) -> list[AuditRecord]:
        """Return all records logged on a UTC day, in append order."""
        log_path = self.log_path(day)
        if not log_path.exists():
            return []

        records: list[AuditRecord] = []
        with open(log_path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(AuditRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping malformed audit line %s:%d: %s", log_path.name, line_no, e)
        return records

    def records_for_path(self, logical_path: str, day: date) -> list[AuditRecord]:
        """Return records of one logical path on a UTC day."""
        return [r for r in self.read_day(day) if r.path == logical_path]
