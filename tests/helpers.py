"""Shared test constants and helpers for reading the audit trail."""

from __future__ import annotations

import json
from pathlib import Path

from filevault.audit.records import AuditRecord

TEST_API_KEY = "test-api-key-12345"


def read_audit_lines(root: Path) -> list[str]:
    """Return every raw audit line under root, oldest day first."""
    audit_dir = root / "audit"
    if not audit_dir.exists():
        return []
    lines: list[str] = []
    for log_file in sorted(audit_dir.glob("*.log")):
        lines.extend(line for line in log_file.read_text(encoding="utf-8").splitlines() if line)
    return lines


def read_audit_records(root: Path) -> list[AuditRecord]:
    """Return every audit record under root, oldest day first."""
    return [AuditRecord.from_dict(json.loads(line)) for line in read_audit_lines(root)]
