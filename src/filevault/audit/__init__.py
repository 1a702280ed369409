"""FileVault audit module - append-only, per-day audit logging."""

from filevault.audit.query import AuditLogReader
from filevault.audit.records import AuditAction, AuditRecord, compute_sha256
from filevault.audit.sink import (
    AuditSink,
    AuditSinkError,
    DailyJsonlAuditSink,
    InMemoryAuditSink,
)
from filevault.audit.writer import AuditLogWriter

__all__ = [
    "AuditAction",
    "AuditLogReader",
    "AuditLogWriter",
    "AuditRecord",
    "AuditSink",
    "AuditSinkError",
    "DailyJsonlAuditSink",
    "InMemoryAuditSink",
    "compute_sha256",
]
