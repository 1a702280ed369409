"""Best-effort audit log writer.

Storage operations call AuditLogWriter.append() after their primary effect has
happened. A sink failure is logged and never propagated, so the audit trail
may have gaps when the disk is full or unwritable.
"""

from __future__ import annotations

import logging

from filevault.audit.records import AuditAction, AuditRecord
from filevault.audit.sink import AuditSink, AuditSinkError

logger = logging.getLogger(__name__)


class AuditLogWriter:
    """Builds audit records and hands them to a sink."""

    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> AuditSink:
        """Return the underlying sink."""
        return self._sink

    def append(self, action: AuditAction, logical_path: str, content: bytes) -> AuditRecord:
        """Record one operation on logical_path over content.

        Returns:
            The record that was built (even if the sink failed to persist it).
        """
        record = AuditRecord.create(action, logical_path, content)
        logger.info("Audit %s on %s sha256=%s", action.value, logical_path, record.hash)
        try:
            self._sink.emit(record)
        except AuditSinkError:
            logger.exception(
                "Audit write failed for %s on %s; continuing", action.value, logical_path
            )
        return record
