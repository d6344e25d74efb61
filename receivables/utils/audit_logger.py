"""
Audit logging for reconciliation decisions.
"""

from collections import Counter
from typing import List, Optional

import structlog

from ..models import AuditEntry, AuditAction

logger = structlog.get_logger()


class AuditLogger:
    """
    Audit trail for one reconciliation run.
    Keeps entries in memory and mirrors each one to structlog.
    """

    def __init__(self, tenant_id: str, payment_id: str):
        self.tenant_id = tenant_id
        self.payment_id = payment_id
        self.entries: List[AuditEntry] = []

    def log(self, entry: AuditEntry) -> None:
        """Add an audit entry."""
        if entry.payment_id is None:
            entry.payment_id = self.payment_id
        self.entries.append(entry)

        log = logger.info if entry.success else logger.warning
        log(
            entry.message,
            action=entry.action.value,
            tenant_id=self.tenant_id,
            payment_id=entry.payment_id,
            invoice_ids=entry.invoice_ids,
            success=entry.success,
        )

    def record(
        self,
        action: AuditAction,
        message: str,
        invoice_ids: Optional[List[str]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        **details,
    ) -> AuditEntry:
        """Build and log an entry in one call."""
        entry = AuditEntry(
            action=action,
            payment_id=self.payment_id,
            invoice_ids=list(invoice_ids or []),
            message=message,
            details=details,
            success=success,
            error_message=error_message,
        )
        self.log(entry)
        return entry

    def get_entries(
        self,
        action_filter: Optional[AuditAction] = None,
        success_only: bool = False,
    ) -> List[AuditEntry]:
        """Get filtered audit entries."""
        entries = self.entries

        if action_filter:
            entries = [e for e in entries if e.action == action_filter]

        if success_only:
            entries = [e for e in entries if e.success]

        return entries

    def summary(self) -> dict:
        """Get summary statistics of audit log."""
        action_counts = Counter(e.action.value for e in self.entries)
        success_count = sum(1 for e in self.entries if e.success)
        error_count = sum(1 for e in self.entries if not e.success)

        return {
            "total_entries": len(self.entries),
            "success_count": success_count,
            "error_count": error_count,
            "action_counts": dict(action_counts),
        }
