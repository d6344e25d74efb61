"""
Tests for the audit trail and settings.
"""

from decimal import Decimal

from receivables.config import Settings
from receivables.models import AuditAction
from receivables.utils import AuditLogger


class TestAuditLogger:

    def test_record_and_filter(self):
        audit = AuditLogger("tenant-a", "p1")

        audit.record(AuditAction.RECONCILIATION_STARTED, "started")
        audit.record(AuditAction.EXACT_MATCH_FOUND, "found", invoice_ids=["A"])
        audit.record(
            AuditAction.MATCH_CONFLICT, "lost race",
            invoice_ids=["A"], success=False, error_message="no longer open",
        )

        assert len(audit.get_entries()) == 3
        assert [e.message for e in audit.get_entries(success_only=True)] == ["started", "found"]
        conflict = audit.get_entries(action_filter=AuditAction.MATCH_CONFLICT)[0]
        assert conflict.payment_id == "p1"
        assert conflict.error_message == "no longer open"

    def test_summary(self):
        audit = AuditLogger("tenant-a", "p1")
        audit.record(AuditAction.INVOICES_LOADED, "loaded", open_invoices=3)
        audit.record(AuditAction.MATCH_CONFLICT, "lost race", success=False)

        summary = audit.summary()

        assert summary["total_entries"] == 2
        assert summary["error_count"] == 1
        assert summary["action_counts"] == {"invoices_loaded": 1, "match_conflict": 1}
        assert audit.entries[0].details == {"open_invoices": 3}


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.exact_match_epsilon == Decimal("0.01")
        assert settings.max_combination_size == 3
        assert settings.max_suggestions == 5

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TOLERANCE_FLOOR", "250")

        settings = Settings()

        assert settings.calculate_tolerance(Decimal("1000")) == Decimal("250")
        assert settings.calculate_tolerance(Decimal("10000")) == Decimal("1500")
