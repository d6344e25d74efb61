"""
Tests for the in-memory receivables store.
"""

import json
import threading
from decimal import Decimal

import pytest

from receivables.errors import ConcurrencyConflictError, InternalError, NotFoundError
from receivables.models import InvoiceStatus, PaymentStatus
from receivables.reconciliation import ReconciliationOrchestrator
from receivables.repository import InMemoryReceivablesRepository

from conftest import OTHER_TENANT, TENANT, seed


class TestInMemoryRepository:
    """Tenant scoping and the atomic dual update."""

    def test_find_open_invoices_in_insertion_order(self, repository):
        seed(repository, [("C", 3), ("A", 1), ("B", 2)], [])
        repository.mark_invoice_paid(TENANT, "A")

        invoices = repository.find_open_invoices(TENANT)

        assert [inv.invoice_id for inv in invoices] == ["C", "B"]

    def test_tenant_scoping(self, repository):
        seed(repository, [("A", 1)], [("p1", 1)])

        assert repository.find_open_invoices(OTHER_TENANT) == []
        with pytest.raises(NotFoundError):
            repository.get_payment(OTHER_TENANT, "p1")
        with pytest.raises(NotFoundError):
            repository.get_invoice(OTHER_TENANT, "A")

    def test_same_identifiers_in_two_tenants(self, repository):
        seed(repository, [("A", "5000.00")], [("p1", "5000.00")])
        repository.add_invoice({
            "invoice_id": "A",
            "invoice_number": "B-0001",
            "amount": "75.00",
            "tenant_id": OTHER_TENANT,
        })
        repository.add_payment({
            "payment_id": "p1",
            "amount_received": "75.00",
            "tenant_id": OTHER_TENANT,
        })

        assert [inv.amount for inv in repository.find_open_invoices(TENANT)] == [Decimal("5000.00")]
        assert repository.get_payment(TENANT, "p1").amount_received == Decimal("5000.00")
        assert repository.get_invoice(OTHER_TENANT, "A").invoice_number == "B-0001"
        assert [p.payment_id for p in repository.list_payments(OTHER_TENANT)] == ["p1"]

        repository.apply_exact_match(TENANT, "p1", "A")

        assert repository.get_invoice(OTHER_TENANT, "A").status == InvoiceStatus.OPEN
        assert repository.get_payment(OTHER_TENANT, "p1").status == PaymentStatus.UNMATCHED

    def test_malformed_row_is_rejected(self, repository):
        with pytest.raises(InternalError):
            repository.add_invoice({
                "invoice_id": "A",
                "amount": "10",
                "tenant_id": TENANT,
                "due_date": "not-a-date",
            })
        with pytest.raises(InternalError):
            repository.add_payment({"payment_id": "p1", "tenant_id": TENANT, "status": "lost"})

        assert repository.find_open_invoices(TENANT) == []
        assert repository.list_payments(TENANT) == []

    def test_load_file(self, repository, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({
            "invoices": [
                {"invoice_id": "A", "invoice_number": "INV-A", "amount": "1,250.00",
                 "tenant_id": TENANT},
            ],
            "payments": [
                {"payment_id": "p1", "amount_received": 1250, "tenant_id": TENANT,
                 "payment_date": "2025-10-20T09:30:00Z"},
            ],
        }))

        counts = repository.load_file(path)

        assert counts == {"invoices": 1, "payments": 1}
        assert repository.get_invoice(TENANT, "A").amount == Decimal("1250.00")
        assert repository.get_payment(TENANT, "p1").status == PaymentStatus.UNMATCHED

    def test_apply_exact_match_updates_both(self, repository):
        seed(repository, [("A", 100)], [("p1", 100)])

        payment = repository.apply_exact_match(TENANT, "p1", "A")

        assert payment.status == PaymentStatus.MATCHED
        assert payment.matched_invoice_id == "A"
        assert repository.get_invoice(TENANT, "A").status == InvoiceStatus.PAID

    def test_apply_exact_match_rejects_consumed_invoice(self, repository):
        seed(repository, [("A", 100)], [("p1", 100), ("p2", 100)])
        repository.apply_exact_match(TENANT, "p1", "A")

        with pytest.raises(ConcurrencyConflictError):
            repository.apply_exact_match(TENANT, "p2", "A")

        assert repository.get_payment(TENANT, "p2").status == PaymentStatus.UNMATCHED
        assert repository.get_payment(TENANT, "p1").matched_invoice_id == "A"

    def test_apply_exact_match_rolls_back_on_failure(self):
        class FailingPaymentUpdate(InMemoryReceivablesRepository):
            def update_payment_status(self, *args, **kwargs):
                raise RuntimeError("disk full")

        repository = seed(FailingPaymentUpdate(), [("A", 100)], [("p1", 100)])

        with pytest.raises(RuntimeError):
            repository.apply_exact_match(TENANT, "p1", "A")

        assert repository.get_invoice(TENANT, "A").status == InvoiceStatus.OPEN
        assert repository.get_payment(TENANT, "p1").status == PaymentStatus.UNMATCHED

    def test_generated_identifiers(self, repository):
        invoice = repository.add_invoice({"amount": "10", "tenant_id": TENANT})
        payment = repository.add_payment({"amount_received": "10", "tenant_id": TENANT})

        assert invoice.invoice_id
        assert payment.payment_id
        assert invoice.status == InvoiceStatus.OPEN
        assert payment.status == PaymentStatus.UNMATCHED

    def test_concurrent_reconciliation_never_double_books(self, repository):
        payment_ids = [f"p{i}" for i in range(8)]
        seed(repository, [("A", "500.00")], [(p, "500.00") for p in payment_ids])
        orchestrator = ReconciliationOrchestrator(repository)
        barrier = threading.Barrier(len(payment_ids))
        results = {}

        def run(payment_id):
            barrier.wait()
            results[payment_id] = orchestrator.reconcile(TENANT, payment_id)

        threads = [threading.Thread(target=run, args=(p,)) for p in payment_ids]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        matched = [p for p, r in results.items() if r.status == PaymentStatus.MATCHED]
        assert len(matched) == 1
        stored = [repository.get_payment(TENANT, p) for p in payment_ids]
        assert sum(1 for p in stored if p.matched_invoice_id == "A") == 1
        assert repository.get_invoice(TENANT, "A").status == InvoiceStatus.PAID
