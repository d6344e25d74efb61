"""
In-memory receivables store.

Holds rows in the same loose shape the relational tables use and converts
them at the boundary. A single lock serializes writes so the exact-match
dual update is atomic across threads.
"""

import json
import threading
from copy import deepcopy
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from uuid import uuid4

import structlog

from ..errors import ConcurrencyConflictError, NotFoundError
from ..models import InvoiceStatus, InvoiceSummary, Payment, PaymentStatus
from .base import ReceivablesRepository

logger = structlog.get_logger()

Row = Dict[str, Any]
RowKey = Tuple[str, str]


class InMemoryReceivablesRepository(ReceivablesRepository):
    """
    Thread-safe store keyed by (tenant_id, id).

    Insertion order is the default ordering for invoice reads.
    """

    def __init__(
        self,
        invoices: Optional[Iterable[Row]] = None,
        payments: Optional[Iterable[Row]] = None,
    ):
        self._lock = threading.RLock()
        self._invoices: Dict[RowKey, Row] = {}
        self._payments: Dict[RowKey, Row] = {}

        for row in invoices or []:
            self.add_invoice(row)
        for row in payments or []:
            self.add_payment(row)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_invoice(self, row: Row) -> InvoiceSummary:
        """Insert an invoice row; invoice_id is generated when absent."""
        row = dict(row)
        row.setdefault("invoice_id", str(uuid4()))
        row.setdefault("status", InvoiceStatus.OPEN.value)
        invoice = InvoiceSummary.from_row(row)
        with self._lock:
            self._invoices[(invoice.tenant_id, invoice.invoice_id)] = row
        return invoice

    def add_payment(self, row: Row) -> Payment:
        """Insert a payment row; payment_id is generated when absent."""
        row = dict(row)
        row.setdefault("payment_id", str(uuid4()))
        row.setdefault("status", PaymentStatus.UNMATCHED.value)
        row.setdefault("matched_invoice_id", None)
        payment = Payment.from_row(row)
        with self._lock:
            self._payments[(payment.tenant_id, payment.payment_id)] = row
        return payment

    def load_file(self, path: Union[str, Path]) -> Dict[str, int]:
        """
        Load rows from a JSON document of the form
        ``{"invoices": [...], "payments": [...]}``.

        Returns:
            Count of rows loaded per table
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        invoices = data.get("invoices") or []
        payments = data.get("payments") or []
        for row in invoices:
            self.add_invoice(row)
        for row in payments:
            self.add_payment(row)

        counts = {"invoices": len(invoices), "payments": len(payments)}
        logger.info("Seed rows loaded", path=str(path), **counts)
        return counts

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_open_invoices(self, tenant_id: str) -> List[InvoiceSummary]:
        with self._lock:
            rows = [
                row for (row_tenant, _), row in self._invoices.items()
                if row_tenant == tenant_id
                and row.get("status") == InvoiceStatus.OPEN.value
            ]
            return [InvoiceSummary.from_row(row) for row in rows]

    def get_payment(self, tenant_id: str, payment_id: str) -> Payment:
        with self._lock:
            return Payment.from_row(self._payment_row(tenant_id, payment_id))

    def get_invoice(self, tenant_id: str, invoice_id: str) -> InvoiceSummary:
        with self._lock:
            return InvoiceSummary.from_row(self._invoice_row(tenant_id, invoice_id))

    def list_payments(self, tenant_id: str) -> List[Payment]:
        with self._lock:
            payments = [
                Payment.from_row(row) for (row_tenant, _), row in self._payments.items()
                if row_tenant == tenant_id
            ]
        return sorted(
            payments,
            key=lambda p: p.payment_date or date.min,
            reverse=True,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_payment_status(
        self,
        tenant_id: str,
        payment_id: str,
        status: PaymentStatus,
        matched_invoice_id: Optional[str] = None,
    ) -> Payment:
        with self._lock:
            row = self._payment_row(tenant_id, payment_id)
            row["status"] = status.value
            row["matched_invoice_id"] = matched_invoice_id
            return Payment.from_row(row)

    def mark_invoice_paid(self, tenant_id: str, invoice_id: str) -> InvoiceSummary:
        with self._lock:
            row = self._invoice_row(tenant_id, invoice_id)
            row["status"] = InvoiceStatus.PAID.value
            return InvoiceSummary.from_row(row)

    def apply_exact_match(
        self,
        tenant_id: str,
        payment_id: str,
        invoice_id: str,
    ) -> Payment:
        with self._lock:
            payment_row = self._payment_row(tenant_id, payment_id)
            invoice_row = self._invoice_row(tenant_id, invoice_id)

            if invoice_row.get("status") != InvoiceStatus.OPEN.value:
                logger.warning(
                    "Invoice no longer open",
                    tenant_id=tenant_id,
                    invoice_id=invoice_id,
                    status=invoice_row.get("status"),
                )
                raise ConcurrencyConflictError(
                    f"Invoice {invoice_row.get('invoice_number') or invoice_id} "
                    "is no longer open",
                    details={"invoice_id": invoice_id, "status": invoice_row.get("status")},
                )

            if payment_row.get("status") == PaymentStatus.MATCHED.value:
                raise ConcurrencyConflictError(
                    f"Payment {payment_id} was already matched",
                    details={"matched_invoice_id": payment_row.get("matched_invoice_id")},
                )

            saved_invoice = deepcopy(invoice_row)
            saved_payment = deepcopy(payment_row)
            try:
                self.mark_invoice_paid(tenant_id, invoice_id)
                return self.update_payment_status(
                    tenant_id, payment_id, PaymentStatus.MATCHED, invoice_id
                )
            except Exception:
                invoice_row.clear()
                invoice_row.update(saved_invoice)
                payment_row.clear()
                payment_row.update(saved_payment)
                raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _payment_row(self, tenant_id: str, payment_id: str) -> Row:
        row = self._payments.get((tenant_id, payment_id))
        if row is None:
            raise NotFoundError(
                "Payment not found",
                details={"tenant_id": tenant_id, "payment_id": payment_id},
            )
        return row

    def _invoice_row(self, tenant_id: str, invoice_id: str) -> Row:
        row = self._invoices.get((tenant_id, invoice_id))
        if row is None:
            raise NotFoundError(
                "Invoice not found",
                details={"tenant_id": tenant_id, "invoice_id": invoice_id},
            )
        return row
