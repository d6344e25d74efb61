"""
Data-access contract consumed by the reconciliation core.

Durable storage lives outside this service. Implementations hand back
strongly typed records (built with ``from_row``) and raise the errors from
``receivables.errors``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import InvoiceSummary, Payment, PaymentStatus


class ReceivablesRepository(ABC):
    """Tenant-scoped access to payments and invoices."""

    @abstractmethod
    def find_open_invoices(self, tenant_id: str) -> List[InvoiceSummary]:
        """Open invoices for the tenant, in the store's default order."""

    @abstractmethod
    def get_payment(self, tenant_id: str, payment_id: str) -> Payment:
        """Return the payment or raise NotFoundError."""

    @abstractmethod
    def get_invoice(self, tenant_id: str, invoice_id: str) -> InvoiceSummary:
        """Return the invoice (any status) or raise NotFoundError."""

    @abstractmethod
    def list_payments(self, tenant_id: str) -> List[Payment]:
        """All of the tenant's payments, newest payment_date first."""

    @abstractmethod
    def update_payment_status(
        self,
        tenant_id: str,
        payment_id: str,
        status: PaymentStatus,
        matched_invoice_id: Optional[str] = None,
    ) -> Payment:
        """Set status and matched-invoice reference; returns the new record."""

    @abstractmethod
    def mark_invoice_paid(self, tenant_id: str, invoice_id: str) -> InvoiceSummary:
        """Transition an invoice to paid."""

    @abstractmethod
    def apply_exact_match(
        self,
        tenant_id: str,
        payment_id: str,
        invoice_id: str,
    ) -> Payment:
        """
        Mark the invoice paid and the payment matched in one transaction.

        Must re-check that the invoice is still open right before committing
        and raise ConcurrencyConflictError if it is not. Either both records
        change or neither does.
        """
