"""
Shared fixtures for reconciliation tests.
"""

from decimal import Decimal

import pytest

from receivables.models import InvoiceSummary
from receivables.repository import InMemoryReceivablesRepository

TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"


def make_invoice(invoice_id, amount, tenant_id=TENANT, **kwargs):
    """Build an open InvoiceSummary with a derived invoice number."""
    return InvoiceSummary(
        invoice_id=invoice_id,
        invoice_number=kwargs.pop("invoice_number", f"INV-{invoice_id}"),
        amount=Decimal(str(amount)),
        tenant_id=tenant_id,
        **kwargs,
    )


def seed(repository, invoices, payments):
    """Insert invoice and payment rows for TENANT."""
    for invoice_id, amount in invoices:
        repository.add_invoice({
            "invoice_id": invoice_id,
            "invoice_number": f"INV-{invoice_id}",
            "amount": amount,
            "tenant_id": TENANT,
            "customer_id": "cust-1",
            "status": "open",
        })
    for payment_id, amount in payments:
        repository.add_payment({
            "payment_id": payment_id,
            "amount_received": amount,
            "payment_date": "2025-10-20",
            "tenant_id": TENANT,
        })
    return repository


@pytest.fixture
def repository():
    return InMemoryReceivablesRepository()
