"""
Exact Matcher - first pass of payment reconciliation.

Finds the first open invoice whose amount equals the payment within a fixed
epsilon. Committing the match is the orchestrator's job.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ..config import get_settings
from ..models import InvoiceSummary

logger = structlog.get_logger()


class ExactMatcher:
    """Linear scan for an invoice paying the payment in full."""

    def __init__(self, epsilon: Optional[Decimal] = None):
        self.epsilon = epsilon if epsilon is not None else get_settings().exact_match_epsilon

    def find(
        self,
        amount: Decimal,
        invoices: Iterable[InvoiceSummary],
    ) -> Optional[InvoiceSummary]:
        """
        Return the first invoice with |invoice.amount - amount| < epsilon.

        Input order decides ties between invoices of equal amount.
        """
        for invoice in invoices:
            if abs(invoice.amount - amount) < self.epsilon:
                logger.debug(
                    "Exact match candidate",
                    invoice_id=invoice.invoice_id,
                    amount=str(invoice.amount),
                )
                return invoice
        return None


def find_exact_match(
    amount: Decimal,
    invoices: Iterable[InvoiceSummary],
) -> Optional[InvoiceSummary]:
    return ExactMatcher().find(amount, invoices)
