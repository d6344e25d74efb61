"""Data models for the payment reconciliation system."""

from .enums import (
    PaymentStatus,
    InvoiceStatus,
    MatchReason,
    AuditAction,
)
from .invoice import (
    InvoiceSummary,
    Payment,
)
from .reconciliation import (
    MatchSuggestion,
    AuditEntry,
    ReconciliationResult,
)

__all__ = [
    # Enums
    "PaymentStatus",
    "InvoiceStatus",
    "MatchReason",
    "AuditAction",
    # Records
    "InvoiceSummary",
    "Payment",
    # Reconciliation
    "MatchSuggestion",
    "AuditEntry",
    "ReconciliationResult",
]
