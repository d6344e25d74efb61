"""Reconciliation result models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple
from uuid import uuid4

from .enums import AuditAction, MatchReason, PaymentStatus
from .invoice import InvoiceSummary, Payment


@dataclass(frozen=True)
class MatchSuggestion:
    """
    A candidate grouping of invoices for a payment that had no exact match.
    Never persisted.
    """
    invoices: Tuple[InvoiceSummary, ...]
    total_amount: Decimal
    difference: Decimal  # target - total: positive = underpaid, negative = overpaid
    confidence: Decimal  # 0-100
    reason: MatchReason

    @property
    def invoice_ids(self) -> Tuple[str, ...]:
        return tuple(inv.invoice_id for inv in self.invoices)

    @property
    def dedup_key(self) -> Tuple[Tuple[str, ...], Decimal]:
        """Same invoice set at the same cent total."""
        return tuple(sorted(self.invoice_ids)), self.total_amount

    @property
    def abs_difference(self) -> Decimal:
        return abs(self.difference)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "invoices": [inv.to_dict() for inv in self.invoices],
            "total_amount": float(self.total_amount),
            "difference": float(self.difference),
            "confidence": float(self.confidence),
            "reason": self.reason.value,
            "description": self.reason.description,
        }


@dataclass
class AuditEntry:
    """An entry in the audit log."""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.utcnow)

    # Action
    action: AuditAction = AuditAction.RECONCILIATION_STARTED

    # Context
    payment_id: Optional[str] = None
    invoice_ids: List[str] = field(default_factory=list)

    # Details
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    # Outcome
    success: bool = True
    error_message: Optional[str] = None


@dataclass
class ReconciliationResult:
    """Complete result of reconciling one payment."""
    status: PaymentStatus
    message: str
    payment: Payment
    exact_matches: List[InvoiceSummary] = field(default_factory=list)
    partial_matches: List[MatchSuggestion] = field(default_factory=list)

    # Audit
    audit_log: List[AuditEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response shape served by the HTTP layer."""
        return {
            "status": self.status.value,
            "message": self.message,
            "payment": self.payment.to_dict(),
            "exact_matches": [inv.to_dict() for inv in self.exact_matches],
            "partial_matches": [s.to_dict() for s in self.partial_matches],
        }
