"""Enumerations for the payment reconciliation system."""

from enum import Enum


class PaymentStatus(str, Enum):
    """
    Reconciliation state of a received payment.

    UNMATCHED: Not yet reconciled, or left for a retry after a lost race
    MATCHED: Exactly matched to one invoice (terminal)
    NEEDS_REVIEW: No exact match, a human must close the gap
    """
    UNMATCHED = "unmatched"
    MATCHED = "matched"
    NEEDS_REVIEW = "needs_review"


class InvoiceStatus(str, Enum):
    """Lifecycle status of an invoice. Only OPEN is eligible for matching."""
    OPEN = "open"
    PAID = "paid"
    OVERDUE = "overdue"
    DISPUTED = "disputed"
    WRITTEN_OFF = "written_off"


class MatchReason(str, Enum):
    """Why a suggestion was proposed."""
    SINGLE = "single"            # One invoice close to the payment
    COMBINATION = "combination"  # Two or three invoices summing close to it

    @property
    def description(self) -> str:
        if self is MatchReason.SINGLE:
            return "Similar single invoice amount"
        return "Potential multi-invoice combination"


class AuditAction(str, Enum):
    """Type of audit action."""
    RECONCILIATION_STARTED = "reconciliation_started"
    ALREADY_MATCHED = "already_matched"
    INVOICES_LOADED = "invoices_loaded"
    EXACT_MATCH_FOUND = "exact_match_found"
    MATCH_COMMITTED = "match_committed"
    MATCH_CONFLICT = "match_conflict"
    SUGGESTIONS_RANKED = "suggestions_ranked"
    MANUAL_REVIEW_REQUIRED = "manual_review_required"
