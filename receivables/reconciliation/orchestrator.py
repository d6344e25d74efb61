"""
Reconciliation Orchestrator - single-payment pipeline coordinator.

Runs one payment through:
1. Exact match (commits invoice -> paid, payment -> matched atomically)
2. Otherwise: combination generation, scoring and ranking of suggestions,
   then flags the payment for manual review.

Payment states: unmatched -> matched | needs_review. A lost race on the
exact-match commit leaves the payment unmatched so a later run can retry,
unless a concurrent run matched this same payment, whose match is reported.
"""

from decimal import Decimal
from typing import Any, Callable, List

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import get_settings
from ..errors import (
    InputInvalidError,
    InternalError,
    ReconciliationError,
    TransientError,
)
from ..models import (
    AuditAction,
    InvoiceSummary,
    MatchSuggestion,
    Payment,
    PaymentStatus,
    ReconciliationResult,
)
from ..repository import ReceivablesRepository
from ..utils.audit_logger import AuditLogger
from .combinations import count_combinations, generate_combinations
from .exact_matcher import ExactMatcher
from .ranker import rank_suggestions
from .scorer import SuggestionScorer

logger = structlog.get_logger()

MATCHED_MESSAGE = "Payment successfully matched to invoice {number}."
REVIEW_MESSAGE = "No exact invoice match found. Manual review required."
CONFLICT_MESSAGE = (
    "Invoice {number} could not be committed to this payment. Manual review required."
)


class ReconciliationOrchestrator:
    """
    Coordinates exact matching, suggestion search and the resulting status
    transition for one payment at a time.
    """

    def __init__(self, repository: ReceivablesRepository):
        self.settings = get_settings()
        self.repository = repository
        self.exact_matcher = ExactMatcher(self.settings.exact_match_epsilon)
        self.scorer = SuggestionScorer()

    def reconcile(self, tenant_id: str, payment_id: str) -> ReconciliationResult:
        """
        Reconcile a payment against the tenant's open invoices.

        Raises:
            InputInvalidError: blank tenant or payment identifier
            NotFoundError: payment not in the tenant's scope
            TransientError: invoices could not be read, or the status
                update failed
            InternalError: data violated a core invariant
        """
        tenant_id = self._require_identifier(tenant_id, "tenant_id")
        payment_id = self._require_identifier(payment_id, "payment_id")

        audit = AuditLogger(tenant_id, payment_id)
        payment = self._call(self.repository.get_payment, tenant_id, payment_id)

        audit.record(
            AuditAction.RECONCILIATION_STARTED,
            "Reconciliation started",
            amount=str(payment.amount_received),
            status=payment.status.value,
        )

        if payment.is_matched:
            return self._already_matched(tenant_id, payment, audit)

        if payment.amount_received < 0:
            raise InternalError(
                "Payment amount is negative",
                details={"payment_id": payment_id, "amount": str(payment.amount_received)},
            )

        invoices = self._load_open_invoices(tenant_id)
        self._check_invoices(tenant_id, invoices)
        eligible = [inv for inv in invoices if inv.amount > 0]

        audit.record(
            AuditAction.INVOICES_LOADED,
            f"Loaded {len(invoices)} open invoices",
            open_invoices=len(invoices),
            eligible_invoices=len(eligible),
        )

        target = payment.amount_received
        exact = self.exact_matcher.find(target, eligible)

        if exact is not None:
            audit.record(
                AuditAction.EXACT_MATCH_FOUND,
                f"Exact match: {exact.invoice_number}",
                invoice_ids=[exact.invoice_id],
            )
            try:
                matched_payment = self._call(
                    self.repository.apply_exact_match,
                    tenant_id,
                    payment_id,
                    exact.invoice_id,
                )
            except TransientError as e:
                audit.record(
                    AuditAction.MATCH_CONFLICT,
                    "Exact match abandoned",
                    invoice_ids=[exact.invoice_id],
                    success=False,
                    error_message=e.message,
                )
                current = self._reread_payment(tenant_id, payment)
                if current.is_matched:
                    return self._already_matched(tenant_id, current, audit)

                remaining = [inv for inv in eligible if inv.invoice_id != exact.invoice_id]
                suggestions = self._suggest(target, remaining, audit)
                return ReconciliationResult(
                    status=PaymentStatus.NEEDS_REVIEW,
                    message=CONFLICT_MESSAGE.format(number=exact.invoice_number),
                    payment=payment,
                    partial_matches=suggestions,
                    audit_log=audit.entries,
                )

            audit.record(
                AuditAction.MATCH_COMMITTED,
                f"Payment matched to invoice {exact.invoice_number}",
                invoice_ids=[exact.invoice_id],
            )
            return ReconciliationResult(
                status=PaymentStatus.MATCHED,
                message=MATCHED_MESSAGE.format(number=exact.invoice_number),
                payment=matched_payment,
                exact_matches=[exact],
                audit_log=audit.entries,
            )

        suggestions = self._suggest(target, eligible, audit)
        reviewed_payment = self._call(
            self.repository.update_payment_status,
            tenant_id,
            payment_id,
            PaymentStatus.NEEDS_REVIEW,
            None,
        )
        audit.record(
            AuditAction.MANUAL_REVIEW_REQUIRED,
            "No exact match found - flagged for review",
            suggestions=len(suggestions),
        )

        return ReconciliationResult(
            status=PaymentStatus.NEEDS_REVIEW,
            message=REVIEW_MESSAGE,
            payment=reviewed_payment,
            partial_matches=suggestions,
            audit_log=audit.entries,
        )

    def list_payments(self, tenant_id: str) -> List[Payment]:
        """The tenant's payments, newest first."""
        tenant_id = self._require_identifier(tenant_id, "tenant_id")
        return self._call(self.repository.list_payments, tenant_id)

    def suggest(
        self,
        target: Decimal,
        invoices: List[InvoiceSummary],
    ) -> List[MatchSuggestion]:
        """Ranked suggestions for a target amount, with no side effects."""
        combos = generate_combinations(invoices, self.settings.max_combination_size)
        scored = self.scorer.score_all(target, combos)
        return rank_suggestions(scored, self.settings.max_suggestions)

    def _suggest(
        self,
        target: Decimal,
        invoices: List[InvoiceSummary],
        audit: AuditLogger,
    ) -> List[MatchSuggestion]:
        suggestions = self.suggest(target, invoices)
        audit.record(
            AuditAction.SUGGESTIONS_RANKED,
            f"Ranked {len(suggestions)} suggestions",
            invoice_ids=sorted({i for s in suggestions for i in s.invoice_ids}),
            candidates=count_combinations(len(invoices), self.settings.max_combination_size),
            tolerance=str(self.scorer.tolerance_for(target)),
        )
        return suggestions

    def _already_matched(
        self,
        tenant_id: str,
        payment: Payment,
        audit: AuditLogger,
    ) -> ReconciliationResult:
        """Report an existing match without touching either record."""
        if not payment.matched_invoice_id:
            raise InternalError(
                "Matched payment has no invoice reference",
                details={"payment_id": payment.payment_id},
            )

        invoice = self._call(
            self.repository.get_invoice, tenant_id, payment.matched_invoice_id
        )
        audit.record(
            AuditAction.ALREADY_MATCHED,
            f"Payment already matched to invoice {invoice.invoice_number}",
            invoice_ids=[invoice.invoice_id],
        )
        return ReconciliationResult(
            status=PaymentStatus.MATCHED,
            message=MATCHED_MESSAGE.format(number=invoice.invoice_number),
            payment=payment,
            exact_matches=[invoice],
            audit_log=audit.entries,
        )

    def _reread_payment(self, tenant_id: str, payment: Payment) -> Payment:
        """Fetch the payment again after a failed commit; a concurrent run may have matched it."""
        try:
            return self._call(self.repository.get_payment, tenant_id, payment.payment_id)
        except TransientError as e:
            logger.warning(
                "Payment re-read failed after commit conflict",
                payment_id=payment.payment_id,
                error=e.message,
            )
            return payment

    def _load_open_invoices(self, tenant_id: str) -> List[InvoiceSummary]:
        """Read open invoices, retrying transient failures."""
        retrying = Retrying(
            retry=retry_if_exception_type(TransientError),
            stop=stop_after_attempt(self.settings.invoice_read_attempts),
            wait=wait_exponential(multiplier=0.1, max=1),
            reraise=True,
        )
        return retrying(self._call, self.repository.find_open_invoices, tenant_id)

    def _check_invoices(self, tenant_id: str, invoices: List[InvoiceSummary]) -> None:
        for invoice in invoices:
            if invoice.tenant_id != tenant_id:
                raise InternalError(
                    "Invoice from another tenant in open-invoice read",
                    details={"invoice_id": invoice.invoice_id, "tenant_id": invoice.tenant_id},
                )
            if not invoice.is_open:
                raise InternalError(
                    "Non-open invoice in open-invoice read",
                    details={"invoice_id": invoice.invoice_id, "status": invoice.status.value},
                )

    def _call(self, operation: Callable[..., Any], *args: Any) -> Any:
        """Run a repository call, classifying unexpected failures as transient."""
        try:
            return operation(*args)
        except ReconciliationError:
            raise
        except Exception as e:
            name = getattr(operation, "__name__", repr(operation))
            logger.exception("Data access failed", operation=name, error=str(e))
            raise TransientError(f"Data access failed: {name}", details=str(e)) from e

    @staticmethod
    def _require_identifier(value: Any, name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InputInvalidError(f"{name} is required", details={"field": name})
        return value.strip()
