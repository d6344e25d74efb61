"""
Suggestion Scorer.

Turns a candidate invoice grouping into a MatchSuggestion when its total is
close enough to the payment, and assigns it a confidence score.

Tolerance band:
    max(target * 0.15, 500)
Small payments still get a usable absolute band; large payments are judged
relative to their size.

Confidence:
    relative = min(|difference| / max(target, 1), 1)
    confidence = round2(min(1 - relative + bonus, 1)) * 100
where bonus is 0.1 for groupings of two or three invoices. A near-exact
multi-invoice sum is less likely to be a coincidence than a single invoice
of similar amount.
"""

from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

import structlog

from ..amounts import round2
from ..config import get_settings
from ..models import InvoiceSummary, MatchReason, MatchSuggestion

logger = structlog.get_logger()

ONE = Decimal("1")
HUNDRED = Decimal("100")


class SuggestionScorer:
    """Scores invoice groupings against a payment target."""

    def __init__(self):
        self.settings = get_settings()
        self.combination_bonus = self.settings.combination_bonus

    def tolerance_for(self, target: Decimal) -> Decimal:
        return self.settings.calculate_tolerance(target)

    def score(
        self,
        target: Decimal,
        combo: Sequence[InvoiceSummary],
        tolerance: Optional[Decimal] = None,
    ) -> Optional[MatchSuggestion]:
        """
        Score one grouping.

        Returns None when the grouping falls outside the tolerance band.
        """
        if not combo:
            return None

        if tolerance is None:
            tolerance = self.tolerance_for(target)

        total = round2(sum((inv.amount for inv in combo), Decimal("0")))
        difference = round2(target - total)

        if abs(difference) > tolerance:
            return None

        relative_diff = min(abs(difference) / max(target, ONE), ONE)
        bonus = self.combination_bonus if len(combo) > 1 else Decimal("0")
        confidence = round2(min(ONE - relative_diff + bonus, ONE)) * HUNDRED

        return MatchSuggestion(
            invoices=tuple(combo),
            total_amount=total,
            difference=difference,
            confidence=confidence,
            reason=MatchReason.SINGLE if len(combo) == 1 else MatchReason.COMBINATION,
        )

    def score_all(
        self,
        target: Decimal,
        combos: Iterable[Sequence[InvoiceSummary]],
    ) -> Iterator[MatchSuggestion]:
        """Yield the suggestions that survive the tolerance band."""
        tolerance = self.tolerance_for(target)
        for combo in combos:
            suggestion = self.score(target, combo, tolerance)
            if suggestion is not None:
                yield suggestion
