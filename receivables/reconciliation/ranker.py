"""
Suggestion Ranker & Deduplicator.

Collapses identical candidates, orders the rest closest-first and keeps only
the few a reviewer can act on.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from ..config import get_settings
from ..models import MatchSuggestion

logger = structlog.get_logger()

# Hard cap on suggestions shown to a reviewer.
MAX_SUGGESTIONS = 5


def deduplicate(
    suggestions: Iterable[MatchSuggestion],
) -> List[MatchSuggestion]:
    """
    Keep one suggestion per (sorted invoice ids, cent total).

    The higher confidence wins; on equal confidence the first seen stays.
    First-seen order is preserved.
    """
    best: Dict[Tuple[Tuple[str, ...], Decimal], MatchSuggestion] = {}
    for suggestion in suggestions:
        key = suggestion.dedup_key
        current = best.get(key)
        if current is None or suggestion.confidence > current.confidence:
            best[key] = suggestion
    return list(best.values())


def rank_suggestions(
    suggestions: Iterable[MatchSuggestion],
    limit: Optional[int] = None,
) -> List[MatchSuggestion]:
    """
    Deduplicate, sort by (|difference| asc, confidence desc) and truncate.

    Never returns more than MAX_SUGGESTIONS entries.
    """
    if limit is None:
        limit = get_settings().max_suggestions
    limit = max(0, min(limit, MAX_SUGGESTIONS))

    unique = deduplicate(suggestions)
    ranked = sorted(unique, key=lambda s: (s.abs_difference, -s.confidence))

    logger.debug(
        "Suggestions ranked",
        candidates=len(unique),
        returned=min(limit, len(ranked)),
    )

    return ranked[:limit]
