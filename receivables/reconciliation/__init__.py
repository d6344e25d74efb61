"""Payment reconciliation engine components."""

from .exact_matcher import ExactMatcher, find_exact_match
from .combinations import MAX_COMBINATION_SIZE, generate_combinations
from .scorer import SuggestionScorer
from .ranker import MAX_SUGGESTIONS, rank_suggestions
from .orchestrator import ReconciliationOrchestrator

__all__ = [
    "ExactMatcher",
    "find_exact_match",
    "MAX_COMBINATION_SIZE",
    "generate_combinations",
    "SuggestionScorer",
    "MAX_SUGGESTIONS",
    "rank_suggestions",
    "ReconciliationOrchestrator",
]
