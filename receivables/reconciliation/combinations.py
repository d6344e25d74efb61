"""
Combination Generator.

Enumerates the invoice groupings a payment could be settling: every subset
of one, two or three open invoices.
"""

from itertools import combinations
from math import comb
from typing import Iterator, Sequence, Tuple

from ..models import InvoiceSummary

# Largest grouping proposed to a reviewer. C(n, 3) bounds the search.
MAX_COMBINATION_SIZE = 3


def generate_combinations(
    invoices: Sequence[InvoiceSummary],
    max_size: int = MAX_COMBINATION_SIZE,
) -> Iterator[Tuple[InvoiceSummary, ...]]:
    """
    Lazily yield every subset of size 1..max_size.

    Sizes come out ascending; within a size, subsets follow input index
    order, so downstream tie-breaks are deterministic.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be at least 1, got {max_size}")

    for size in range(1, min(max_size, len(invoices)) + 1):
        yield from combinations(invoices, size)


def count_combinations(n: int, max_size: int = MAX_COMBINATION_SIZE) -> int:
    """Number of subsets generate_combinations yields for n invoices."""
    return sum(comb(n, k) for k in range(1, min(max_size, n) + 1))
