"""
Tests for the Exact Matcher.
"""

from decimal import Decimal

import pytest

from receivables.reconciliation.exact_matcher import ExactMatcher, find_exact_match

from conftest import make_invoice


@pytest.fixture
def matcher():
    return ExactMatcher()


class TestExactMatcher:
    """Test suite for exact matching."""

    def test_exact_amount_match(self, matcher):
        invoices = [
            make_invoice("A", "5000.00"),
            make_invoice("B", "2000.00"),
            make_invoice("C", "3200.00"),
        ]

        match = matcher.find(Decimal("5000.00"), invoices)

        assert match is not None
        assert match.invoice_id == "A"

    def test_within_epsilon(self, matcher):
        invoices = [make_invoice("A", "1000.005")]
        assert matcher.find(Decimal("1000.00"), invoices).invoice_id == "A"

    def test_epsilon_is_exclusive(self, matcher):
        """A full cent apart is not an exact match."""
        invoices = [make_invoice("A", "1000.01")]
        assert matcher.find(Decimal("1000.00"), invoices) is None

    def test_first_in_input_order_wins(self, matcher):
        invoices = [
            make_invoice("B", "750.00"),
            make_invoice("A", "750.00"),
        ]
        assert matcher.find(Decimal("750.00"), invoices).invoice_id == "B"

    def test_no_match(self, matcher):
        invoices = [make_invoice("A", "10.00"), make_invoice("B", "20.00")]
        assert matcher.find(Decimal("15.00"), invoices) is None

    def test_empty_invoice_set(self):
        assert find_exact_match(Decimal("15.00"), []) is None

    def test_custom_epsilon(self):
        matcher = ExactMatcher(epsilon=Decimal("1.00"))
        invoices = [make_invoice("A", "100.50")]
        assert matcher.find(Decimal("100.00"), invoices).invoice_id == "A"
