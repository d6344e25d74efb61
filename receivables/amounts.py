"""
Amount normalization.

Rows from the data layer carry amounts as numbers, numeric strings or nulls.
Everything is coerced to a finite Decimal here, once, before it reaches the
matching code.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

import structlog

logger = structlog.get_logger()

ZERO = Decimal("0")
CENT = Decimal("0.01")


def normalize_amount(value: Any) -> Decimal:
    """
    Coerce an arbitrary value into a finite Decimal.

    Absent, unparseable, NaN and infinite inputs yield 0. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # repr() keeps 0.1 as 0.1 instead of its binary expansion
        amount = Decimal(repr(value)) if value == value else ZERO
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            logger.debug("Unparseable amount", value=value)
            return ZERO
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            logger.debug("Unparseable amount", value=repr(value))
            return ZERO

    if not amount.is_finite():
        return ZERO

    return amount


def round2(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
