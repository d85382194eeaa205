"""Numeric helpers shared by pricing and stock classification."""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Union

Number = Union[int, float, Decimal]

# Largest value a 32-bit signed integer column holds; quantities above it are
# rejected before they reach the database.
MAX_QUANTITY = 2_147_483_647


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    ``round_half_up(2.5) == 3`` and ``round_half_up(-2.5) == -2``; Python's
    built-in ``round`` would give 2 and -2 (banker's rounding).
    """
    as_decimal = value if isinstance(value, Decimal) else Decimal(str(value))
    return int((as_decimal + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))
