"""
Currency rounding helpers.

Amounts are carried as floats through the API but rounded with
Decimal half-up on their shortest repr, so 1.775 becomes 1.78 rather
than whatever its binary approximation happens to round to.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Number = Union[int, float, Decimal]


def to_decimal(amount: Number) -> Decimal:
    """Exact decimal for an amount (floats go through their repr)."""
    if isinstance(amount, Decimal):
        return amount
    return Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)


def quantize_money(amount: Number) -> Decimal:
    """Round to the cent, half-up, keeping Decimal."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def round_money(amount: Number) -> float:
    """Round to 2 decimal places for currency."""
    return float(quantize_money(amount))
