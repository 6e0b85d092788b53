"""Money helpers: every amount is a ``Decimal`` rounded to cents."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value: Union[Decimal, int, str]) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Union[Decimal, int, str]) -> Decimal:
    """Return ``amount * percent / 100`` rounded to cents."""
    return to_money(amount * Decimal(percent) / HUNDRED)
