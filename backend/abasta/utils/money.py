"""Decimal helpers for prices, subtotals and report figures."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round2(value) -> Decimal:
    """Round to two decimal places, ties away from zero."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(quantity, unit_price) -> Decimal:
    return round2(Decimal(str(quantity)) * Decimal(str(unit_price)))


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return round2(part * 100 / whole)
