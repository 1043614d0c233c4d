from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def to_money(value: Decimal | int | str | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary amount")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents, half up. Used for every displayed amount."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return format(quantize_money(value), "f")


def format_rate(rate: Decimal) -> str:
    """0.05 -> '5', 0.125 -> '12.5'."""
    percent = (rate * 100).normalize()
    return format(percent, "f")


def compute_totals(line_totals: Iterable[Decimal], tax_rate: Decimal) -> Totals:
    subtotal = sum(line_totals, ZERO)
    tax = subtotal * tax_rate
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)
