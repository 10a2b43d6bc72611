"""
Money and profit helpers.

Pure functions over Decimals and duck-typed line items (anything exposing
`quantity`, `unit_price` and `cost_price`). They never touch the session,
so models, services and tests can all share them.

Values stay unrounded here; rounding happens only when presenting
(`format_money`, `round_pct`).
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

__all__ = [
    "ZERO",
    "to_decimal",
    "quantize_money",
    "format_money",
    "round_pct",
    "percentage",
    "profit_margin",
    "line_subtotal",
    "item_profit",
    "item_total_cost",
    "sale_total_profit",
    "sale_total_cost",
]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and None (-> 0) into a Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Not a number: {value!r}")


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    """Fixed-point rendering with two decimals, e.g. Decimal('40') -> '40.00'."""
    return str(quantize_money(value))


def round_pct(value) -> float:
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def percentage(numerator, denominator) -> Decimal:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    denominator = to_decimal(denominator)
    if denominator == 0:
        return ZERO
    return to_decimal(numerator) / denominator * 100


def profit_margin(cost_price, selling_price) -> Decimal:
    """Markup over cost: (selling - cost) / cost * 100, 0 for zero cost."""
    cost = to_decimal(cost_price)
    return percentage(to_decimal(selling_price) - cost, cost)


def line_subtotal(unit_price, quantity: int) -> Decimal:
    return to_decimal(unit_price) * int(quantity)


def item_profit(item) -> Decimal:
    return (to_decimal(item.unit_price) - to_decimal(item.cost_price)) * int(item.quantity)


def item_total_cost(item) -> Decimal:
    return to_decimal(item.cost_price) * int(item.quantity)


def sale_total_profit(items: Iterable) -> Decimal:
    return sum((item_profit(i) for i in items), ZERO)


def sale_total_cost(items: Iterable) -> Decimal:
    return sum((item_total_cost(i) for i in items), ZERO)
