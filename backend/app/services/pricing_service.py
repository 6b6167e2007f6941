"""
Pricing Service - Global discount arithmetic

Every displayed price (catalog card, cart line, cart total) is derived here
so listing and cart always agree.

Rounding: ROUND_HALF_UP to whole currency units.
Cart totals: round-then-sum. Each line is the per-unit rounded discounted
price times the quantity (rounded), and the total is the sum of lines.

Author: TM3
Date: 2025-10-03
"""
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Union

Number = Union[Decimal, int, float, str]

ONE_HUNDRED = Decimal("100")


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise into Decimal
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """Round to the nearest whole unit, halves away from zero"""
    value = _to_decimal(value)
    with localcontext() as context:
        # quantize needs every integer digit to fit in the precision
        context.prec = max(context.prec, value.adjusted() + 2)
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp_percentage(pct: Number) -> Decimal:
    """Keep a discount percentage within [0, 100]"""
    pct = _to_decimal(pct)
    if pct < 0:
        return Decimal("0")
    if pct > ONE_HUNDRED:
        return ONE_HUNDRED
    return pct


def list_price(unit_price: Number) -> int:
    """Undiscounted price as displayed (struck through next to the discounted one)"""
    return round_half_up(unit_price)


def discounted_price(unit_price: Number, pct: Number) -> int:
    """
    Unit price after the global discount

    Args:
        unit_price: List price
        pct: Discount percentage, 0-100

    Returns:
        round_half_up(unit_price * (1 - pct/100))

    Example:
        discounted_price(1000, 10) -> 900
    """
    factor = 1 - clamp_percentage(pct) / ONE_HUNDRED
    return round_half_up(_to_decimal(unit_price) * factor)


def line_total(unit_price: Number, quantity: Number, pct: Number) -> int:
    """Cart line total, based on the rounded per-unit discounted price"""
    price = discounted_price(unit_price, pct)
    quantity = _to_decimal(quantity)
    with localcontext() as context:
        context.prec = max(context.prec, len(str(price)) + len(quantity.as_tuple().digits))
        total = price * quantity
    return round_half_up(total)


def cart_total(line_totals: Iterable[int]) -> int:
    """Sum of already-rounded line totals"""
    return sum(line_totals)


def discount_label(pct: Number) -> str:
    """Badge text shown next to discounted prices, empty when there is no discount"""
    pct = clamp_percentage(pct)
    if pct <= 0:
        return ""
    return f"{pct.normalize():f}% OFF"
