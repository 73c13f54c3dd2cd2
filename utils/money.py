"""
Money helpers for free-text numeric fields.

Every amount the operator types arrives as text (or nothing at all). These
helpers coerce it to a number without raising, so derived totals can always
be computed from whatever is currently on screen.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def to_number(value: Any) -> float:
    """
    Coerce a user-entered value to a float.

    None, empty strings, booleans, NaN/inf and anything unparseable become 0.
    Thousands separators and surrounding whitespace are tolerated.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def is_blank(value: Any) -> bool:
    """True when a field holds nothing the operator typed (None or whitespace)."""
    if value is None:
        return True
    return not str(value).strip()


def round_half_up(value: float) -> float:
    """Round to the nearest whole unit, halves away from zero on the positive side."""
    return float(math.floor(value + 0.5))


def format_amount(value: Any) -> str:
    """Two-decimal string as sent on the wire ("1234.50")."""
    return f"{to_number(value):.2f}"


def format_currency(value: Any, symbol: str = "₹") -> str:
    """
    Format an amount for display with Indian digit grouping.

    Example: 1234567.5 -> "₹12,34,567.50"
    """
    number = to_number(value)
    sign = "-" if number < 0 else ""
    whole, fraction = f"{abs(number):.2f}".split(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{symbol}{whole}.{fraction}"
