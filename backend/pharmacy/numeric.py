from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")

_ASCII_DIGITS = re.compile(r"[0-9]+")


def as_decimal(value) -> Decimal:
    """Null-safe Decimal; NULL prices and quantities count as 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_number(value) -> Optional[float | int]:
    """
    JSON-friendly number for a Decimal column value.

    Whole values serialize as int (5 rather than 5.0).
    """
    if value is None:
        return None
    d = as_decimal(value)
    if d == d.to_integral_value():
        return int(d)
    return float(d)


def next_numeric_id(ids) -> str:
    """
    Max-plus-one over the ids made only of ASCII digits, as a string.

    Other ids (e.g. "AMOX-250", or "²" which str.isdigit accepts) are ignored.
    """
    numeric_ids = [int(i) for i in ids if _ASCII_DIGITS.fullmatch(i)]
    return str(max(numeric_ids, default=0) + 1)
