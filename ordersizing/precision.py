# ordersizing/precision.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]

_ONE = Decimal(1)


def to_decimal(value: Number) -> Decimal:
    """
    Coerce user/feed input into a finite Decimal.
    Floats go through repr() so 100.07 stays 100.07 rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, bool):
        raise ValueError("bool is not a numeric value")
    else:
        try:
            dec = Decimal(repr(float(value))) if isinstance(value, float) else Decimal(value)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"not a decimal value: {value!r}") from exc
    if not dec.is_finite():
        raise ValueError(f"non-finite value: {value!r}")
    return dec


def decimal_places(increment: Decimal) -> int:
    # 0.01 -> 2, 0.5 -> 1, 25 -> 0
    exponent = increment.normalize().as_tuple().exponent
    return max(0, -int(exponent))


def round_to_increment(value: Decimal, increment: Decimal) -> Decimal:
    """Round half-up to the nearest multiple of `increment` (0.05 -> 100.07 becomes 100.05)."""
    if increment <= 0:
        raise ValueError("increment must be positive")
    units = (value / increment).quantize(_ONE, rounding=ROUND_HALF_UP)
    return (units * increment).quantize(_ONE.scaleb(-decimal_places(increment)))
