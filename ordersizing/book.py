# ordersizing/book.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import (
    ErrorKind,
    MarketPriceEstimate,
    OrderBookSnapshot,
    Side,
    ValidationError,
)
from .precision import Number, to_decimal

_ZERO = Decimal(0)


def best_opposite_price(book: Optional[OrderBookSnapshot], side: Side) -> Optional[Decimal]:
    """Best ask for BUY, best bid for SELL; None when the book or that side is empty."""
    if book is None:
        return None
    return book.best_ask if side is Side.BUY else book.best_bid


def resolve_market_execution_price(
    book: OrderBookSnapshot, side: Side, target_base_size: Number
) -> MarketPriceEstimate:
    """
    Walk the opposing levels in priority order until `target_base_size` is covered.
    Only the needed part of the last level counts toward the average.
    Visible depth below the target (including an empty side) is INSUFFICIENT_DEPTH;
    no fallback price is inferred.
    """
    target = to_decimal(target_base_size)
    if target <= 0:
        return MarketPriceEstimate(
            requested=target,
            filled=_ZERO,
            error=ValidationError(ErrorKind.MISSING_SIZE, "Missing size"),
        )

    remaining = target
    filled = _ZERO
    notional = _ZERO
    consumed = 0
    for level in book.opposite_levels(side):
        if remaining <= 0:
            break
        take = min(level.quantity, remaining)
        if take <= 0:
            continue
        notional += take * level.price
        filled += take
        remaining -= take
        consumed += 1

    if remaining > 0:
        return MarketPriceEstimate(
            requested=target,
            filled=filled,
            levels_consumed=consumed,
            error=ValidationError(
                ErrorKind.INSUFFICIENT_DEPTH,
                f"Book depth {filled} is below requested size {target}",
            ),
        )
    return MarketPriceEstimate(
        requested=target,
        filled=filled,
        price=notional / filled,
        levels_consumed=consumed,
    )
