# ordersizing/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto
from typing import Iterable, Optional, Tuple

from .precision import Number, decimal_places, round_to_increment, to_decimal


class Side(Enum):
    BUY = "buy"
    SELL = "sell"

    def opposite(self) -> "Side":
        return Side.SELL if self is Side.BUY else Side.BUY


class OrderType(Enum):
    LIMIT = "limit"
    MARKET = "market"


class ExecutionType(Enum):
    """Order type as the venue understands it."""
    LIMIT = "limit"
    IOC = "ioc"
    POST_ONLY = "post_only"


class SizeSource(Enum):
    BASE = auto()
    QUOTE = auto()


class ErrorKind(Enum):
    MISSING_PRICE = "missing_price"
    MISSING_SIZE = "missing_size"
    INCOMPATIBLE_MODIFIERS = "incompatible_modifiers"
    PRICE_NOT_RESOLVED = "price_not_resolved"
    INSUFFICIENT_DEPTH = "insufficient_depth"
    PRICE_LOCKED = "price_locked"
    MODIFIERS_LOCKED = "modifiers_locked"
    NEGATIVE_VALUE = "negative_value"


@dataclass(frozen=True, slots=True)
class Modifiers:
    post_only: bool = False
    ioc: bool = False

    @property
    def conflicting(self) -> bool:
        return self.post_only and self.ioc


MARKET_MODIFIERS = Modifiers(post_only=False, ioc=True)


@dataclass(frozen=True, slots=True)
class PrecisionSpec:
    """
    Per-market rounding granularity.
    - tick_size: price increment
    - min_order_size: size increment, also used for quote-size conversion
    """
    tick_size: Decimal
    min_order_size: Decimal

    def __post_init__(self) -> None:
        if self.tick_size <= 0:
            raise ValueError("tick_size must be positive")
        if self.min_order_size <= 0:
            raise ValueError("min_order_size must be positive")

    @classmethod
    def of(cls, tick_size: Number, min_order_size: Number) -> "PrecisionSpec":
        return cls(tick_size=to_decimal(tick_size), min_order_size=to_decimal(min_order_size))

    @property
    def price_decimals(self) -> int:
        return decimal_places(self.tick_size)

    @property
    def size_decimals(self) -> int:
        return decimal_places(self.min_order_size)

    def round_price(self, value: Decimal) -> Decimal:
        return round_to_increment(value, self.tick_size)

    def round_size(self, value: Decimal) -> Decimal:
        return round_to_increment(value, self.min_order_size)


@dataclass(frozen=True, slots=True)
class BookLevel:
    price: Decimal
    quantity: Decimal

    def __post_init__(self) -> None:
        if self.price < 0 or self.quantity < 0:
            raise ValueError(f"book level must be non-negative: {self.price} x {self.quantity}")


def _levels(raw: Iterable[Tuple[Number, Number]]) -> Tuple[BookLevel, ...]:
    return tuple(BookLevel(price=to_decimal(p), quantity=to_decimal(q)) for p, q in raw)


@dataclass(frozen=True, slots=True)
class OrderBookSnapshot:
    """
    Read-only view of resting liquidity.
    bids: best (highest) first; asks: best (lowest) first.
    """
    bids: Tuple[BookLevel, ...] = ()
    asks: Tuple[BookLevel, ...] = ()

    def __post_init__(self) -> None:
        for a, b in zip(self.bids, self.bids[1:]):
            if b.price > a.price:
                raise ValueError("bids must be sorted by descending price")
        for a, b in zip(self.asks, self.asks[1:]):
            if b.price < a.price:
                raise ValueError("asks must be sorted by ascending price")

    @classmethod
    def from_levels(
        cls,
        bids: Iterable[Tuple[Number, Number]] = (),
        asks: Iterable[Tuple[Number, Number]] = (),
    ) -> "OrderBookSnapshot":
        return cls(bids=_levels(bids), asks=_levels(asks))

    def opposite_levels(self, side: Side) -> Tuple[BookLevel, ...]:
        """Liquidity a taker on `side` would consume: asks for BUY, bids for SELL."""
        return self.asks if side is Side.BUY else self.bids

    @property
    def best_bid(self) -> Optional[Decimal]:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[Decimal]:
        return self.asks[0].price if self.asks else None

    def total_depth(self, side: Side) -> Decimal:
        return sum((lv.quantity for lv in self.opposite_levels(side)), Decimal(0))


@dataclass(slots=True)
class OrderDraft:
    """
    Mutable order form state, single-writer.
    source marks which of base_size/quote_size the user last edited;
    market_price holds the book-walk result for Market orders.
    """
    side: Side = Side.BUY
    order_type: OrderType = OrderType.LIMIT
    modifiers: Modifiers = field(default_factory=Modifiers)
    limit_price: Optional[Decimal] = None
    base_size: Optional[Decimal] = None
    quote_size: Optional[Decimal] = None
    reference_price: Decimal = Decimal(0)
    source: Optional[SizeSource] = None
    market_price: Optional[Decimal] = None

    def active_price(self) -> Decimal:
        if self.order_type is OrderType.LIMIT and self.limit_price is not None:
            return self.limit_price
        return self.reference_price


@dataclass(frozen=True, slots=True)
class ValidationError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class MarketPriceEstimate:
    """
    Book-walk result.
    price: size-weighted average over consumed levels, None on failure
    filled: quantity the visible book could supply (<= requested)
    """
    requested: Decimal
    filled: Decimal
    price: Optional[Decimal] = None
    levels_consumed: int = 0
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class SubmittableOrder:
    side: Side
    order_type: OrderType
    effective_price: Decimal
    base_size: Decimal
    modifiers: Modifiers

    @property
    def execution_type(self) -> ExecutionType:
        if self.modifiers.ioc:
            return ExecutionType.IOC
        if self.modifiers.post_only:
            return ExecutionType.POST_ONLY
        return ExecutionType.LIMIT


@dataclass(frozen=True, slots=True)
class ValidationResult:
    order: Optional[SubmittableOrder] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.order is not None
