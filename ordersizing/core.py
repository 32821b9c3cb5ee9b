# ordersizing/core.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Tuple

from .book import best_opposite_price, resolve_market_execution_price
from .models import (
    MARKET_MODIFIERS,
    ErrorKind,
    MarketPriceEstimate,
    Modifiers,
    OrderBookSnapshot,
    OrderDraft,
    OrderType,
    PrecisionSpec,
    Side,
    SizeSource,
    SubmittableOrder,
    ValidationError,
    ValidationResult,
)
from .precision import Number, to_decimal

logger = logging.getLogger(__name__)


def validate_for_submit(draft: OrderDraft) -> ValidationResult:
    """Gate a draft before it leaves the engine. Checks run in a fixed order; first failure wins."""
    if draft.order_type is OrderType.LIMIT and (draft.limit_price is None or draft.limit_price <= 0):
        return _failed(ErrorKind.MISSING_PRICE, "Missing price")
    if draft.base_size is None or draft.base_size <= 0:
        return _failed(ErrorKind.MISSING_SIZE, "Missing size")
    if draft.modifiers.conflicting:
        return _failed(ErrorKind.INCOMPATIBLE_MODIFIERS, "Post-only and IOC are mutually exclusive")

    if draft.order_type is OrderType.MARKET:
        if draft.market_price is None:
            return _failed(ErrorKind.PRICE_NOT_RESOLVED, "Market price has not been resolved")
        price = draft.market_price
    else:
        price = draft.limit_price

    order = SubmittableOrder(
        side=draft.side,
        order_type=draft.order_type,
        effective_price=price,
        base_size=draft.base_size,
        modifiers=draft.modifiers,
    )
    return ValidationResult(order=order)


def _failed(kind: ErrorKind, message: str) -> ValidationResult:
    return ValidationResult(error=ValidationError(kind, message))


class OrderSizingEngine:
    """
    Owns one OrderDraft and keeps it consistent:
      - base/quote size synchronized under the active price
      - Limit/Market with mutually exclusive Post-Only / IOC
      - market execution price resolved from a supplied book snapshot
    Setters return None when applied, or a ValidationError when rejected.
    A rejected setter leaves the draft untouched.
    """

    def __init__(self, precision: PrecisionSpec, reference_price: Optional[Number] = None) -> None:
        self.precision = precision
        self.draft = OrderDraft()
        if reference_price is not None:
            self.set_reference_price(reference_price)

    # lifecycle

    def set_market(self, precision: PrecisionSpec, reference_price: Optional[Number] = None) -> None:
        """Switch instrument: new rounding granularity and a fresh draft."""
        self.precision = precision
        self.draft = OrderDraft()
        if reference_price is not None:
            self.set_reference_price(reference_price)
        logger.debug("market switched tick=%s min_size=%s", precision.tick_size, precision.min_order_size)

    def reset(self) -> None:
        """Discard price and sizes after a submit; side, type, modifiers and reference survive."""
        d = self.draft
        self.draft = OrderDraft(
            side=d.side,
            order_type=d.order_type,
            modifiers=d.modifiers,
            reference_price=d.reference_price,
        )
        self._seed_limit_price()

    # external feeds

    def set_reference_price(self, value: Number) -> Optional[ValidationError]:
        price = to_decimal(value)
        if price < 0:
            return self._reject(ErrorKind.NEGATIVE_VALUE, f"Reference price must be non-negative: {price}")
        d = self.draft
        limit_price = d.limit_price
        if d.order_type is OrderType.LIMIT and limit_price is None and price > 0:
            limit_price = self.precision.round_price(price)
        active = limit_price if (d.order_type is OrderType.LIMIT and limit_price is not None) else price
        base, quote = self._synced(d.base_size, d.quote_size, active)
        self._commit_sizes(base, quote)
        d.reference_price = price
        d.limit_price = limit_price
        return None

    # user actions

    def set_side(self, side: Side) -> None:
        self.draft.side = side
        self.draft.market_price = None

    def set_order_type(
        self, order_type: OrderType, book: Optional[OrderBookSnapshot] = None
    ) -> None:
        """
        Market: IOC on, Post-Only off, limit price cleared.
        Limit (from Market): limit price defaults to the best opposite book price, else the
        reference price; modifiers cleared.
        """
        d = self.draft
        if order_type is OrderType.MARKET:
            modifiers = MARKET_MODIFIERS
            limit_price = None
            active = d.reference_price
        elif d.order_type is OrderType.LIMIT:
            return
        else:
            modifiers = Modifiers()
            limit_price = best_opposite_price(book, d.side)
            if limit_price is None and d.reference_price > 0:
                limit_price = d.reference_price
            if limit_price is not None:
                limit_price = self.precision.round_price(limit_price)
            active = limit_price if limit_price is not None else d.reference_price

        base, quote = self._synced(d.base_size, d.quote_size, active)
        d.order_type = order_type
        d.modifiers = modifiers
        d.limit_price = limit_price
        d.market_price = None
        self._commit_sizes(base, quote)

    def set_post_only(self, enabled: bool) -> Optional[ValidationError]:
        d = self.draft
        if d.order_type is OrderType.MARKET:
            return self._reject(ErrorKind.MODIFIERS_LOCKED, "Modifiers are fixed for market orders")
        d.modifiers = Modifiers(post_only=enabled, ioc=False if enabled else d.modifiers.ioc)
        return None

    def set_immediate_or_cancel(self, enabled: bool) -> Optional[ValidationError]:
        d = self.draft
        if d.order_type is OrderType.MARKET:
            return self._reject(ErrorKind.MODIFIERS_LOCKED, "Modifiers are fixed for market orders")
        d.modifiers = Modifiers(post_only=False if enabled else d.modifiers.post_only, ioc=enabled)
        return None

    def set_limit_price(self, value: Optional[Number]) -> Optional[ValidationError]:
        d = self.draft
        if d.order_type is OrderType.MARKET:
            return self._reject(ErrorKind.PRICE_LOCKED, "Price is not editable for market orders")
        price = None
        if value is not None:
            price = to_decimal(value)
            if price < 0:
                return self._reject(ErrorKind.NEGATIVE_VALUE, f"Price must be non-negative: {price}")
            price = self.precision.round_price(price)
        active = price if price is not None else d.reference_price
        base, quote = self._synced(d.base_size, d.quote_size, active)
        d.limit_price = price
        self._commit_sizes(base, quote)
        return None

    def set_base_size(self, value: Optional[Number]) -> Optional[ValidationError]:
        base = None
        if value is not None:
            base = to_decimal(value)
            if base < 0:
                return self._reject(ErrorKind.NEGATIVE_VALUE, f"Size must be non-negative: {base}")
            base = self.precision.round_size(base)
        d = self.draft
        d.source = SizeSource.BASE
        d.base_size = base
        d.quote_size = self._quote_from_base(base, d.active_price())
        d.market_price = None
        return None

    def set_quote_size(self, value: Optional[Number]) -> Optional[ValidationError]:
        quote = None
        if value is not None:
            quote = to_decimal(value)
            if quote < 0:
                return self._reject(ErrorKind.NEGATIVE_VALUE, f"Size must be non-negative: {quote}")
        d = self.draft
        d.source = SizeSource.QUOTE
        d.quote_size = quote
        d.base_size = self._base_from_quote(quote, d.active_price())
        d.market_price = None
        return None

    def change_order(
        self, size: Optional[Number] = None, price: Optional[Number] = None
    ) -> Optional[ValidationError]:
        """Apply a (size, price) pair picked from the book. Price is ignored for market orders."""
        size_dec = to_decimal(size) if size is not None else None
        price_dec = to_decimal(price) if price is not None else None
        if (size_dec is not None and size_dec < 0) or (price_dec is not None and price_dec < 0):
            return self._reject(ErrorKind.NEGATIVE_VALUE, "Size and price must be non-negative")
        if price_dec is not None and self.draft.order_type is OrderType.LIMIT:
            self.set_limit_price(price_dec)
        if size_dec is not None:
            self.set_base_size(size_dec)
        return None

    # market price and validation

    def resolve_market_price(self, book: OrderBookSnapshot) -> MarketPriceEstimate:
        """Walk `book` for the draft's side and base size; a Market draft keeps the result."""
        d = self.draft
        estimate = resolve_market_execution_price(book, d.side, d.base_size or Decimal(0))
        if d.order_type is OrderType.MARKET:
            d.market_price = estimate.price
        if not estimate.ok:
            logger.info("market price unresolved: %s", estimate.error.message)
        return estimate

    def validate(self) -> ValidationResult:
        result = validate_for_submit(self.draft)
        if not result.ok:
            logger.info("order rejected: %s", result.error.message)
        return result

    def assert_invariants(self) -> None:
        d = self.draft
        assert not d.modifiers.conflicting, "post_only and ioc both set"
        if d.order_type is OrderType.MARKET:
            assert d.modifiers == MARKET_MODIFIERS, f"market modifiers drifted: {d.modifiers}"
            assert d.limit_price is None, "market order carries a limit price"
        for name in ("limit_price", "base_size", "quote_size", "reference_price", "market_price"):
            value = getattr(d, name)
            assert value is None or value >= 0, f"negative {name}: {value}"

    # internals

    def _seed_limit_price(self) -> None:
        d = self.draft
        if d.order_type is OrderType.LIMIT and d.limit_price is None and d.reference_price > 0:
            d.limit_price = self.precision.round_price(d.reference_price)

    def _quote_from_base(self, base: Optional[Decimal], price: Decimal) -> Optional[Decimal]:
        if not base or not price:
            return None
        return self.precision.round_size(base * price)

    def _base_from_quote(self, quote: Optional[Decimal], price: Decimal) -> Optional[Decimal]:
        if not quote or not price:
            return None
        return self.precision.round_size(quote / price)

    def _synced(
        self, base: Optional[Decimal], quote: Optional[Decimal], price: Decimal
    ) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        """Re-derive the non-source field under `price` without touching the draft."""
        source = self.draft.source
        if source is SizeSource.BASE:
            return base, self._quote_from_base(base, price)
        if source is SizeSource.QUOTE:
            return self._base_from_quote(quote, price), quote
        return base, quote

    def _commit_sizes(self, base: Optional[Decimal], quote: Optional[Decimal]) -> None:
        d = self.draft
        if base != d.base_size:
            d.market_price = None
        d.base_size = base
        d.quote_size = quote

    def _reject(self, kind: ErrorKind, message: str) -> ValidationError:
        logger.debug("rejected %s: %s", kind.value, message)
        return ValidationError(kind, message)
