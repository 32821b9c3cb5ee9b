from __future__ import annotations

from decimal import Decimal as D

import hypothesis.strategies as st
from hypothesis import given, settings

from ordersizing.book import resolve_market_execution_price
from ordersizing.core import OrderSizingEngine
from ordersizing.models import Modifiers, OrderBookSnapshot, OrderType, PrecisionSpec, Side

PRECISION = PrecisionSpec.of("0.01", "0.001")

prices = st.decimals(min_value=D("1"), max_value=D("100000"), places=2, allow_nan=False, allow_infinity=False)
sizes = st.decimals(min_value=D("0.001"), max_value=D("1000"), places=3, allow_nan=False, allow_infinity=False)


@st.composite
def form_actions(draw):
    kind = draw(st.sampled_from(["post_only", "ioc", "market", "limit", "side", "price", "base", "quote"]))
    if kind in ("post_only", "ioc"):
        return kind, draw(st.booleans())
    if kind == "side":
        return kind, draw(st.sampled_from([Side.BUY, Side.SELL]))
    if kind == "price":
        return kind, draw(prices)
    if kind in ("base", "quote"):
        return kind, draw(sizes)
    return kind, None


def apply(eng: OrderSizingEngine, action) -> None:
    kind, value = action
    if kind == "post_only":
        eng.set_post_only(value)
    elif kind == "ioc":
        eng.set_immediate_or_cancel(value)
    elif kind == "market":
        eng.set_order_type(OrderType.MARKET)
    elif kind == "limit":
        eng.set_order_type(OrderType.LIMIT)
    elif kind == "side":
        eng.set_side(value)
    elif kind == "price":
        eng.set_limit_price(value)
    elif kind == "base":
        eng.set_base_size(value)
    else:
        eng.set_quote_size(value)


@given(st.lists(form_actions(), min_size=1, max_size=60))
@settings(deadline=None, max_examples=100)
def test_modifiers_never_both_set(seq):
    eng = OrderSizingEngine(PRECISION, reference_price="100")
    for action in seq:
        apply(eng, action)
        assert not (eng.draft.modifiers.post_only and eng.draft.modifiers.ioc)
        eng.assert_invariants()


@given(st.lists(form_actions(), max_size=40))
@settings(deadline=None, max_examples=100)
def test_market_type_invariant_after_any_history(seq):
    eng = OrderSizingEngine(PRECISION, reference_price="100")
    for action in seq:
        apply(eng, action)
    eng.set_order_type(OrderType.MARKET)
    assert eng.draft.modifiers == Modifiers(post_only=False, ioc=True)
    assert eng.draft.limit_price is None


@given(sizes, prices)
@settings(deadline=None, max_examples=200)
def test_base_quote_round_trip_within_one_size_unit(base, price):
    eng = OrderSizingEngine(PRECISION)
    eng.set_limit_price(price)
    eng.set_base_size(base)
    quote = eng.draft.quote_size
    assert quote is not None
    eng.set_quote_size(quote)
    assert abs(eng.draft.base_size - base) <= PRECISION.min_order_size


@st.composite
def asks_and_target(draw):
    raw_prices = draw(st.lists(prices, min_size=1, max_size=15, unique=True))
    qtys = draw(st.lists(sizes, min_size=len(raw_prices), max_size=len(raw_prices)))
    levels = list(zip(sorted(raw_prices), qtys))
    total = sum(q for _, q in levels)
    target = draw(st.decimals(min_value=D("0.001"), max_value=total, places=3))
    return levels, target


@given(asks_and_target())
@settings(deadline=None, max_examples=100)
def test_book_walk_price_is_bounded_by_consumed_levels(case):
    levels, target = case
    book = OrderBookSnapshot.from_levels(asks=levels)
    est = resolve_market_execution_price(book, Side.BUY, target)
    assert est.ok
    assert est.filled == target
    consumed = levels[: est.levels_consumed]
    assert consumed[0][0] <= est.price <= consumed[-1][0]
