from __future__ import annotations

from decimal import Decimal as D

import pytest

from ordersizing.book import best_opposite_price, resolve_market_execution_price
from ordersizing.models import ErrorKind, OrderBookSnapshot, Side


def test_sell_walks_bids_with_partial_last_level():
    book = OrderBookSnapshot.from_levels(bids=[(100, 2), (99, 3)])
    est = resolve_market_execution_price(book, Side.SELL, 4)
    assert est.ok
    assert est.price == D("99.5")
    assert est.filled == D("4")
    assert est.levels_consumed == 2


def test_buy_walks_asks_and_ignores_bids():
    book = OrderBookSnapshot.from_levels(bids=[(99, 100)], asks=[("100.5", 1), ("101", 1), ("110", 5)])
    est = resolve_market_execution_price(book, Side.BUY, 2)
    assert est.price == D("100.75")
    assert est.levels_consumed == 2


def test_exact_fill_of_first_level():
    book = OrderBookSnapshot.from_levels(asks=[(100, 2), (200, 2)])
    est = resolve_market_execution_price(book, Side.BUY, 2)
    assert est.price == D("100")
    assert est.levels_consumed == 1


def test_insufficient_depth():
    book = OrderBookSnapshot.from_levels(asks=[(100, 1)])
    est = resolve_market_execution_price(book, Side.BUY, 5)
    assert not est.ok
    assert est.error.kind is ErrorKind.INSUFFICIENT_DEPTH
    assert est.price is None
    assert est.filled == D("1")


def test_empty_side_is_insufficient_depth():
    book = OrderBookSnapshot.from_levels(asks=[(100, 10)])
    est = resolve_market_execution_price(book, Side.SELL, 1)
    assert est.error.kind is ErrorKind.INSUFFICIENT_DEPTH
    assert est.filled == D("0")


def test_zero_quantity_levels_are_skipped():
    book = OrderBookSnapshot.from_levels(asks=[(100, 0), (101, 3)])
    est = resolve_market_execution_price(book, Side.BUY, 3)
    assert est.price == D("101")
    assert est.levels_consumed == 1


def test_non_positive_target_is_missing_size():
    book = OrderBookSnapshot.from_levels(asks=[(100, 10)])
    est = resolve_market_execution_price(book, Side.BUY, 0)
    assert est.error.kind is ErrorKind.MISSING_SIZE


def test_best_opposite_price():
    book = OrderBookSnapshot.from_levels(bids=[(99, 1)], asks=[(101, 1)])
    assert best_opposite_price(book, Side.BUY) == D("101")
    assert best_opposite_price(book, Side.SELL) == D("99")
    assert best_opposite_price(OrderBookSnapshot(), Side.BUY) is None
    assert best_opposite_price(None, Side.SELL) is None


def test_snapshot_rejects_unsorted_levels():
    with pytest.raises(ValueError):
        OrderBookSnapshot.from_levels(bids=[(99, 1), (100, 1)])
    with pytest.raises(ValueError):
        OrderBookSnapshot.from_levels(asks=[(101, 1), (100, 1)])
    with pytest.raises(ValueError):
        OrderBookSnapshot.from_levels(asks=[(-1, 1)])


def test_total_depth_reads_opposite_side():
    book = OrderBookSnapshot.from_levels(bids=[(99, 1), (98, 2)], asks=[(101, "0.5")])
    assert book.total_depth(Side.SELL) == D("3")
    assert book.total_depth(Side.BUY) == D("0.5")
