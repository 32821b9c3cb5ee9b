from __future__ import annotations

from decimal import Decimal as D

import pytest

from ordersizing.config import load_book_csv, load_markets
from ordersizing.models import Side


def test_load_markets(tmp_path):
    path = tmp_path / "markets.yaml"
    path.write_text(
        "markets:\n"
        "  BTC/USDC: {tick_size: '0.5', min_order_size: 0.0001}\n"
        "  SOL/USDC: {tick_size: 0.001, min_order_size: 0.1}\n",
        encoding="utf-8",
    )
    markets = load_markets(path)
    assert set(markets) == {"BTC/USDC", "SOL/USDC"}
    assert markets["BTC/USDC"].tick_size == D("0.5")
    assert markets["BTC/USDC"].size_decimals == 4
    assert markets["SOL/USDC"].price_decimals == 3


def test_load_markets_requires_keys(tmp_path):
    path = tmp_path / "markets.yaml"
    path.write_text("markets:\n  X: {tick_size: 1}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="min_order_size"):
        load_markets(path)

    path.write_text("- not a mapping\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_markets(path)


def test_load_book_csv_sorts_levels(tmp_path):
    path = tmp_path / "book.csv"
    path.write_text(
        "side,price,quantity\n"
        "bid,99,3\n"
        "ask,101.5,1\n"
        "BID,100,2\n"
        "ask,101,0.25\n",
        encoding="utf-8",
    )
    book = load_book_csv(path)
    assert [lv.price for lv in book.bids] == [D("100"), D("99")]
    assert [lv.price for lv in book.asks] == [D("101"), D("101.5")]
    assert book.total_depth(Side.BUY) == D("1.25")


def test_load_book_csv_rejects_bad_input(tmp_path):
    path = tmp_path / "book.csv"
    path.write_text("side,price\nbid,99\n", encoding="utf-8")
    with pytest.raises(ValueError, match="quantity"):
        load_book_csv(path)

    path.write_text("side,price,quantity\nmid,99,1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="side"):
        load_book_csv(path)
