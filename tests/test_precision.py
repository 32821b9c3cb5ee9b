from __future__ import annotations

from decimal import Decimal as D

import pytest

from ordersizing.precision import decimal_places, round_to_increment, to_decimal


@pytest.mark.parametrize(
    "increment, places",
    [("0.01", 2), ("0.05", 2), ("0.5", 1), ("1", 0), ("25", 0), ("0.0001", 4), ("0.10", 1)],
)
def test_decimal_places(increment, places):
    assert decimal_places(D(increment)) == places


def test_round_half_up_to_increment():
    assert round_to_increment(D("100.07"), D("0.05")) == D("100.05")
    assert round_to_increment(D("100.025"), D("0.05")) == D("100.05")
    assert round_to_increment(D("37.5"), D("25")) == D("50")
    assert round_to_increment(D("12.4"), D("25")) == D("0")
    assert round_to_increment(D("1.2345"), D("0.001")) == D("1.235")


def test_rounded_value_carries_increment_scale():
    assert str(round_to_increment(D("3"), D("0.01"))) == "3.00"


def test_to_decimal_keeps_float_text():
    assert to_decimal(100.07) == D("100.07")
    assert to_decimal("2.5") == D("2.5")
    assert to_decimal(3) == D("3")


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "abc", True, None])
def test_to_decimal_rejects_non_numeric(bad):
    with pytest.raises(ValueError):
        to_decimal(bad)
