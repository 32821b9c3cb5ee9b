from __future__ import annotations

from decimal import Decimal as D

from ordersizing.core import OrderSizingEngine
from ordersizing.models import ErrorKind, ExecutionType, OrderType, PrecisionSpec
from ordersizing.submit import TransportError, place_order


class RecordingTransport:
    def __init__(self, fail: str = "") -> None:
        self.fail = fail
        self.orders = []

    def submit(self, order):
        if self.fail:
            raise TransportError(self.fail)
        self.orders.append(order)
        return f"venue-{len(self.orders)}"


def make_engine() -> OrderSizingEngine:
    return OrderSizingEngine(PrecisionSpec.of("0.01", "0.001"), reference_price="100")


def test_place_order_submits_and_resets():
    eng = make_engine()
    eng.set_immediate_or_cancel(True)
    eng.set_base_size(2)
    transport = RecordingTransport()
    outcome = place_order(eng, transport)
    assert outcome.success
    assert outcome.reference == "venue-1"
    assert transport.orders[0].execution_type is ExecutionType.IOC
    assert transport.orders[0].effective_price == D("100")
    assert eng.draft.base_size is None
    assert eng.draft.limit_price == D("100")


def test_place_order_blocks_invalid_draft():
    eng = make_engine()
    eng.set_order_type(OrderType.MARKET)
    eng.set_base_size(1)
    transport = RecordingTransport()
    outcome = place_order(eng, transport)
    assert not outcome.success
    assert outcome.validation.kind is ErrorKind.PRICE_NOT_RESOLVED
    assert transport.orders == []


def test_transport_error_keeps_draft():
    eng = make_engine()
    eng.set_base_size(2)
    outcome = place_order(eng, RecordingTransport(fail="insufficient balance"))
    assert not outcome.success
    assert outcome.error == "insufficient balance"
    assert outcome.order is not None
    assert eng.draft.base_size == D("2")
