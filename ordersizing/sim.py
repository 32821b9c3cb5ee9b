# ordersizing/sim.py
from __future__ import annotations

import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .core import OrderSizingEngine
from .models import ErrorKind, OrderBookSnapshot, OrderType, PrecisionSpec, Side
from .precision import to_decimal

ACTIONS = (
    "side",
    "order_type",
    "modifier",
    "limit_price",
    "base_size",
    "quote_size",
    "resolve",
    "submit",
)


@dataclass(slots=True)
class SimConfig:
    seed: int = 30
    n_events: int = 50_000
    tick_size: float = 0.01
    min_order_size: float = 0.001
    mid0: float = 100.0
    sigma_ticks: float = 1.5
    book_levels: int = 10
    level_qty_mean: float = 5.0
    size_mean: float = 3.0
    p_book_update: float = 0.20
    p_side: float = 0.05
    p_order_type: float = 0.05
    p_modifier: float = 0.10
    p_limit_price: float = 0.15
    p_base_size: float = 0.25
    p_quote_size: float = 0.10
    p_resolve: float = 0.15
    p_submit: float = 0.15
    snapshot_every: int = 250
    check_invariants: bool = True

    def action_weights(self) -> np.ndarray:
        w = np.array(
            [
                self.p_side,
                self.p_order_type,
                self.p_modifier,
                self.p_limit_price,
                self.p_base_size,
                self.p_quote_size,
                self.p_resolve,
                self.p_submit,
            ],
            dtype=float,
        )
        if w.sum() <= 0:
            raise ValueError("action probabilities must sum to a positive value")
        return w / w.sum()


@dataclass(slots=True)
class SimArtifacts:
    actions: pd.DataFrame
    snapshots: pd.DataFrame
    latencies_ns: np.ndarray
    submitted: int
    rejected: int
    insufficient_depth: int


class Simulator:
    """
    Drives an OrderSizingEngine with a seeded stream of form interactions
    against a synthetic book that random-walks around mid0.
    A successful validation counts as a submit and resets the draft.
    """

    def __init__(self, cfg: SimConfig) -> None:
        self.cfg = cfg
        self.rs = np.random.RandomState(cfg.seed)
        self.precision = PrecisionSpec.of(cfg.tick_size, cfg.min_order_size)
        self.engine = OrderSizingEngine(self.precision, reference_price=cfg.mid0)
        self.mid = cfg.mid0
        self.book = self._synthetic_book(self.mid)
        self._weights = cfg.action_weights()
        self._handlers: Dict[str, Callable[[], Optional[ErrorKind]]] = {
            "side": self._do_side,
            "order_type": self._do_order_type,
            "modifier": self._do_modifier,
            "limit_price": self._do_limit_price,
            "base_size": self._do_base_size,
            "quote_size": self._do_quote_size,
            "resolve": self._do_resolve,
            "submit": self._do_submit,
        }
        self.submitted = 0
        self.rejected = 0
        self.insufficient_depth = 0

    def _gen_size(self) -> float:
        return float(self.rs.lognormal(mean=math.log(self.cfg.size_mean), sigma=0.75))

    def _price_near_mid(self) -> float:
        ticks = self.rs.normal(loc=0.0, scale=self.cfg.sigma_ticks * 2)
        return max(self.cfg.tick_size, self.mid + ticks * self.cfg.tick_size)

    def _synthetic_book(self, mid: float) -> OrderBookSnapshot:
        tick = self.cfg.tick_size
        decimals = self.precision.price_decimals
        bids: List[Tuple[float, float]] = []
        asks: List[Tuple[float, float]] = []
        for d in range(1, self.cfg.book_levels + 1):
            qty = round(float(self.rs.lognormal(mean=math.log(self.cfg.level_qty_mean), sigma=0.5)), 3)
            bid_px = round(mid - d * tick, decimals)
            if bid_px > 0:
                bids.append((bid_px, qty))
            qty = round(float(self.rs.lognormal(mean=math.log(self.cfg.level_qty_mean), sigma=0.5)), 3)
            asks.append((round(mid + d * tick, decimals), qty))
        return OrderBookSnapshot.from_levels(bids=bids, asks=asks)

    def _update_market(self) -> None:
        floor = (self.cfg.book_levels + 1) * self.cfg.tick_size
        self.mid = max(floor, self.mid + self.rs.normal(0.0, self.cfg.sigma_ticks) * self.cfg.tick_size)
        self.book = self._synthetic_book(self.mid)
        self.engine.set_reference_price(to_decimal(round(self.mid, self.precision.price_decimals)))

    def _do_side(self) -> Optional[ErrorKind]:
        self.engine.set_side(Side.BUY if self.rs.rand() < 0.5 else Side.SELL)
        return None

    def _do_order_type(self) -> Optional[ErrorKind]:
        order_type = OrderType.MARKET if self.rs.rand() < 0.5 else OrderType.LIMIT
        self.engine.set_order_type(order_type, book=self.book)
        return None

    def _do_modifier(self) -> Optional[ErrorKind]:
        enabled = bool(self.rs.rand() < 0.5)
        if self.rs.rand() < 0.5:
            err = self.engine.set_post_only(enabled)
        else:
            err = self.engine.set_immediate_or_cancel(enabled)
        return err.kind if err else None

    def _do_limit_price(self) -> Optional[ErrorKind]:
        err = self.engine.set_limit_price(self._price_near_mid())
        return err.kind if err else None

    def _do_base_size(self) -> Optional[ErrorKind]:
        err = self.engine.set_base_size(self._gen_size())
        return err.kind if err else None

    def _do_quote_size(self) -> Optional[ErrorKind]:
        err = self.engine.set_quote_size(self._gen_size() * self.mid)
        return err.kind if err else None

    def _do_resolve(self) -> Optional[ErrorKind]:
        est = self.engine.resolve_market_price(self.book)
        if est.ok:
            return None
        if est.error.kind is ErrorKind.INSUFFICIENT_DEPTH:
            self.insufficient_depth += 1
        return est.error.kind

    def _do_submit(self) -> Optional[ErrorKind]:
        result = self.engine.validate()
        if not result.ok:
            self.rejected += 1
            return result.error.kind
        self.submitted += 1
        self.engine.reset()
        return None

    def run(self) -> SimArtifacts:
        cfg = self.cfg
        rs = self.rs
        latencies: List[int] = []
        actions: List[Tuple[int, str, bool, str]] = []
        snaps: List[Tuple] = []

        for i in range(cfg.n_events):
            if rs.rand() < cfg.p_book_update:
                self._update_market()

            action = ACTIONS[int(rs.choice(len(ACTIONS), p=self._weights))]
            handler = self._handlers[action]
            t0 = time.perf_counter_ns()
            kind = handler()
            dt = time.perf_counter_ns() - t0
            latencies.append(dt)
            actions.append((i + 1, action, kind is None, kind.value if kind else ""))

            if cfg.check_invariants:
                self.engine.assert_invariants()

            if (i + 1) % cfg.snapshot_every == 0:
                snaps.append(self._snapshot(i + 1))

        actions_df = pd.DataFrame(actions, columns=["event", "action", "accepted", "error"])
        snap_df = pd.DataFrame(
            snaps,
            columns=[
                "event",
                "side",
                "order_type",
                "reference_price",
                "limit_price",
                "base_size",
                "quote_size",
                "valid",
            ],
        )
        return SimArtifacts(
            actions=actions_df,
            snapshots=snap_df,
            latencies_ns=np.array(latencies, dtype=np.int64),
            submitted=self.submitted,
            rejected=self.rejected,
            insufficient_depth=self.insufficient_depth,
        )

    def _snapshot(self, event: int) -> Tuple:
        d = self.engine.draft

        def f(value) -> float:
            return float(value) if value is not None else np.nan

        valid = self.engine.validate().ok
        return (
            event,
            d.side.value,
            d.order_type.value,
            f(d.reference_price),
            f(d.limit_price),
            f(d.base_size),
            f(d.quote_size),
            valid,
        )


def save_artifacts(art: SimArtifacts, out_dir: str) -> Dict[str, str]:
    ts = pd.Timestamp.utcnow().strftime("%Y%m%d_%H%M%S")
    base = Path(out_dir)
    (base / "figures").mkdir(parents=True, exist_ok=True)
    files = {}
    actions_path = base / f"actions_{ts}.csv"
    art.actions.to_csv(actions_path, index=False)
    files["actions_csv"] = str(actions_path)

    snaps_path = base / f"snapshots_{ts}.csv"
    art.snapshots.to_csv(snaps_path, index=False)
    files["snapshots_csv"] = str(snaps_path)

    lat_path = base / f"latencies_{ts}.csv"
    pd.DataFrame({"latency_ns": art.latencies_ns}).to_csv(lat_path, index=False)
    files["latencies_csv"] = str(lat_path)

    return files
