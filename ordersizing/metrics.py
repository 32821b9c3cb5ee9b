# ordersizing/metrics.py
from __future__ import annotations

from typing import Dict, Iterable

import numpy as np
import pandas as pd

from .book import best_opposite_price, resolve_market_execution_price
from .models import OrderBookSnapshot, Side
from .precision import Number

CURVE_COLUMNS = ["size", "price", "filled", "ok", "slippage_bps"]


def execution_price_curve(book: OrderBookSnapshot, side: Side, sizes: Iterable[Number]) -> pd.DataFrame:
    """
    Book-walk estimate for each requested size.
    slippage_bps is measured against the best opposite level and is positive when the fill is worse.
    Sizes the book cannot fill get NaN price/slippage and ok=False.
    """
    best = best_opposite_price(book, side)
    direction = 1.0 if side is Side.BUY else -1.0
    rows = []
    for size in sizes:
        est = resolve_market_execution_price(book, side, size)
        price = float(est.price) if est.ok else np.nan
        slippage = np.nan
        if est.ok and best:
            slippage = direction * (price - float(best)) / float(best) * 1e4
        rows.append(
            {
                "size": float(est.requested),
                "price": price,
                "filled": float(est.filled),
                "ok": est.ok,
                "slippage_bps": slippage,
            }
        )
    return pd.DataFrame(rows, columns=CURVE_COLUMNS)


def summarize_latency_ns(latencies: np.ndarray) -> Dict[str, float]:
    if latencies.size == 0:
        return {"p50_ns": 0.0, "p90_ns": 0.0, "p99_ns": 0.0, "ops_per_sec": 0.0}
    p50 = float(np.percentile(latencies, 50))
    p90 = float(np.percentile(latencies, 90))
    p99 = float(np.percentile(latencies, 99))
    mean_ns = float(latencies.mean())
    ops = 1e9 / mean_ns if mean_ns > 0 else 0.0
    return {"p50_ns": p50, "p90_ns": p90, "p99_ns": p99, "ops_per_sec": ops}
