# ordersizing/config.py
"""Load market metadata (YAML) and order-book snapshots (CSV)."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd
import yaml

from .models import OrderBookSnapshot, PrecisionSpec
from .precision import to_decimal

BOOK_COLUMNS = ("side", "price", "quantity")


def load_markets(path: str | Path) -> Dict[str, PrecisionSpec]:
    data = _load_yaml(Path(path))
    markets = _require(data, "markets")
    if not isinstance(markets, dict):
        raise ValueError("markets must be a mapping of symbol -> precision")
    return {str(symbol): _parse_precision(symbol, payload) for symbol, payload in markets.items()}


def load_book_csv(path: str | Path) -> OrderBookSnapshot:
    # read as str so prices keep their exact decimal text
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in BOOK_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Order book CSV missing columns: {', '.join(missing)}")
    df["side"] = df["side"].str.strip().str.lower()
    unknown = set(df["side"]) - {"bid", "ask"}
    if unknown:
        raise ValueError(f"Unknown book side(s): {sorted(unknown)}")

    def levels(side: str) -> List[Tuple[Decimal, Decimal]]:
        rows = df[df["side"] == side]
        return [(to_decimal(p.strip()), to_decimal(q.strip())) for p, q in zip(rows["price"], rows["quantity"])]

    bids = sorted(levels("bid"), key=lambda lv: lv[0], reverse=True)
    asks = sorted(levels("ask"), key=lambda lv: lv[0])
    return OrderBookSnapshot.from_levels(bids=bids, asks=asks)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_precision(symbol: Any, data: Any) -> PrecisionSpec:
    if not isinstance(data, dict):
        raise ValueError(f"Invalid market entry for {symbol}")
    # YAML floats lose their text form; str() of a float keeps the short repr
    return PrecisionSpec(
        tick_size=to_decimal(str(_require(data, "tick_size"))),
        min_order_size=to_decimal(str(_require(data, "min_order_size"))),
    )
