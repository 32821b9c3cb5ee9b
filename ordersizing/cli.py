# ordersizing/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from .config import load_book_csv, load_markets
from .core import OrderSizingEngine
from .metrics import execution_price_curve, summarize_latency_ns
from .models import OrderType, Side
from .sim import SimArtifacts, SimConfig, Simulator, save_artifacts
from .viz import plot_execution_curve, plot_latency_hist

logger = logging.getLogger("ordersizing")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def run_quote(args: argparse.Namespace) -> None:
    markets = load_markets(args.markets)
    if args.symbol not in markets:
        raise SystemExit(f"unknown symbol {args.symbol!r}; known: {', '.join(sorted(markets))}")
    book = load_book_csv(args.book)
    side = Side(args.side)

    engine = OrderSizingEngine(markets[args.symbol])
    engine.set_side(side)
    engine.set_order_type(OrderType.MARKET, book=book)
    engine.set_base_size(args.size)
    estimate = engine.resolve_market_price(book)
    result = engine.validate()

    out = {
        "symbol": args.symbol,
        "side": side.value,
        "requested": str(estimate.requested),
        "filled": str(estimate.filled),
        "price": str(estimate.price) if estimate.price is not None else None,
        "levels_consumed": estimate.levels_consumed,
        "error": estimate.error.kind.value if estimate.error else None,
        "submittable": result.ok,
    }
    if result.ok:
        out["execution_type"] = result.order.execution_type.value

    if args.curve > 0:
        top = float(book.total_depth(side))
        sizes = np.linspace(top / args.curve, top, args.curve) if top > 0 else []
        curve = execution_price_curve(book, side, sizes)
        out_dir = Path(args.report)
        out_dir.mkdir(parents=True, exist_ok=True)
        csv = out_dir / "execution_curve.csv"
        curve.to_csv(csv, index=False)
        out["curve_csv"] = str(csv)
        out["figures"] = plot_execution_curve(curve, args.report, label=f"{args.symbol} {side.value}")

    print(json.dumps(out, indent=2))


def run_sim(args: argparse.Namespace) -> None:
    cfg = SimConfig(
        seed=args.seed,
        n_events=args.n_events,
        tick_size=args.tick,
        min_order_size=args.min_size,
        mid0=args.mid,
        sigma_ticks=args.sigma_ticks,
        book_levels=args.levels,
        level_qty_mean=args.level_qty,
        size_mean=args.size_mean,
        p_book_update=args.p_book_update,
        snapshot_every=args.snapshot_every,
    )
    sim = Simulator(cfg)
    art: SimArtifacts = sim.run()
    out_dir = args.report
    paths = save_artifacts(art, out_dir)
    lat_png = plot_latency_hist(art.latencies_ns, out_dir)
    summary = summarize_latency_ns(art.latencies_ns)
    counts = {
        "submitted": art.submitted,
        "rejected": art.rejected,
        "insufficient_depth": art.insufficient_depth,
    }
    logger.info("simulation finished: %s", counts)
    print(json.dumps({"saved": {**paths, "latency_hist": lat_png}, "counts": counts, "latency_summary": summary}, indent=2))


def run_bench(args: argparse.Namespace) -> None:
    cfg = SimConfig(
        seed=args.seed,
        n_events=args.n_events,
        snapshot_every=max(args.n_events // 50, 1),
        check_invariants=False,
    )
    sim = Simulator(cfg)
    art = sim.run()
    out_dir = args.report
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    lat_png = plot_latency_hist(art.latencies_ns, out_dir)
    summary = summarize_latency_ns(art.latencies_ns)
    df = pd.DataFrame([summary])
    csv = Path(out_dir) / "benchmark_summary.csv"
    df.to_csv(csv, index=False)
    print(json.dumps({"benchmark": summary, "latency_hist": lat_png, "csv": str(csv)}, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(prog="ordersizing", description="Order sizing and market price engine CLI")
    parser.add_argument("--log-level", type=str, default="INFO")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_quote = sub.add_parser("quote", help="Estimate a market order's execution price from a book CSV")
    p_quote.add_argument("--book", type=str, required=True, help="CSV with side,price,quantity (side: bid|ask)")
    p_quote.add_argument("--markets", type=str, default="data/markets.yaml")
    p_quote.add_argument("--symbol", type=str, required=True)
    p_quote.add_argument("--side", type=str, choices=[s.value for s in Side], default="buy")
    p_quote.add_argument("--size", type=str, required=True)
    p_quote.add_argument("--curve", type=int, default=0, help="Also compute an execution curve with N points")
    p_quote.add_argument("--report", type=str, default="results")
    p_quote.set_defaults(func=run_quote)

    p_sim = sub.add_parser("sim", help="Run interaction simulation and save artifacts")
    p_sim.add_argument("--seed", type=int, default=30)
    p_sim.add_argument("--n-events", type=int, default=50_000)
    p_sim.add_argument("--tick", type=float, default=0.01)
    p_sim.add_argument("--min-size", type=float, default=0.001)
    p_sim.add_argument("--mid", type=float, default=100.0)
    p_sim.add_argument("--sigma-ticks", type=float, default=1.5)
    p_sim.add_argument("--levels", type=int, default=10)
    p_sim.add_argument("--level-qty", type=float, default=5.0)
    p_sim.add_argument("--size-mean", type=float, default=3.0)
    p_sim.add_argument("--p-book-update", type=float, default=0.20)
    p_sim.add_argument("--snapshot-every", type=int, default=250)
    p_sim.add_argument("--report", type=str, default="results")
    p_sim.set_defaults(func=run_sim)

    p_bench = sub.add_parser("bench", help="Run microbenchmark")
    p_bench.add_argument("--seed", type=int, default=30)
    p_bench.add_argument("--n-events", type=int, default=200_000)
    p_bench.add_argument("--report", type=str, default="results")
    p_bench.set_defaults(func=run_bench)

    args = parser.parse_args()
    _setup_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
