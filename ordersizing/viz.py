# ordersizing/viz.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_execution_curve(curve: pd.DataFrame, out_dir: str, label: str = "") -> Dict[str, str]:
    paths: Dict[str, str] = {}
    figdir = Path(out_dir) / "figures"
    figdir.mkdir(parents=True, exist_ok=True)
    filled = curve[curve["ok"]]
    suffix = f" ({label})" if label else ""

    plt.figure()
    plt.plot(filled["size"], filled["price"], marker=".")
    plt.title(f"Estimated Execution Price{suffix}")
    plt.xlabel("size (base)")
    plt.ylabel("price")
    p = figdir / "execution_price.png"
    plt.tight_layout()
    plt.savefig(p)
    plt.close()
    paths["execution_price_png"] = str(p)

    plt.figure()
    plt.plot(filled["size"], filled["slippage_bps"], marker=".")
    plt.title(f"Slippage vs Best Level{suffix}")
    plt.xlabel("size (base)")
    plt.ylabel("bps")
    p = figdir / "slippage.png"
    plt.tight_layout()
    plt.savefig(p)
    plt.close()
    paths["slippage_png"] = str(p)

    return paths


def plot_latency_hist(latencies_ns: np.ndarray, out_dir: str) -> str:
    figdir = Path(out_dir) / "figures"
    figdir.mkdir(parents=True, exist_ok=True)
    plt.figure()
    us = latencies_ns / 1_000.0
    plt.hist(us, bins=50)
    plt.title("Engine Call Latency Histogram (μs)")
    plt.xlabel("latency (μs)")
    plt.ylabel("count")
    p = figdir / "latency_hist.png"
    plt.tight_layout()
    plt.savefig(p)
    plt.close()
    return str(p)
