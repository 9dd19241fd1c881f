#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Tuple

from ttt_ai.audit import audit
from ttt_ai.board import O, X, Board
from ttt_ai.search import search
from ttt_ai.tracking import log_metrics, log_params, maybe_mlflow_run

POSITIONS = {
    "empty": "000000000",
    "corner_opening": "200000000",
    "midgame": "200010002",
}


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    half = 1.96 * (s / math.sqrt(len(values)))
    return m, half


def timed(fn: Callable[[], object], repeats: int) -> List[float]:
    out: List[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        out.append(time.perf_counter() - t0)
    return out


@dataclass
class Config:
    repeats: int = 10
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = Path("runs")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Time best_move and the exhaustive audit")
    ap.add_argument("--repeats", type=int, default=Config.repeats)
    ap.add_argument("--tracking", choices=["none", "mlflow"], default=Config.tracking)
    ap.add_argument("--log-dir", type=Path, default=Config.log_dir)
    ns = ap.parse_args(argv)
    cfg = Config(repeats=ns.repeats, tracking=ns.tracking, log_dir=ns.log_dir)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    metrics = {}
    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="benchmarks", log_dir=cfg.log_dir):
        log_params({"repeats": cfg.repeats})
        for name, raw in POSITIONS.items():
            board = Board.from_string(raw)
            nodes = search(board, X, O).nodes
            m, h = ci95(timed(lambda: search(board, X, O), cfg.repeats))
            metrics[f"{name}_mean_s"] = m
            metrics[f"{name}_ci95_half_s"] = h
            metrics[f"{name}_nodes"] = float(nodes)
            logging.info("%s: mean=%.4fs ± %.4fs (95%% CI) nodes=%d", name, m, h, nodes)
        m, h = ci95(timed(lambda: audit(X, ai_first=False), max(1, cfg.repeats // 5)))
        metrics["audit_mean_s"] = m
        metrics["audit_ci95_half_s"] = h
        logging.info("audit: mean=%.4fs ± %.4fs (95%% CI)", m, h)
        log_metrics(metrics)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
