"""
Policy export: the engine's decision for every reachable position where
the AI is to move.

Rows carry the board, the chosen move, its score and the exact score of
every legal move. CSV is always available; Parquet needs pandas+pyarrow.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .board import O, SYMBOLS, X, Board, other
from .config import get_git_commit
from .search import score_moves
from .tracking import log_artifact, log_params

EXPORT_VERSION = "1.0.0"
# marks an illegal move in the score matrix
NO_SCORE = -99


@dataclass
class ExportArgs:
    out: Path
    ai_mark: int = X
    first: int = O
    format: str = "csv"  # one of: "csv", "parquet", "both"


def reachable_boards(first: int = O) -> List[Board]:
    """Every position reachable from the empty board, in breadth-first order."""
    start = Board()
    seen = {start.serialize()}
    order: List[Board] = []
    q = deque([start])
    while q:
        b = q.popleft()
        order.append(b)
        if b.is_terminal():
            continue
        mark = b.to_move(first)
        for i in b.empty_indices():
            child = b.copy()
            child.place(i, mark)
            key = child.serialize()
            if key not in seen:
                seen.add(key)
                q.append(child)
    return order


def build_policy(ai_mark: int = X, first: int = O) -> tuple[List[str], np.ndarray]:
    """Board keys where the AI moves, and a (n, 9) matrix of move scores."""
    human_mark = other(ai_mark)
    keys: List[str] = []
    rows: List[List[int]] = []
    for b in reachable_boards(first):
        if b.is_terminal() or b.to_move(first) != ai_mark:
            continue
        scores = score_moves(b, ai_mark, human_mark)
        keys.append(b.serialize())
        rows.append([scores.get(i, NO_SCORE) for i in range(9)])
    matrix = np.array(rows, dtype=np.int64).reshape(-1, 9)
    order = np.argsort(np.array(keys), kind="stable")
    return [keys[i] for i in order], matrix[order]


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        mod = __import__(pkg)
        ver = getattr(mod, "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def run_export(args: ExportArgs) -> Path:
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    have_parquet = (importlib.util.find_spec('pandas') is not None
                    and importlib.util.find_spec('pyarrow') is not None)
    msg = ("Parquet dependencies not available (install pandas and pyarrow). "
           "Use pip install .[parquet] to enable parquet support.")
    if fmt == "parquet" and not have_parquet:
        # fail before writing anything
        raise RuntimeError(msg)
    args.out.mkdir(parents=True, exist_ok=True)

    logging.info("Scoring every reachable position with %s to move…", SYMBOLS[args.ai_mark])
    keys, matrix = build_policy(args.ai_mark, args.first)
    legal = matrix != NO_SCORE
    best_scores = np.where(legal, matrix, np.iinfo(np.int64).min).max(axis=1)
    # argmax returns the first maximum: the lowest index wins ties, as in search
    best_moves = np.where(legal, matrix, np.iinfo(np.int64).min).argmax(axis=1)
    optimal_counts = ((matrix == best_scores[:, None]) & legal).sum(axis=1)
    logging.info("Scored %d positions", len(keys))

    rows: List[Dict[str, Any]] = []
    for n, key in enumerate(keys):
        rows.append({
            "board_state": key,
            "ai_mark": SYMBOLS[args.ai_mark],
            "best_move": int(best_moves[n]),
            "score": int(best_scores[n]),
            "optimal_moves": int(optimal_counts[n]),
            "move_scores": " ".join(
                f"{i}:{int(matrix[n, i])}" for i in range(9) if legal[n, i]
            ),
        })

    policy_csv = args.out / "ttt_ai_policy.csv"
    policy_parquet = args.out / "ttt_ai_policy.parquet"
    wrote_csv = False
    wrote_parquet = False
    fieldnames = ["board_state", "ai_mark", "best_move", "score", "optimal_moves", "move_scores"]

    if fmt in {"csv", "both"}:
        with policy_csv.open('w', newline='') as f:
            w = csv.DictWriter(f, fieldnames=fieldnames)
            w.writeheader()
            w.writerows(rows)
        wrote_csv = True
        logging.info("Wrote CSV: %s (%d rows)", policy_csv, len(rows))

    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd  # type: ignore

            pd.DataFrame(rows, columns=fieldnames).to_parquet(policy_parquet)
            wrote_parquet = True
            logging.info("Wrote Parquet: %s", policy_parquet)
        else:
            logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.", msg)

    files: Dict[str, Optional[str]] = {
        "policy_csv": str(policy_csv) if wrote_csv else None,
        "policy_parquet": str(policy_parquet) if wrote_parquet else None,
    }
    values, counts = np.unique(best_scores, return_counts=True)
    manifest = {
        "export_version": EXPORT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "ai_mark": SYMBOLS[args.ai_mark],
            "first": SYMBOLS[args.first],
            "format": fmt,
        },
        "git_commit": get_git_commit(),
        "python": {
            "python_version": sys.version.split(" ")[0],
            "packages": _package_versions(),
        },
        "row_counts": {"policy": len(rows)},
        "score_distribution": {str(int(v)): int(c) for v, c in zip(values, counts)},
        "files": files,
        "checksums": {k: _sha256_file(Path(p)) for k, p in files.items() if p is not None},
        "parquet_written": wrote_parquet,
    }
    manifest_path = args.out / "manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json")

    log_params({"ai_mark": SYMBOLS[args.ai_mark], "first": SYMBOLS[args.first],
                "format": fmt, "rows_policy": len(rows)})
    log_artifact(manifest_path)
    for p in files.values():
        if p is not None:
            log_artifact(Path(p))
    return args.out
