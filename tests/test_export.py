import csv
import json
from pathlib import Path

import pytest

from ttt_ai.board import O, X, Board
from ttt_ai.export import ExportArgs, reachable_boards, run_export
from ttt_ai.search import best_move


def _hide_parquet_deps(monkeypatch: pytest.MonkeyPatch) -> None:
    import importlib

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)


def test_reachable_boards_count():
    boards = reachable_boards(X)
    keys = {b.serialize() for b in boards}
    # all positions reachable with X opening, terminal ones included
    assert len(boards) == len(keys) == 5478
    assert boards[0].serialize() == "000000000"


@pytest.fixture(scope="module")
def csv_export(tmp_path_factory):
    out = tmp_path_factory.mktemp("policy")
    return run_export(ExportArgs(out=out, ai_mark=X, first=O))


def test_csv_export_rows_and_manifest(csv_export: Path):
    policy = csv_export / "ttt_ai_policy.csv"
    assert policy.exists()
    with policy.open() as f:
        rows = list(csv.DictReader(f))
    manifest = json.loads((csv_export / "manifest.json").read_text())
    assert manifest["row_counts"]["policy"] == len(rows) > 0
    assert manifest["parquet_written"] is False
    assert manifest["files"]["policy_parquet"] is None
    assert set(manifest["checksums"]) == {"policy_csv"}
    assert sum(manifest["score_distribution"].values()) == len(rows)
    keys = [r["board_state"] for r in rows]
    assert keys == sorted(keys)

    by_key = {r["board_state"]: r for r in rows}
    corner = by_key["200000000"]
    assert corner["best_move"] == "4"
    assert corner["score"] == "0"
    assert corner["optimal_moves"] == "1"


def test_csv_export_agrees_with_engine(csv_export: Path):
    with (csv_export / "ttt_ai_policy.csv").open() as f:
        rows = list(csv.DictReader(f))
    for r in rows[::97]:
        b = Board.from_string(r["board_state"])
        assert b.to_move(O) == X
        assert int(r["best_move"]) == best_move(b, X, O)


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = run_export(ExportArgs(out=tmp_path / "both", ai_mark=O, first=O, format="both"))
    assert (out / "ttt_ai_policy.csv").exists()
    assert not (out / "ttt_ai_policy.parquet").exists()
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["parquet_written"] is False


def test_format_parquet_raises_without_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = tmp_path / "parquet_only"
    with pytest.raises(RuntimeError):
        run_export(ExportArgs(out=out, format="parquet"))
    assert not out.exists()


def test_unknown_format_rejected(tmp_path: Path):
    with pytest.raises(ValueError):
        run_export(ExportArgs(out=tmp_path / "x", format="xlsx"))
