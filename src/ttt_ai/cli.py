from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Callable

from .audit import audit
from .board import SYMBOLS, Board, other, parse_mark
from .config import data_dir, think_delay
from .export import ExportArgs, run_export
from .game import GameSession
from .search import pick_best, score_moves
from .tracking import log_metrics, log_params, maybe_mlflow_run


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt-ai", description="Unbeatable tic-tac-toe opponent")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )

    p_play = sub.add_parser("play", help="Play against the AI in the terminal")
    p_play.add_argument("--human-mark", default="O", help="Your mark, X or O (default: O)")
    p_play.add_argument("--ai-first", action="store_true", help="Let the AI open the game")
    p_play.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds the AI 'thinks' before replying (default: $TTT_AI_THINK_DELAY or 0.6)",
    )

    p_best = sub.add_parser(
        "best-move",
        help="Best move for the side to move (board: 9 digits, 0=empty,1=X,2=O)",
    )
    p_best.add_argument("--board", required=True, help="Board string, e.g., 200010000")
    p_best.add_argument("--first", default="O", help="Mark that opened the game (default: O)")
    p_best.add_argument("--mark", default=None, help="Search for this mark (default: side to move)")

    p_audit = sub.add_parser("audit", help="Play the AI against every possible opponent")
    p_audit.add_argument("--ai-mark", default="X", help="AI mark, X or O (default: X)")
    p_audit.add_argument("--ai-first", action="store_true", help="AI opens every game")
    p_audit.add_argument("--export", action="store_true", help="Also export the policy table")
    p_audit.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Export directory (default: $TTT_AI_DATA_DIR or <repo>/data)",
    )
    p_audit.add_argument(
        "--format",
        choices=["csv", "parquet", "both"],
        default="csv",
        help="Export format: csv (default), parquet, both",
    )
    p_audit.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p_audit.add_argument(
        "--log-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for tracking logs/artifacts (for mlflow local backend)",
    )
    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def run_terminal_game(
    session: GameSession,
    delay: float,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> str | None:
    """Drive one session from text input. Returns the outcome, or None if the player quit."""
    while True:
        write(session.board.render())
        write(session.status)
        if session.ai_to_move:
            if delay > 0:
                time.sleep(delay)
            session.ai_move()
            continue
        if not session.active:
            return session.outcome
        # rejected input re-prompts without redrawing the board
        while True:
            try:
                raw = read("cell (0-8), r=reset, q=quit> ").strip().lower()
            except EOFError:
                return None
            if raw == "q":
                return None
            if raw == "r":
                session.reset()
                break
            if raw.isdigit() and session.human_move(int(raw)):
                break
            write(f"Cannot play {raw!r}; pick an empty cell 0-8.")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        from importlib.metadata import PackageNotFoundError, version as _ver

        try:
            print(_ver("ttt-ai"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    if ns.cmd == "play":
        try:
            human = parse_mark(ns.human_mark)
            delay = ns.delay if ns.delay is not None else think_delay()
        except ValueError as e:
            logging.error("%s", e)
            return 2
        if delay < 0:
            logging.error("Delay must be >= 0: %s", delay)
            return 2
        session = GameSession(human_mark=human, ai_first=ns.ai_first)
        outcome = run_terminal_game(session, delay)
        logging.debug("play finished outcome=%s", outcome)
        return 0

    if ns.cmd == "best-move":
        try:
            board = Board.from_string(ns.board)
            first = parse_mark(ns.first)
            mark = parse_mark(ns.mark) if ns.mark else board.to_move(first)
        except ValueError as e:
            logging.error("%s", e)
            return 2
        if not board.is_reachable(first):
            logging.error("Board is not a valid reachable state.")
            return 2
        scores = score_moves(board, mark, other(mark))
        move = pick_best(scores)
        logging.info(
            "mark=%s move=%s score=%s scores=%s",
            SYMBOLS[mark],
            move,
            scores[move] if move is not None else None,
            scores,
        )
        return 0

    if ns.cmd == "audit":
        try:
            ai_mark = parse_mark(ns.ai_mark)
        except ValueError as e:
            logging.error("%s", e)
            return 2
        with maybe_mlflow_run(ns.tracking == "mlflow", run_name="audit", log_dir=ns.log_dir):
            log_params({"ai_mark": SYMBOLS[ai_mark], "ai_first": ns.ai_first})
            t0 = time.perf_counter()
            report = audit(ai_mark, ai_first=ns.ai_first)
            elapsed = time.perf_counter() - t0
            log_metrics({
                "games": report.games,
                "ai_wins": report.ai_wins,
                "draws": report.draws,
                "human_wins": report.human_wins,
                "audit_s": elapsed,
            })
            logging.info(
                "games=%d ai_wins=%d draws=%d human_wins=%d never_lost=%s",
                report.games, report.ai_wins, report.draws, report.human_wins, report.never_lost,
            )
            if ns.export:
                out = ns.out if ns.out is not None else data_dir()
                first = ai_mark if ns.ai_first else other(ai_mark)
                try:
                    run_export(ExportArgs(out=out, ai_mark=ai_mark, first=first, format=ns.format))
                except RuntimeError as e:
                    logging.error("%s", e)
                    return 2
                logging.info("Exported policy to: %s", out)
        return 0 if report.never_lost else 1

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
