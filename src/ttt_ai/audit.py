"""
Exhaustive checks of the engine against every possible opponent.

audit() lets the human side try every legal move at every turn while the AI
answers with best_move, and tallies the outcome of each finished game.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .board import EMPTY, O, X, Board, other
from .search import best_move


@dataclass
class AuditReport:
    ai_mark: int
    ai_first: bool
    games: int = 0
    ai_wins: int = 0
    draws: int = 0
    human_wins: int = 0

    @property
    def never_lost(self) -> bool:
        return self.human_wins == 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "ai_mark": self.ai_mark,
            "ai_first": self.ai_first,
            "games": self.games,
            "ai_wins": self.ai_wins,
            "draws": self.draws,
            "human_wins": self.human_wins,
        }


def _explore(board: Board, ai_turn: bool, human_mark: int, report: AuditReport,
             replies: Dict[str, Optional[int]]) -> None:
    w = board.winner()
    if w != EMPTY or board.is_full():
        report.games += 1
        if w == EMPTY:
            report.draws += 1
        elif w == report.ai_mark:
            report.ai_wins += 1
        else:
            report.human_wins += 1
            logging.warning("engine lost: %s", board.serialize())
        return
    if ai_turn:
        # best_move is deterministic, so one search per position suffices
        key = board.serialize()
        if key not in replies:
            replies[key] = best_move(board, report.ai_mark, human_mark)
        move = replies[key]
        if move is None:
            raise RuntimeError(f"engine returned no move for live position {key}")
        with board.trial(move, report.ai_mark):
            _explore(board, False, human_mark, report, replies)
    else:
        for i in board.empty_indices():
            with board.trial(i, human_mark):
                _explore(board, True, human_mark, report, replies)


def audit(ai_mark: int = X, ai_first: bool = False) -> AuditReport:
    report = AuditReport(ai_mark=ai_mark, ai_first=ai_first)
    replies: Dict[str, Optional[int]] = {}
    _explore(Board(), ai_first, other(ai_mark), report, replies)
    logging.info(
        "audit ai_first=%s games=%d ai_wins=%d draws=%d human_wins=%d (%d positions searched)",
        ai_first, report.games, report.ai_wins, report.draws, report.human_wins, len(replies),
    )
    return report


def play_optimal_game(first: int = O) -> Board:
    """Engine against itself from the empty board; returns the final position."""
    board = Board()
    mark = first
    while not board.is_terminal():
        move = best_move(board, mark, other(mark))
        if move is None:
            raise RuntimeError(f"engine returned no move for live position {board.serialize()}")
        board.place(move, mark)
        mark = other(mark)
    return board
