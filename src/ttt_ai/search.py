"""
Minimax search with alpha-beta pruning, from the AI's perspective.
Scoring policy:
- AI win: 10 - depth (faster wins score higher).
- Human win: -10 + depth (slower losses score higher).
- Draw: 0.
Ties between equally scored moves go to the lowest index.

The board is searched in place. Every hypothetical mark goes through
Board.trial, so the caller's board is unchanged when a search returns.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .board import EMPTY, Board, other

WIN_SCORE = 10


@dataclass
class SearchResult:
    score: int
    move: Optional[int] = None
    nodes: int = 0


def _check_marks(ai_mark: int, human_mark: int) -> None:
    if human_mark != other(ai_mark):
        raise ValueError(f"AI and human marks must differ: {ai_mark}, {human_mark}")


def minimax(
    board: Board,
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    ai_mark: int,
    human_mark: int,
    stats: Optional[Counter] = None,
) -> int:
    if stats is not None:
        stats['nodes'] += 1
    # the previous ply belongs to the opposite role
    if board.is_winner():
        return -WIN_SCORE + depth if maximizing else WIN_SCORE - depth
    if board.is_full():
        return 0

    mark = ai_mark if maximizing else human_mark
    best: Optional[int] = None
    for i in board.empty_indices():
        with board.trial(i, mark):
            score = minimax(board, depth + 1, not maximizing, alpha, beta,
                            ai_mark, human_mark, stats)
        if maximizing:
            best = score if best is None else max(best, score)
            alpha = max(alpha, score)
        else:
            best = score if best is None else min(best, score)
            beta = min(beta, score)
        if beta <= alpha:
            break
    if best is None:
        raise RuntimeError(f"No legal move on a non-terminal board: {board.serialize()}")
    return best


def _root_scores(board: Board, ai_mark: int, human_mark: int,
                 stats: Optional[Counter] = None) -> Iterator[Tuple[int, int]]:
    # Each root child gets a full window, so its score is exact.
    for i in board.empty_indices():
        with board.trial(i, ai_mark):
            score = minimax(board, 0, False, -math.inf, math.inf,
                            ai_mark, human_mark, stats)
        yield i, score


def pick_best(scores: Dict[int, int]) -> Optional[int]:
    """Highest-scoring move; the lowest index wins ties. None when empty."""
    best: Optional[int] = None
    for i in sorted(scores):
        if best is None or scores[i] > scores[best]:
            best = i
    return best


def _terminal_score(board: Board, ai_mark: int) -> int:
    w = board.winner()
    if w == EMPTY:
        return 0
    return WIN_SCORE if w == ai_mark else -WIN_SCORE


def search(board: Board, ai_mark: int, human_mark: int) -> SearchResult:
    """Full search from the AI's side. `move` is None on a terminal board."""
    _check_marks(ai_mark, human_mark)
    if board.is_terminal():
        return SearchResult(score=_terminal_score(board, ai_mark))

    stats: Counter = Counter()
    scores = dict(_root_scores(board, ai_mark, human_mark, stats))
    best_move = pick_best(scores)
    if best_move is None:
        raise RuntimeError(f"No legal move on a non-terminal board: {board.serialize()}")
    best_score = scores[best_move]
    logging.debug("search board=%s move=%s score=%s nodes=%d",
                  board.serialize(), best_move, best_score, stats['nodes'])
    return SearchResult(score=best_score, move=best_move, nodes=stats['nodes'])


def best_move(board: Board, ai_mark: int, human_mark: int) -> Optional[int]:
    return search(board, ai_mark, human_mark).move


def score_moves(board: Board, ai_mark: int, human_mark: int) -> Dict[int, int]:
    """Exact score of every legal move for the AI; empty on a terminal board."""
    _check_marks(ai_mark, human_mark)
    if board.is_terminal():
        return {}
    return dict(_root_scores(board, ai_mark, human_mark))


def submit_best_move(executor: Executor, board: Board, ai_mark: int,
                     human_mark: int) -> "Future[Optional[int]]":
    """Run best_move off the calling thread on an independent copy of the board."""
    return executor.submit(best_move, board.copy(), ai_mark, human_mark)
