"""ttt_ai package.

Board state and an unbeatable minimax opponent for 3x3 tic-tac-toe, plus a
game session, exhaustive audit tooling and a simple CLI.

Front ends need only apply_move and best_move.
"""

from .board import EMPTY, O, X, Board, apply_move
from .game import GameSession
from .search import SearchResult, best_move, score_moves, search

__all__ = [
    "EMPTY",
    "X",
    "O",
    "Board",
    "apply_move",
    "best_move",
    "search",
    "score_moves",
    "SearchResult",
    "GameSession",
]
