"""
Game session: turn tracking, outcome detection and status text for a
human-vs-AI game. No rendering or input handling; front ends call
human_move/ai_move and read `status`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .board import O, SYMBOLS, Board, apply_move, other
from .search import best_move

HUMAN = "human"
AI = "ai"
DRAW = "draw"

STATUS_THINKING = "AI is thinking..."
STATUS_YOUR_TURN = "Your turn"
STATUS_HUMAN_WINS = "You win!"
STATUS_AI_WINS = "AI wins!"
STATUS_DRAW = "It's a draw!"


@dataclass
class GameSession:
    human_mark: int = O
    ai_first: bool = False
    board: Board = field(init=False)
    ai_mark: int = field(init=False)
    current: int = field(init=False)
    active: bool = field(init=False)
    outcome: Optional[str] = field(init=False)
    status: str = field(init=False)

    def __post_init__(self) -> None:
        self.ai_mark = other(self.human_mark)
        self.reset()

    def reset(self) -> None:
        self.board = Board()
        self.current = self.ai_mark if self.ai_first else self.human_mark
        self.active = True
        self.outcome = None
        if self.ai_first:
            self.status = STATUS_THINKING
        else:
            self.status = f"Your turn! You're playing as {SYMBOLS[self.human_mark]}"

    @property
    def ai_to_move(self) -> bool:
        return self.active and self.current == self.ai_mark

    def human_move(self, index: int) -> bool:
        if not self.active or self.current != self.human_mark:
            return False
        if not apply_move(self.board, index, self.human_mark):
            return False
        self._after_move()
        return True

    def ai_move(self) -> Optional[int]:
        if not self.ai_to_move:
            return None
        move = best_move(self.board, self.ai_mark, self.human_mark)
        if move is None:
            return None
        apply_move(self.board, move, self.ai_mark)
        self._after_move()
        return move

    def _after_move(self) -> None:
        # only the side that just moved can have completed a line
        if self.board.is_winner():
            human_won = self.current == self.human_mark
            self.outcome = HUMAN if human_won else AI
            self.status = STATUS_HUMAN_WINS if human_won else STATUS_AI_WINS
            self.active = False
        elif self.board.is_full():
            self.outcome = DRAW
            self.status = STATUS_DRAW
            self.active = False
        else:
            self.current = other(self.current)
            self.status = STATUS_YOUR_TURN if self.current == self.human_mark else STATUS_THINKING
        if not self.active:
            logging.info("game over outcome=%s board=%s", self.outcome, self.board.serialize())
