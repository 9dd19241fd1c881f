"""
Board state: 9 cells, winning lines, winner/fullness checks.
Notes:
- Cells are ints: 0=empty, 1=X, 2=O. Index i sits at row i // 3, column i % 3.
- The board does not enforce turn order; callers keep marks alternating.
- is_winner() only says that some line is complete. Under alternation the side
  that just moved is the one who completed it.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List

EMPTY = 0
X = 1
O = 2

MARKS = (X, O)
SYMBOLS = {EMPTY: '.', X: 'X', O: 'O'}

WIN_PATTERNS = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def other(mark: int) -> int:
    if mark not in MARKS:
        raise ValueError(f"Unknown mark: {mark}")
    return O if mark == X else X


def parse_mark(text: str) -> int:
    t = text.strip().upper()
    for mark, sym in SYMBOLS.items():
        if mark != EMPTY and sym == t:
            return mark
    raise ValueError(f"Unknown mark: {text!r} (expected X or O)")


@dataclass
class Board:
    cells: List[int] = field(default_factory=lambda: [EMPTY] * 9)

    def __post_init__(self) -> None:
        self.cells = list(self.cells)
        if len(self.cells) != 9:
            raise ValueError(f"Board needs 9 cells, got {len(self.cells)}")
        if any(c not in SYMBOLS for c in self.cells):
            raise ValueError(f"Invalid cell values: {self.cells}")

    @classmethod
    def from_string(cls, raw: str) -> "Board":
        """Parse a 9-char string of 0/1/2, e.g. '100020000'."""
        raw = raw.strip()
        if len(raw) != 9 or any(c not in "012" for c in raw):
            raise ValueError("Invalid board string. Must be 9 chars of 0/1/2.")
        return cls([int(c) for c in raw])

    def serialize(self) -> str:
        return ''.join(str(c) for c in self.cells)

    def copy(self) -> "Board":
        return Board(self.cells[:])

    def __getitem__(self, index: int) -> int:
        return self.cells[index]

    def place(self, index: int, mark: int) -> None:
        if not 0 <= index < 9:
            raise ValueError(f"Cell index out of range: {index}")
        if mark not in MARKS:
            raise ValueError(f"Unknown mark: {mark}")
        if self.cells[index] != EMPTY:
            raise ValueError(f"Cell {index} is already occupied")
        self.cells[index] = mark

    def clear(self, index: int) -> None:
        self.cells[index] = EMPTY

    @contextmanager
    def trial(self, index: int, mark: int) -> Iterator["Board"]:
        """Place a hypothetical mark; the cell is emptied again on exit."""
        self.place(index, mark)
        try:
            yield self
        finally:
            self.clear(index)

    def winner(self) -> int:
        b = self.cells
        for a, m, c in WIN_PATTERNS:
            v = b[a]
            if v != EMPTY and v == b[m] and v == b[c]:
                return v
        return EMPTY

    def is_winner(self) -> bool:
        return self.winner() != EMPTY

    def is_full(self) -> bool:
        return EMPTY not in self.cells

    def is_terminal(self) -> bool:
        return self.is_winner() or self.is_full()

    def empty_indices(self) -> Iterator[int]:
        return (i for i, v in enumerate(self.cells) if v == EMPTY)

    def to_move(self, first: int = O) -> int:
        """Side to move under strict alternation when `first` opened."""
        first_n = self.cells.count(first)
        second_n = self.cells.count(other(first))
        return first if first_n == second_n else other(first)

    def is_reachable(self, first: int = O) -> bool:
        second = other(first)
        first_n = self.cells.count(first)
        second_n = self.cells.count(second)
        if not (first_n == second_n or first_n == second_n + 1):
            return False

        def line_count(p: int) -> int:
            return sum(1 for pat in WIN_PATTERNS if all(self.cells[i] == p for i in pat))

        first_lines = line_count(first)
        second_lines = line_count(second)
        if first_lines and second_lines:
            return False
        # the winner must be the side that moved last
        if first_lines and first_n != second_n + 1:
            return False
        if second_lines and first_n != second_n:
            return False
        return True

    def render(self) -> str:
        rows = []
        for r in range(3):
            cells = []
            for c in range(3):
                i = r * 3 + c
                v = self.cells[i]
                cells.append(str(i) if v == EMPTY else SYMBOLS[v])
            rows.append(" " + " | ".join(cells))
        return "\n---+---+---\n".join(rows)


def apply_move(board: Board, index: int, mark: int) -> bool:
    """Place `mark` at `index` if the cell exists and is empty; False otherwise."""
    if not 0 <= index < 9 or board.cells[index] != EMPTY:
        return False
    board.place(index, mark)
    return True
