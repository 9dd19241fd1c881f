import itertools

from ttt_ai.board import EMPTY, O, X, Board
from ttt_ai.cli import run_terminal_game
from ttt_ai.game import (
    AI,
    DRAW,
    HUMAN,
    STATUS_AI_WINS,
    STATUS_DRAW,
    STATUS_HUMAN_WINS,
    STATUS_THINKING,
    STATUS_YOUR_TURN,
    GameSession,
)


def test_new_session_defaults():
    s = GameSession()
    assert s.human_mark == O and s.ai_mark == X
    assert s.current == O
    assert s.active and s.outcome is None
    assert s.status == "Your turn! You're playing as O"
    assert s.board.cells == [EMPTY] * 9


def test_human_then_ai_turns():
    s = GameSession()
    assert s.human_move(4) is True
    assert s.status == STATUS_THINKING
    assert s.ai_to_move
    # not the human's turn any more
    assert s.human_move(0) is False
    mv = s.ai_move()
    assert mv is not None and mv != 4
    assert s.board[mv] == X
    assert s.status == STATUS_YOUR_TURN
    # the AI's cell is taken
    assert s.human_move(mv) is False
    assert s.ai_move() is None


def test_ai_can_open():
    s = GameSession(ai_first=True)
    assert s.status == STATUS_THINKING
    assert s.human_move(4) is False
    assert s.ai_move() == 0
    assert s.current == O
    assert s.status == STATUS_YOUR_TURN


def test_human_win_ends_game():
    s = GameSession()
    s.board = Board.from_string("220011000")
    assert s.human_move(2)
    assert s.outcome == HUMAN
    assert s.status == STATUS_HUMAN_WINS
    assert not s.active
    assert s.human_move(6) is False
    assert s.ai_move() is None


def test_ai_win_ends_game():
    s = GameSession()
    s.board = Board.from_string("110220000")
    s.current = X
    assert s.ai_move() == 2
    assert s.outcome == AI
    assert s.status == STATUS_AI_WINS
    assert not s.active


def test_draw_ends_game():
    s = GameSession()
    s.board = Board.from_string("110221121")
    assert s.human_move(2)
    assert s.outcome == DRAW
    assert s.status == STATUS_DRAW


def test_reset():
    s = GameSession()
    s.human_move(0)
    s.ai_move()
    s.reset()
    assert s.board.cells == [EMPTY] * 9
    assert s.current == O and s.active and s.outcome is None


def test_human_playing_x():
    s = GameSession(human_mark=X)
    assert s.ai_mark == O
    assert s.status == "Your turn! You're playing as X"
    assert s.human_move(0)
    assert s.ai_move() == 4


def test_terminal_game_never_lost_by_ai():
    s = GameSession()
    cells = itertools.cycle([str(i) for i in range(9)])
    out = []
    outcome = run_terminal_game(s, 0, read=lambda prompt: next(cells), write=out.append)
    assert outcome in (AI, DRAW)
    assert STATUS_THINKING in out
    assert out[-1] in (STATUS_AI_WINS, STATUS_DRAW)


def test_terminal_game_quit_reset_and_bad_input():
    s = GameSession()
    script = iter(["x", "4", "4", "r", "q"])
    out = []
    outcome = run_terminal_game(s, 0, read=lambda prompt: next(script), write=out.append)
    assert outcome is None
    rejected = [line for line in out if line.startswith("Cannot play")]
    assert rejected[0].startswith("Cannot play 'x'")
    assert rejected[1].startswith("Cannot play '4'")
    assert len(rejected) == 2
    # start and reset only; a rejected input does not redraw
    assert out.count("Your turn! You're playing as O") == 2
    # start, after the human move, after the AI move, after reset
    assert sum("---+---+---" in line for line in out) == 4
    assert s.board.cells == [EMPTY] * 9


def test_terminal_game_rejection_reprompts_in_place():
    s = GameSession()
    script = iter(["9", "q"])
    out = []
    assert run_terminal_game(s, 0, read=lambda prompt: next(script), write=out.append) is None
    assert out[-1] == "Cannot play '9'; pick an empty cell 0-8."
    assert out[-2] == "Your turn! You're playing as O"


def test_terminal_game_eof_quits():
    def read(prompt):
        raise EOFError

    out = []
    assert run_terminal_game(GameSession(), 0, read=read, write=out.append) is None
