import pytest

import ttt_ai.audit as A

from ttt_ai.audit import AuditReport, audit, play_optimal_game
from ttt_ai.board import EMPTY, O, X


@pytest.mark.parametrize("ai_mark", [X, O])
@pytest.mark.parametrize("ai_first", [False, True])
def test_engine_never_loses_against_any_line(ai_mark, ai_first):
    report = audit(ai_mark, ai_first=ai_first)
    assert report.games > 0
    assert report.human_wins == 0
    assert report.never_lost
    assert report.games == report.ai_wins + report.draws
    # a careless opponent gets punished somewhere in the tree
    assert report.ai_wins > 0


@pytest.mark.parametrize("first", [X, O])
def test_optimal_play_is_a_draw(first):
    final = play_optimal_game(first)
    assert final.is_full()
    assert final.winner() == EMPTY


def test_report_as_dict():
    r = AuditReport(ai_mark=X, ai_first=True, games=3, ai_wins=2, draws=1)
    d = r.as_dict()
    assert d["games"] == 3 and d["human_wins"] == 0
    assert r.never_lost


def test_missing_engine_reply_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(A, "best_move", lambda board, ai_mark, human_mark: None)
    with pytest.raises(RuntimeError):
        audit(X, ai_first=True)
    with pytest.raises(RuntimeError):
        play_optimal_game(X)
