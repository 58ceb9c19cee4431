"""Tests for the play-through state machine."""

import numpy as np
import pytest

from bingo_advisor import BingoBoard, BingoSession, EngineConfig, LineKind, Tier, TurnPhase
from bingo_advisor.session import EXTERNAL_PROMPT


@pytest.fixture
def config():
    return EngineConfig(trials=100, seed=11)


@pytest.fixture
def session(config):
    return BingoSession(config)


def play_all(session, cells):
    snapshot = session.snapshot()
    for cell in cells:
        snapshot = session.mark(cell)
    return snapshot


class TestInitialState:

    def test_opening_recommendation(self, session):
        snapshot = session.snapshot()
        assert snapshot.history == ()
        assert snapshot.phase is TurnPhase.ADVISED
        assert snapshot.completed_lines == ()
        assert snapshot.board == BingoBoard.empty(5)
        assert snapshot.recommendation is not None
        assert 0 <= snapshot.recommendation.cell < 25
        assert snapshot.message == snapshot.recommendation.label
        assert snapshot.moves_remaining == 16
        assert not snapshot.finished

    def test_external_player_starts(self):
        session = BingoSession(EngineConfig(trials=10, advised_starts=False))
        assert session.phase is TurnPhase.EXTERNAL
        assert session.recommendation is None
        assert session.snapshot().message == EXTERNAL_PROMPT


class TestMark:

    def test_center_mark_flips_to_external(self, session):
        snapshot = session.mark(12)
        assert snapshot.history == (12,)
        assert snapshot.phase is TurnPhase.EXTERNAL
        assert snapshot.completed_lines == ()
        assert snapshot.recommendation is None
        assert snapshot.message == EXTERNAL_PROMPT
        assert snapshot.moves_remaining == 15

    def test_advised_turn_gets_recommendation(self, session):
        snapshot = play_all(session, [0, 1])
        assert snapshot.phase is TurnPhase.ADVISED
        assert snapshot.recommendation is not None
        assert not snapshot.board.is_occupied(snapshot.recommendation.cell)

    def test_occupied_cell_is_ignored(self, session):
        before = session.mark(3)
        after = session.mark(3)
        assert after is before
        assert session.history == (3,)

    def test_out_of_range_raises(self, session):
        with pytest.raises(IndexError):
            session.mark(25)

    def test_board_cannot_be_written_through(self, session):
        session.mark(3)
        with pytest.raises(ValueError):
            session.board.occupied[7] = True
        assert not session.snapshot().board.is_occupied(7)
        assert session.history == (3,)

    def test_completed_lines_recomputed(self, session):
        snapshot = play_all(session, [0, 1, 2, 3, 4])
        assert len(snapshot.completed_lines) == 1
        assert snapshot.completed_lines[0].kind is LineKind.ROW

    def test_winning_recommendation_in_session(self, session):
        snapshot = play_all(session, [0, 1, 2, 3])
        assert snapshot.phase is TurnPhase.ADVISED
        assert snapshot.recommendation.cell == 4
        assert snapshot.recommendation.tier is Tier.WINNING


class TestUndo:

    def test_undo_on_empty_history_is_noop(self, session):
        before = session.snapshot()
        assert session.undo() is before

    def test_undo_restores_phase_and_recommendation(self, session):
        session.mark(12)
        snapshot = session.undo()
        assert snapshot.history == ()
        assert snapshot.phase is TurnPhase.ADVISED
        assert snapshot.recommendation is not None
        assert snapshot.board == BingoBoard.empty(5)

    def test_undo_rebuilds_completed_lines(self, session):
        play_all(session, [0, 1, 2, 3, 4])
        snapshot = session.undo()
        assert snapshot.completed_lines == ()
        assert snapshot.history == (0, 1, 2, 3)
        assert snapshot.phase is TurnPhase.ADVISED

    def test_mark_undo_mark_round_trip(self, config):
        once = BingoSession(config)
        play_all(once, [6, 7, 8])
        expected = once.mark(9)

        twice = BingoSession(config)
        play_all(twice, [6, 7, 8])
        twice.mark(9)
        twice.undo()
        actual = twice.mark(9)

        assert actual.board == expected.board
        assert actual.history == expected.history
        assert actual.completed_lines == expected.completed_lines
        assert actual.phase is expected.phase


class TestMoveCap:

    def test_cap_finishes_game(self):
        session = BingoSession(EngineConfig(max_moves=4, trials=10, reset_delay_seconds=2.0))
        snapshot = play_all(session, [0, 1, 2, 3])
        assert snapshot.finished
        assert snapshot.recommendation is None
        assert snapshot.message == "Done! Lines: 0/4"
        assert snapshot.reset_after == 2.0
        assert snapshot.moves_remaining == 0

    def test_mark_after_cap_is_ignored(self):
        session = BingoSession(EngineConfig(max_moves=4, trials=10))
        finished = play_all(session, [0, 1, 2, 3])
        assert session.mark(10) is finished
        assert session.history == (0, 1, 2, 3)
        assert not session.board.is_occupied(10)

    def test_full_default_game(self, session):
        cells = [0, 6, 12, 18, 24, 1, 2, 3, 4, 5, 10, 15, 20, 7, 8, 9]
        snapshot = play_all(session, cells)
        assert snapshot.finished
        # row 0, row 1, column 0 and the main diagonal
        assert len(snapshot.completed_lines) == 4
        assert snapshot.message == "Done! Lines: 4/4"

    def test_reset_after_cap(self):
        session = BingoSession(EngineConfig(max_moves=2, trials=10))
        play_all(session, [5, 9])
        snapshot = session.reset()
        assert snapshot.history == ()
        assert snapshot.completed_lines == ()
        assert snapshot.board == BingoBoard.empty(5)
        assert not snapshot.finished
        assert snapshot.recommendation is not None
        assert session.mark(5).history == (5,)


class TestReset:

    def test_reset_clears_everything(self, session):
        play_all(session, [0, 1, 2, 3, 4, 9])
        snapshot = session.reset()
        assert snapshot.history == ()
        assert snapshot.completed_lines == ()
        assert snapshot.phase is TurnPhase.ADVISED
        assert snapshot.board.occupied_count() == 0
        assert snapshot.recommendation is not None

    def test_seeded_sessions_agree(self):
        config = EngineConfig(trials=50)
        a = BingoSession(config, rng=np.random.default_rng(99))
        b = BingoSession(config, rng=np.random.default_rng(99))
        assert a.recommendation == b.recommendation
