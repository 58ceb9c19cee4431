"""Tests for rollout estimation and exact enumeration."""

import numpy as np
import pytest

from bingo_advisor import BingoBoard, estimate_success_frequency, exact_success_frequency
from bingo_advisor.rollout import compare_estimators, rollout_successes, standard_error


def two_empty_board():
    """Every cell marked except 0 and 1; eight lines are already complete."""
    return BingoBoard.from_cells(range(2, 25))


class TestRolloutEstimate:
    """Tests for the random rollout estimator."""

    def test_no_moves_scores_board_as_is(self):
        board = BingoBoard.from_cells([0, 1, 2, 3, 4])
        rng = np.random.default_rng(1)
        assert estimate_success_frequency(board, 0, 1, trials=100, rng=rng) == 1.0
        assert estimate_success_frequency(board, 0, 2, trials=100, rng=rng) == 0.0

    def test_negative_moves_treated_as_zero(self):
        board = BingoBoard.from_cells([0, 1, 2, 3, 4])
        assert estimate_success_frequency(board, -3, 1, trials=10) == 1.0

    def test_more_moves_than_empty_cells_fills_board(self):
        board = BingoBoard.from_cells([0, 1])
        assert estimate_success_frequency(board, 40, 12, trials=50) == 1.0

    def test_target_zero_always_succeeds(self):
        board = BingoBoard.empty(5)
        assert rollout_successes(board, 5, 0, trials=200) == 200

    def test_board_not_modified(self):
        board = BingoBoard.from_cells([3, 9])
        before = board.copy()
        estimate_success_frequency(board, 10, 1, trials=100)
        assert board == before

    def test_reproducibility(self):
        """Same seed should give same result."""
        board = BingoBoard.from_cells([0, 6, 12])
        p1 = estimate_success_frequency(board, 10, 2, 5000, np.random.default_rng(12345))
        p2 = estimate_success_frequency(board, 10, 2, 5000, np.random.default_rng(12345))
        assert p1 == p2

    def test_invalid_trials(self):
        with pytest.raises(ValueError):
            rollout_successes(BingoBoard.empty(5), 3, 1, trials=0)

    def test_two_empty_cells_one_move(self):
        board = two_empty_board()
        rng = np.random.default_rng(42)
        prob = estimate_success_frequency(board, 1, 10, trials=100_000, rng=rng)
        assert abs(prob - 0.5) < 0.01

    @pytest.mark.parametrize("moves", [1, 2, 3])
    def test_converges_to_exact(self, moves):
        """At 100k trials the estimate should sit within 1% of the exact value."""
        board = BingoBoard.from_cells([1, 2, 3, 4, 6, 18])
        exact = exact_success_frequency(board, moves, 1)
        prob = estimate_success_frequency(
            board, moves, 1, trials=100_000, rng=np.random.default_rng(7)
        )
        assert abs(prob - exact) < 0.01


class TestExactEnumeration:
    """Tests for the exact solver."""

    def test_two_empty_cells_one_move(self):
        assert exact_success_frequency(two_empty_board(), 1, 10) == pytest.approx(0.5)
        assert exact_success_frequency(two_empty_board(), 1, 9) == pytest.approx(1.0)
        assert exact_success_frequency(two_empty_board(), 1, 11) == pytest.approx(0.0)

    def test_single_missing_cell(self):
        board = BingoBoard.from_cells([1, 2, 3, 4])
        assert exact_success_frequency(board, 1, 1) == pytest.approx(1 / 21)
        assert exact_success_frequency(board, 2, 1) == pytest.approx(20 / 210)

    def test_no_moves_incomplete_board(self):
        board = BingoBoard.from_cells([1, 2, 3])
        assert exact_success_frequency(board, 0, 1) == 0.0
        assert exact_success_frequency(board, 0, 0) == 1.0

    def test_too_many_subsets(self):
        with pytest.raises(ValueError, match="exceeds the safety limit"):
            exact_success_frequency(BingoBoard.empty(5), 8, 1)


class TestCompare:
    """Tests for the comparison function."""

    def test_compare_returns_all_fields(self):
        board = BingoBoard.from_cells([1, 2, 3, 4])
        results = compare_estimators(board, 2, 1, trials=2000, seed=42)

        assert results["board_size"] == 5
        assert results["empty_cells"] == 21
        assert "rollout" in results
        assert "exact" in results
        assert results["exact"]["subsets"] == 210
        assert "difference" in results

        ro = results["rollout"]
        assert "probability" in ro
        assert "std_error" in ro
        assert "time_seconds" in ro

    def test_compare_reports_enumeration_error(self):
        results = compare_estimators(BingoBoard.empty(5), 10, 1, trials=100, seed=1)
        assert "error" in results["exact"]
        assert "difference" not in results

    def test_standard_error(self):
        assert standard_error(0.0, 100) == 0.0
        assert standard_error(0.5, 100) == pytest.approx(0.05)
