"""
Rollout estimation of the chance to reach a target line count.

The remaining draws are external and unknown, so the future is modelled as
uniformly random marks on the cells that are still empty:

1. Rollout estimate: fill `moves_remaining` random empty cells many times and
   count how often the finished board holds at least `target_lines` lines.
   - Approximate, standard error sqrt(p(1-p)/trials)
   - Vectorized over trials with NumPy

2. Exact enumeration: every subset of empty cells of the right size is
   equally likely, so the true probability is the success share over all
   C(empty, moves) subsets.
   - Exact, but combinatorial in the number of empty cells
   - Used to check the estimator
"""

from __future__ import annotations

import functools
import math
import time
from itertools import combinations
from typing import Optional

import numpy as np
from loguru import logger

from .board import BingoBoard
from .lines import all_lines


@functools.lru_cache(maxsize=None)
def _line_matrix(size: int) -> np.ndarray:
    matrix = np.array([line.cells for line in all_lines(size)], dtype=np.intp)
    matrix.setflags(write=False)
    return matrix


def _completed_counts(filled: np.ndarray, size: int) -> np.ndarray:
    """Completed line count for each board in a (boards, cells) array."""
    return filled[:, _line_matrix(size)].all(axis=2).sum(axis=1)


def _fill_count(board: BingoBoard, moves_remaining: int) -> int:
    return min(max(moves_remaining, 0), board.cell_count - board.occupied_count())


def rollout_successes(
    board: BingoBoard,
    moves_remaining: int,
    target_lines: int,
    trials: int = 1000,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """
    Count random rollouts that end with at least `target_lines` lines.

    Each trial marks min(moves_remaining, empty) distinct empty cells chosen
    uniformly at random. Sorting one row of random keys per trial gives a
    uniform random ordering of the empty cells, so its prefix is a uniform
    sample without replacement.

    Args:
        board: Board to complete; it is never modified.
        moves_remaining: Marks still to come. Zero or less scores the board as is.
        target_lines: Completed lines needed for a trial to succeed.
        trials: Number of rollouts.
        rng: NumPy generator. A fresh unseeded one is used when None.

    Returns:
        Number of successful trials in [0, trials].
    """
    if trials < 1:
        raise ValueError("Rollout trial count must be positive")
    if rng is None:
        rng = np.random.default_rng()

    empty = np.flatnonzero(~board.occupied)
    to_fill = _fill_count(board, moves_remaining)

    filled = np.tile(board.occupied, (trials, 1))
    if to_fill > 0:
        keys = rng.random((trials, empty.size))
        picks = empty[np.argsort(keys, axis=1)[:, :to_fill]]
        filled[np.arange(trials)[:, None], picks] = True

    counts = _completed_counts(filled, board.size)
    return int(np.count_nonzero(counts >= target_lines))


def estimate_success_frequency(
    board: BingoBoard,
    moves_remaining: int,
    target_lines: int,
    trials: int = 1000,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Empirical frequency of reaching `target_lines` over random rollouts."""
    return rollout_successes(board, moves_remaining, target_lines, trials, rng) / trials


def standard_error(p_hat: float, trials: int) -> float:
    """Standard error of a binomial proportion."""
    return math.sqrt(p_hat * (1 - p_hat) / trials)


def exact_success_frequency(
    board: BingoBoard,
    moves_remaining: int,
    target_lines: int,
    max_subsets: int = 200_000,
) -> float:
    """
    Exact probability of reaching `target_lines` under uniform random fills.

    Args:
        board: Board to complete.
        moves_remaining: Marks still to come.
        target_lines: Completed lines needed.
        max_subsets: Safety limit on the number of fill subsets enumerated.

    Returns:
        Probability in [0, 1].

    Raises:
        ValueError: If enumeration would exceed max_subsets.
    """
    empty = board.empty_cells()
    to_fill = _fill_count(board, moves_remaining)
    total = math.comb(len(empty), to_fill)
    if total > max_subsets:
        raise ValueError(
            f"Enumerating {total:,} fills exceeds the safety limit of {max_subsets:,}. "
            f"Use the rollout estimate instead, or increase max_subsets."
        )

    combos = np.array(list(combinations(empty, to_fill)), dtype=np.intp).reshape(total, to_fill)
    filled = np.tile(board.occupied, (total, 1))
    filled[np.arange(total)[:, None], combos] = True

    counts = _completed_counts(filled, board.size)
    return int(np.count_nonzero(counts >= target_lines)) / total


def compare_estimators(
    board: BingoBoard,
    moves_remaining: int,
    target_lines: int,
    trials: int = 100_000,
    seed: Optional[int] = None,
) -> dict:
    """
    Run the rollout estimate and exact enumeration side by side.

    Returns:
        Dictionary with results from both methods
    """
    results = {
        "board_size": board.size,
        "empty_cells": board.cell_count - board.occupied_count(),
        "moves_remaining": moves_remaining,
        "target_lines": target_lines,
    }

    start = time.perf_counter()
    estimate = estimate_success_frequency(
        board, moves_remaining, target_lines, trials, np.random.default_rng(seed)
    )
    elapsed = time.perf_counter() - start
    std = standard_error(estimate, trials)

    results["rollout"] = {
        "probability": estimate,
        "std_error": std,
        "trials": trials,
        "time_seconds": elapsed,
        "95_ci": (estimate - 1.96 * std, estimate + 1.96 * std),
    }

    try:
        start = time.perf_counter()
        exact = exact_success_frequency(board, moves_remaining, target_lines)
        elapsed = time.perf_counter() - start
    except ValueError as e:
        logger.info(f"Skipping exact enumeration: {e}")
        results["exact"] = {"error": str(e)}
        return results

    results["exact"] = {
        "probability": exact,
        "subsets": math.comb(results["empty_cells"], _fill_count(board, moves_remaining)),
        "time_seconds": elapsed,
    }
    results["difference"] = abs(estimate - exact)
    results["within_1_std"] = results["difference"] <= std
    results["within_2_std"] = results["difference"] <= 2 * std
    return results
