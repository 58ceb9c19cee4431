"""
Move scoring and recommendation.

Cells are ranked in tiers that short-circuit each other:

1. Winning: marking the cell finishes a line.
2. Almost line: marking the cell leaves a line one mark short.
3. Heuristic: line fill, line membership, a diagonal bonus and, for weak
   candidates, the number of successful random rollouts.

Tactical tiers are resolved before any rollout is run, so random noise can
never outrank a sure line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from loguru import logger

from .analyzer import (
    completes_a_line,
    creates_almost_line,
    filled_count_in_lines_through,
    first_line_with_fill,
    line_membership_count,
)
from .board import BingoBoard
from .config import EngineConfig
from .lines import Line, diagonals
from .rollout import rollout_successes

WINNING_SENTINEL = 10_000
ALMOST_SENTINEL = 5_000
ROLLOUT_CUTOFF = 1_000

FILL_WEIGHT = 100
MEMBERSHIP_WEIGHT = 50
DIAGONAL_WEIGHT = 300


class Tier(Enum):
    WINNING = "winning"
    ALMOST_LINE = "almost_line"
    HEURISTIC = "heuristic"


LABELS = {
    Tier.WINNING: "Complete the line! {cell}",
    Tier.ALMOST_LINE: "Build an almost-line: {cell}",
    Tier.HEURISTIC: "Best move: {cell}",
}


@dataclass(frozen=True)
class Recommendation:
    cell: int
    tier: Tier
    label: str
    score: float
    line: Optional[Line] = None


def _label(tier: Tier, cell: int) -> str:
    return LABELS[tier].format(cell=cell + 1)


def _diagonal_bonus(cell: int, board: BingoBoard) -> int:
    bonus = 0
    for diagonal in diagonals(board.size):
        if cell not in diagonal:
            continue
        filled = diagonal.filled_count(board)
        if filled > 1:
            bonus += filled * DIAGONAL_WEIGHT
    return bonus


def score_cell(
    cell: int,
    board: BingoBoard,
    moves_remaining: int,
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """
    Score one cell. Higher is better; occupied cells score -inf.

    Args:
        cell: Flat index of the candidate.
        board: Current board, left untouched.
        moves_remaining: Marks left in the game, including this one.
        config: Engine options; target line count and trial count are used.
        rng: Generator for the rollout tier.
    """
    config = config or EngineConfig.for_size(board.size)
    if board.is_occupied(cell):
        return float("-inf")

    if completes_a_line(cell, board):
        return WINNING_SENTINEL
    if creates_almost_line(cell, board):
        return ALMOST_SENTINEL

    score = filled_count_in_lines_through(cell, board) * FILL_WEIGHT
    score += line_membership_count(cell, board.size) * MEMBERSHIP_WEIGHT
    score += _diagonal_bonus(cell, board)

    if score < ROLLOUT_CUTOFF:
        if rng is None:
            rng = np.random.default_rng(config.seed)
        score += rollout_successes(
            board.with_marked(cell),
            max(moves_remaining - 1, 0),
            config.target_lines,
            config.trials,
            rng,
        )
    return score


def recommend(
    board: BingoBoard,
    moves_remaining: int,
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> Recommendation:
    """
    Pick the next cell to mark.

    Raises:
        ValueError: If the board has no empty cell.
    """
    config = config or EngineConfig.for_size(board.size)
    empty = board.empty_cells()
    if not empty:
        raise ValueError("Cannot recommend a move on a full board")

    for tier, filled, sentinel in (
        (Tier.WINNING, board.size - 1, WINNING_SENTINEL),
        (Tier.ALMOST_LINE, board.size - 2, ALMOST_SENTINEL),
    ):
        for cell in empty:
            line = first_line_with_fill(cell, board, filled)
            if line is not None:
                logger.debug(f"{tier.value} move at cell {cell} via {line}")
                return Recommendation(cell, tier, _label(tier, cell), sentinel, line)

    if rng is None:
        rng = np.random.default_rng(config.seed)

    best_cell = empty[0]
    best_score = float("-inf")
    for cell in empty:
        score = score_cell(cell, board, moves_remaining, config, rng)
        if score > best_score:
            best_cell, best_score = cell, score

    logger.debug(f"Heuristic move at cell {best_cell} scored {best_score}")
    return Recommendation(best_cell, Tier.HEURISTIC, _label(Tier.HEURISTIC, best_cell), best_score)
