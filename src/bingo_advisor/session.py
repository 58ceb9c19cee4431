"""Turn-by-turn play-through state with undo and reset."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from loguru import logger

from .board import BingoBoard
from .config import EngineConfig
from .evaluator import Recommendation, recommend
from .lines import Line, completed_lines

EXTERNAL_PROMPT = "Record the drawn number"
SUMMARY_TEMPLATE = "Done! Lines: {completed}/{target}"


class TurnPhase(Enum):
    ADVISED = "advised"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Snapshot:
    """Authoritative session state plus everything derived from it."""
    board: BingoBoard
    history: Tuple[int, ...]
    phase: TurnPhase
    completed_lines: Tuple[Line, ...]
    recommendation: Optional[Recommendation]
    message: str
    finished: bool
    reset_after: Optional[float]
    moves_remaining: int

    @property
    def moves_made(self) -> int:
        return len(self.history)


class BingoSession:
    """
    Owns the move history of one play-through.

    The board, turn phase and completed lines are always rebuilt from the
    history, and each transition publishes them together as one Snapshot.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._snapshot = self._derive(())

    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def board(self) -> BingoBoard:
        return self._snapshot.board

    @property
    def history(self) -> Tuple[int, ...]:
        return self._snapshot.history

    @property
    def phase(self) -> TurnPhase:
        return self._snapshot.phase

    @property
    def completed_lines(self) -> Tuple[Line, ...]:
        return self._snapshot.completed_lines

    @property
    def recommendation(self) -> Optional[Recommendation]:
        return self._snapshot.recommendation

    def phase_for(self, moves_made: int) -> TurnPhase:
        """Whose turn it is after `moves_made` marks."""
        advised_on_even = self.config.advised_starts
        if (moves_made % 2 == 0) == advised_on_even:
            return TurnPhase.ADVISED
        return TurnPhase.EXTERNAL

    def mark(self, cell: int) -> Snapshot:
        """Record a mark. Occupied cells and marks past the move cap are ignored."""
        current = self._snapshot
        current.board.check_cell(cell)
        if len(current.history) >= self.config.max_moves:
            logger.debug(f"Ignoring mark on cell {cell}: move cap reached")
            return current
        if current.board.is_occupied(cell):
            logger.debug(f"Ignoring mark on cell {cell}: already occupied")
            return current

        self._snapshot = self._derive(current.history + (cell,))
        logger.info(f"Marked cell {cell} ({self._snapshot.moves_made}/{self.config.max_moves})")
        return self._snapshot

    def undo(self) -> Snapshot:
        """Drop the last mark and rebuild the board from the shortened history."""
        current = self._snapshot
        if not current.history:
            logger.debug("Ignoring undo: history is empty")
            return current

        self._snapshot = self._derive(current.history[:-1])
        logger.info(f"Undid mark on cell {current.history[-1]}")
        return self._snapshot

    def reset(self) -> Snapshot:
        """Start a new play-through."""
        self._snapshot = self._derive(())
        logger.info("Session reset")
        return self._snapshot

    def _derive(self, history: Tuple[int, ...]) -> Snapshot:
        config = self.config
        board = BingoBoard.from_history(history, config.board_size)
        phase = self.phase_for(len(history))
        lines = tuple(completed_lines(board))
        moves_remaining = config.max_moves - len(history)
        finished = len(history) >= config.max_moves

        recommendation = None
        reset_after = None
        if finished:
            message = SUMMARY_TEMPLATE.format(completed=len(lines), target=config.target_lines)
            reset_after = config.reset_delay_seconds
        elif phase is TurnPhase.EXTERNAL:
            message = EXTERNAL_PROMPT
        else:
            recommendation = recommend(board, moves_remaining, config, self.rng)
            message = recommendation.label

        return Snapshot(
            board=board,
            history=history,
            phase=phase,
            completed_lines=lines,
            recommendation=recommendation,
            message=message,
            finished=finished,
            reset_after=reset_after,
            moves_remaining=moves_remaining,
        )
