"""Winning line catalog: rows, columns and the two diagonals."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .board import BingoBoard, check_cell

DIAGONAL_INDEX = -1


class LineKind(Enum):
    ROW = "row"
    COLUMN = "column"
    DIAGONAL1 = "diag1"
    DIAGONAL2 = "diag2"


@dataclass(frozen=True)
class Line:
    """A winning line and the flat cell indices it covers, in order."""
    kind: LineKind
    index: int
    cells: Tuple[int, ...]

    def __contains__(self, cell: object) -> bool:
        return cell in self.cells

    def filled_count(self, board: BingoBoard) -> int:
        return int(board.occupied[list(self.cells)].sum())

    def is_complete(self, board: BingoBoard) -> bool:
        return bool(board.occupied[list(self.cells)].all())

    def __str__(self) -> str:
        if self.kind is LineKind.ROW:
            return f"row {self.index + 1}"
        if self.kind is LineKind.COLUMN:
            return f"column {self.index + 1}"
        if self.kind is LineKind.DIAGONAL1:
            return "diagonal ↘"
        return "diagonal ↙"


@functools.lru_cache(maxsize=None)
def all_lines(size: int = 5) -> Tuple[Line, ...]:
    """
    Get all winning lines for an n×n board.

    The order is fixed: rows 0..n-1, columns 0..n-1, main diagonal
    (top-left to bottom-right), anti-diagonal (top-right to bottom-left).
    """
    lines: List[Line] = []

    # Rows
    for r in range(size):
        lines.append(Line(LineKind.ROW, r, tuple(r * size + c for c in range(size))))

    # Columns
    for c in range(size):
        lines.append(Line(LineKind.COLUMN, c, tuple(r * size + c for r in range(size))))

    lines.append(
        Line(LineKind.DIAGONAL1, DIAGONAL_INDEX, tuple(i * size + i for i in range(size)))
    )
    lines.append(
        Line(
            LineKind.DIAGONAL2,
            DIAGONAL_INDEX,
            tuple(i * size + (size - 1 - i) for i in range(size)),
        )
    )
    return tuple(lines)


@functools.lru_cache(maxsize=None)
def lines_through(cell: int, size: int = 5) -> Tuple[Line, ...]:
    """Catalog entries containing cell, in catalog order."""
    check_cell(cell, size)
    return tuple(line for line in all_lines(size) if cell in line.cells)


def diagonals(size: int = 5) -> Tuple[Line, Line]:
    """The main diagonal and the anti-diagonal."""
    lines = all_lines(size)
    return lines[-2], lines[-1]


def completed_lines(board: BingoBoard) -> List[Line]:
    """Every fully marked line, recomputed from scratch in catalog order."""
    return [line for line in all_lines(board.size) if line.is_complete(board)]
