"""Line-local queries about a single cell on a board."""

from __future__ import annotations

from typing import Optional

from .board import BingoBoard, check_cell
from .lines import Line, lines_through


def filled_count_in_lines_through(cell: int, board: BingoBoard) -> int:
    """Sum of marked cells over every line that passes through cell."""
    board.check_cell(cell)
    return sum(line.filled_count(board) for line in lines_through(cell, board.size))


def first_line_with_fill(cell: int, board: BingoBoard, filled: int) -> Optional[Line]:
    """First line through cell, in catalog order, holding exactly `filled` marks."""
    board.check_cell(cell)
    for line in lines_through(cell, board.size):
        if line.filled_count(board) == filled:
            return line
    return None


def completes_a_line(cell: int, board: BingoBoard) -> bool:
    """True if marking cell would finish some line (it is one mark away)."""
    if board.is_occupied(cell):
        return False
    return first_line_with_fill(cell, board, board.size - 1) is not None


def creates_almost_line(cell: int, board: BingoBoard) -> bool:
    """True if marking cell would leave some line one mark away from complete."""
    if board.is_occupied(cell):
        return False
    return first_line_with_fill(cell, board, board.size - 2) is not None


def line_membership_count(cell: int, size: int = 5) -> int:
    """Number of catalog lines passing through cell."""
    check_cell(cell, size)
    return len(lines_through(cell, size))
