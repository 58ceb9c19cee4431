"""Bingo board representation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

import numpy as np


def check_cell(cell: int, size: int = 5) -> None:
    """Raise IndexError if cell is not on an n×n board."""
    if not 0 <= cell < size * size:
        raise IndexError(f"Cell {cell} is outside a {size}×{size} board")


@dataclass
class BingoBoard:
    """
    A square bingo board stored as a flat row-major occupancy array.

    Cell ``row * size + col`` is True once it has been marked.

    Attributes:
        occupied: 1-D boolean array of length size*size.
    """
    occupied: np.ndarray

    def __post_init__(self):
        self.occupied = np.array(self.occupied, dtype=bool)
        self.occupied.setflags(write=False)
        if self.occupied.ndim != 1:
            raise ValueError("Board must be a flat 1D array")
        side = math.isqrt(self.occupied.shape[0])
        if side * side != self.occupied.shape[0]:
            raise ValueError("Board length must be a perfect square")
        if side < 2:
            raise ValueError("Board must be at least 2×2")

    @property
    def size(self) -> int:
        """Board dimension (n for an n×n board)."""
        return math.isqrt(self.occupied.shape[0])

    @property
    def cell_count(self) -> int:
        return self.occupied.shape[0]

    @classmethod
    def empty(cls, size: int = 5) -> BingoBoard:
        """Create a board with no marked cells."""
        return cls(np.zeros(size * size, dtype=bool))

    @classmethod
    def from_cells(cls, cells: Iterable[int], size: int = 5) -> BingoBoard:
        """Create a board with the given cells marked."""
        board = np.zeros(size * size, dtype=bool)
        for cell in cells:
            check_cell(cell, size)
            board[cell] = True
        return cls(board)

    @classmethod
    def from_history(cls, history: Iterable[int], size: int = 5) -> BingoBoard:
        """Rebuild the board as the projection of a move history."""
        return cls.from_cells(history, size)

    def check_cell(self, cell: int) -> None:
        """Raise IndexError if cell is not on this board."""
        check_cell(cell, self.size)

    def is_occupied(self, cell: int) -> bool:
        self.check_cell(cell)
        return bool(self.occupied[cell])

    def empty_cells(self) -> List[int]:
        """Indices of unmarked cells in ascending order."""
        return [int(i) for i in np.flatnonzero(~self.occupied)]

    def occupied_count(self) -> int:
        return int(self.occupied.sum())

    def is_full(self) -> bool:
        return bool(self.occupied.all())

    def with_marked(self, cell: int) -> BingoBoard:
        """Return a copy of this board with one more cell marked."""
        self.check_cell(cell)
        marked = self.occupied.copy()
        marked[cell] = True
        return BingoBoard(marked)

    def copy(self) -> BingoBoard:
        return BingoBoard(self.occupied.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BingoBoard):
            return NotImplemented
        return np.array_equal(self.occupied, other.occupied)

    def __repr__(self) -> str:
        return f"BingoBoard({self.size}×{self.size}, {self.occupied_count()} marked)"
