"""Board representation for the Tetris playfield."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .tetromino import PIECE_COLORS, Tetromino, TetrominoType


# Dimensions of the standard Tetris board.
WIDTH = 10
HEIGHT = 20

Grid = NDArray[np.uint8]

# Mapping from ``TetrominoType`` to the integer stored in the grid.  The
# specific numeric values are not important as long as ``0`` represents an empty
# cell.
PIECE_VALUES = {t: i + 1 for i, t in enumerate(TetrominoType)}
VALUE_COLORS = {value: PIECE_COLORS[t] for t, value in PIECE_VALUES.items()}


@dataclass(frozen=True)
class Cell:
    """A single board cell as seen by renderers."""

    filled: bool
    color: Optional[str] = None


EMPTY_CELL = Cell(False)


def create_empty_grid() -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((HEIGHT, WIDTH), dtype=np.uint8)


class Board:
    """Tetris board holding the occupied cells.

    Row ``0`` is the top of the board.  Pieces may poke above it (negative
    ``y``) while spawning; that region is always treated as open.
    """

    width: int = WIDTH
    height: int = HEIGHT

    def __init__(self) -> None:
        self.grid: Grid = create_empty_grid()

    def copy(self) -> "Board":
        """Return an independent copy of the board."""

        board = Board()
        board.grid = self.grid.copy()
        return board

    def get_cell(self, row: int, col: int) -> int:
        """Safely return the value at ``(row, col)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if 0 <= row < self.height and 0 <= col < self.width:
            return int(self.grid[row, col])
        raise IndexError("Cell out of bounds")

    def set_cell(self, row: int, col: int, value: int) -> None:
        """Safely set the value at ``(row, col)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if 0 <= row < self.height and 0 <= col < self.width:
            self.grid[row, col] = np.uint8(value)
        else:
            raise IndexError("Cell out of bounds")

    def is_empty(self, row: int, col: int) -> bool:
        """Return ``True`` if the cell at ``(row, col)`` is empty.

        Any coordinates outside the board are treated as occupied.
        """

        if 0 <= row < self.height and 0 <= col < self.width:
            return bool(self.grid[row, col] == 0)
        return False

    def cell(self, row: int, col: int) -> Cell:
        """Return the :class:`Cell` at ``(row, col)``."""

        value = self.get_cell(row, col)
        if value == 0:
            return EMPTY_CELL
        return Cell(True, VALUE_COLORS.get(value))

    def cells(self) -> Tuple[Tuple[Cell, ...], ...]:
        """Return the whole board as rows of :class:`Cell`."""

        return tuple(
            tuple(self.cell(row, col) for col in range(self.width))
            for row in range(self.height)
        )

    def is_valid(self, tetromino: Tetromino) -> bool:
        """Return ``True`` if ``tetromino`` fits on the board.

        Every block must lie within the side walls and above the floor.  Blocks
        above the top edge are never checked against the contents of the grid.
        """

        for x, y in tetromino.cells():
            if not (0 <= x < self.width) or y >= self.height:
                return False
            if y >= 0 and self.grid[y, x] != 0:
                return False
        return True

    def merge(self, tetromino: Tetromino) -> None:
        """Write the tetromino's on-board blocks into the grid.

        Blocks outside the board are dropped.
        """

        value = np.uint8(PIECE_VALUES[tetromino.shape])
        for x, y in tetromino.cells():
            if 0 <= y < self.height and 0 <= x < self.width:
                self.grid[y, x] = value

    def find_full_rows(self) -> List[int]:
        """Return the indices of completed rows, bottom row first."""

        full_rows = np.flatnonzero(np.all(self.grid != 0, axis=1))
        return [int(row) for row in full_rows[::-1]]

    def remove_rows(self, rows: Iterable[int]) -> None:
        """Delete ``rows`` and let everything above them settle.

        The remaining rows keep their relative order and empty rows are
        inserted at the top, so the board height never changes.

        Raises:
            IndexError: If a row index is outside the board.
        """

        keep = np.ones(self.height, dtype=bool)
        for row in rows:
            if not 0 <= row < self.height:
                raise IndexError("Row out of bounds")
            keep[row] = False
        removed = self.height - int(np.count_nonzero(keep))
        if removed:
            new_rows = np.zeros((removed, self.width), dtype=self.grid.dtype)
            self.grid = np.vstack((new_rows, self.grid[keep]))
