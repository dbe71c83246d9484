"""Tetromino definitions and basic behaviour.

A falling piece is an immutable value: its shape, rotation state and the
``(x, y)`` position of the top-left corner of its bounding box.  Occupied cells
are never stored; they are derived from the shape matrix rotated clockwise
``rotation`` times.  Every transformation returns a new :class:`Tetromino`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from functools import lru_cache
from typing import Dict, FrozenSet, Tuple

import numpy as np
from numpy.typing import NDArray

CellPosition = Tuple[int, int]  # (x, y)

ROTATION_STATES = 4


class TetrominoType(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


# Spawn orientation of every shape.  I uses a 4x4 box, O a 2x2 box and the
# rest 3x3 boxes; rotation happens inside the box.
_BASE_SHAPES: Dict[TetrominoType, Tuple[Tuple[int, ...], ...]] = {
    TetrominoType.I: ((0, 0, 0, 0), (1, 1, 1, 1), (0, 0, 0, 0), (0, 0, 0, 0)),
    TetrominoType.O: ((1, 1), (1, 1)),
    TetrominoType.T: ((0, 1, 0), (1, 1, 1), (0, 0, 0)),
    TetrominoType.S: ((0, 1, 1), (1, 1, 0), (0, 0, 0)),
    TetrominoType.Z: ((1, 1, 0), (0, 1, 1), (0, 0, 0)),
    TetrominoType.J: ((1, 0, 0), (1, 1, 1), (0, 0, 0)),
    TetrominoType.L: ((0, 0, 1), (1, 1, 1), (0, 0, 0)),
}

PIECE_COLORS: Dict[TetrominoType, str] = {
    TetrominoType.I: "#00f0f0",
    TetrominoType.O: "#f0f000",
    TetrominoType.T: "#a000f0",
    TetrominoType.S: "#00f000",
    TetrominoType.Z: "#f00000",
    TetrominoType.J: "#0000f0",
    TetrominoType.L: "#f0a000",
}


@lru_cache(maxsize=None)
def shape_matrix(shape: TetrominoType, rotation: int) -> NDArray[np.uint8]:
    """Return the occupancy matrix for ``shape`` at ``rotation``.

    Parameters
    ----------
    shape:
        The :class:`TetrominoType` to query.
    rotation:
        Number of clockwise quarter turns.  Values are wrapped so any integer
        is accepted.

    The returned array is shared between callers and marked read-only.
    """

    base = np.array(_BASE_SHAPES[TetrominoType(shape)], dtype=np.uint8)
    matrix = np.ascontiguousarray(np.rot90(base, k=-(rotation % ROTATION_STATES)))
    matrix.setflags(write=False)
    return matrix


@lru_cache(maxsize=None)
def shape_offsets(shape: TetrominoType, rotation: int) -> Tuple[CellPosition, ...]:
    """Return the ``(dx, dy)`` offsets of the filled cells of a shape."""

    rows, cols = np.nonzero(shape_matrix(shape, rotation))
    return tuple((int(c), int(r)) for r, c in zip(rows, cols))


@dataclass(frozen=True)
class Tetromino:
    """Active or upcoming piece."""

    shape: TetrominoType
    rotation: int = 0
    x: int = 0
    y: int = 0

    def cells(self) -> FrozenSet[CellPosition]:
        """Return the global ``(x, y)`` coordinates occupied by this piece."""

        return frozenset(
            (self.x + dx, self.y + dy)
            for dx, dy in shape_offsets(self.shape, self.rotation)
        )

    def rotate(self) -> "Tetromino":
        """Return the piece turned a quarter clockwise.

        Validity is not checked here; callers test the result against the
        board and keep the original piece when it does not fit.
        """

        return replace(self, rotation=(self.rotation + 1) % ROTATION_STATES)

    def offset(self, dx: int, dy: int) -> "Tetromino":
        """Return the piece translated by ``dx`` columns and ``dy`` rows."""

        return replace(self, x=self.x + dx, y=self.y + dy)

    def at(self, x: int, y: int) -> "Tetromino":
        """Return the piece moved to the absolute position ``(x, y)``."""

        return replace(self, x=x, y=y)

    def bounding_box(self) -> Tuple[int, int]:
        """Return ``(width, height)`` of the shape matrix."""

        height, width = shape_matrix(self.shape, self.rotation).shape
        return int(width), int(height)

    @property
    def color(self) -> str:
        return PIECE_COLORS[self.shape]
