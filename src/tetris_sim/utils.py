"""Utility helpers for the Tetris engine."""

from __future__ import annotations

from typing import List, Optional

from .board import Board, PIECE_VALUES
from .tetromino import Tetromino


BASE_DROP_INTERVAL_MS = 1000
MIN_DROP_INTERVAL_MS = 100
LEVEL_SPEED_FACTOR = 0.8
FAST_DROP_INTERVAL_MS = 50


def drop_interval_ms(level: int, fast_drop: bool = False) -> float:
    """Return the fall interval in milliseconds for ``level``.

    The interval shrinks geometrically from level ``1`` but never drops below
    ``MIN_DROP_INTERVAL_MS``.  While soft drop is held the interval is capped
    at ``FAST_DROP_INTERVAL_MS`` whatever the level.
    """

    interval = max(
        float(MIN_DROP_INTERVAL_MS),
        BASE_DROP_INTERVAL_MS * (LEVEL_SPEED_FACTOR ** (level - 1)),
    )
    if fast_drop:
        return min(float(FAST_DROP_INTERVAL_MS), interval)
    return interval


def can_move(board: Board, tetromino: Tetromino, dx: int, dy: int) -> bool:
    """Return ``True`` if ``tetromino`` can move by ``dx`` and ``dy`` on ``board``."""

    return board.is_valid(tetromino.offset(dx, dy))


def render_grid(board: Board, active: Optional[Tetromino] = None) -> List[List[int]]:
    """Flatten ``board`` and the falling piece into nested lists of ints.

    Piece cells come as ``(x, y)`` pairs and land at ``grid[y][x]``, the same
    slot as ``board.get_cell(y, x)``.  Piece cells above the top row are skipped and the
    board itself is left untouched.
    """

    grid = [[int(value) for value in row] for row in board.grid]
    if active is not None:
        for x, y in active.cells():
            if 0 <= y < board.height and 0 <= x < board.width:
                grid[y][x] = PIECE_VALUES[active.shape]
    return grid
