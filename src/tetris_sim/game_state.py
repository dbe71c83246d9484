"""High level game state container."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence

from .bag import Bag
from .board import Board
from .particles import Particle
from .tetromino import Tetromino


class Phase(str, Enum):
    """Engine state machine phases, derived from the state flags."""

    PLAYING = "playing"
    PAUSED = "paused"
    CLEARING_LINES = "clearing_lines"
    GAME_OVER = "game_over"


@dataclass
class GameState:
    """State for a Tetris game session.

    The engine owns one mutable instance.  Observers only ever receive copies
    produced by :meth:`snapshot`, which share nothing mutable with the live
    state.
    """

    board: Board = field(default_factory=Board)
    current_piece: Optional[Tetromino] = None
    next_piece: Optional[Tetromino] = None
    score: int = 0
    level: int = 1
    lines: int = 0
    lines_cleared_total: int = 0
    last_lines_cleared: int = 0
    game_over: bool = False
    paused: bool = False
    bag: Bag = ()
    lines_clearing: Sequence[int] = ()
    lines_clearing_start_time: float = 0.0
    particles: Sequence[Particle] = ()
    last_drop_time: float = 0.0

    @property
    def phase(self) -> Phase:
        if self.game_over:
            return Phase.GAME_OVER
        if self.paused:
            return Phase.PAUSED
        if self.lines_clearing:
            return Phase.CLEARING_LINES
        return Phase.PLAYING

    def snapshot(self) -> "GameState":
        """Return a point-in-time copy safe to hand to observers."""

        return replace(
            self,
            board=self.board.copy(),
            bag=tuple(self.bag),
            lines_clearing=tuple(self.lines_clearing),
            particles=tuple(self.particles),
        )
