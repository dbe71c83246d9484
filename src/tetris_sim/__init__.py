"""Deterministic falling-block puzzle simulation."""

from .board import Board, Cell
from .tetromino import Tetromino, TetrominoType, shape_matrix
from .bag import draw, new_bag
from .game_state import GameState, Phase
from .particles import Particle
from .sound import SoundEvent
from .engine import TetrisEngine
from .achievements import AchievementContext, newly_unlocked
from .utils import can_move, drop_interval_ms, render_grid

__all__ = [
    "Board",
    "Cell",
    "Tetromino",
    "TetrominoType",
    "GameState",
    "Phase",
    "Particle",
    "SoundEvent",
    "TetrisEngine",
    "AchievementContext",
    "newly_unlocked",
    "can_move",
    "draw",
    "drop_interval_ms",
    "new_bag",
    "render_grid",
    "shape_matrix",
]
