"""Deterministic falling-block simulation engine.

:class:`TetrisEngine` owns the board, the falling and upcoming pieces, the
score/level/line counters, cosmetic particles and the line-clear animation
timer.  The host drives it with timestamps:

* :meth:`TetrisEngine.tick` applies gravity,
* :meth:`TetrisEngine.advance_clear_animation` removes cleared rows once the
  animation window has elapsed,
* :meth:`TetrisEngine.update_particles` integrates the particles,

or :meth:`TetrisEngine.frame` to do all three at once.  Player intents are
plain method calls validated against the board; anything issued in the wrong
phase or that would not fit is ignored.  After every mutation the registered
observer receives a fresh :class:`~tetris_sim.game_state.GameState` snapshot.

The engine never reads a clock.  Every timestamp comes from the host, so a
test can replay a game frame by frame.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Tuple

from .bag import Bag, draw
from .board import Board, WIDTH
from .game_state import GameState, Phase
from .particles import spawn_particles, update_particles
from .sound import SoundCallback, SoundEvent, line_clear_event
from .tetromino import Tetromino
from .utils import can_move, drop_interval_ms


LOGGER = logging.getLogger(__name__)

LINE_SCORES = (0, 100, 300, 500, 800)
LINES_PER_LEVEL = 10
LINE_CLEAR_ANIMATION_MS = 400
SOFTDROP_SOUND_THROTTLE_MS = 120

SPAWN_X = WIDTH // 2 - 2
SPAWN_Y = 0

StateCallback = Callable[[GameState], None]


class TetrisEngine:
    """Single-player engine with one fixed rule set."""

    def __init__(
        self,
        on_state_change: Optional[StateCallback] = None,
        *,
        rng: Optional[random.Random] = None,
        deterministic_bag: bool = False,
    ) -> None:
        self._on_state_change = on_state_change
        self._on_sound: Optional[SoundCallback] = None
        self._rng = rng or random.Random()
        self._deterministic_bag = deterministic_bag
        self._now = 0.0
        self._last_frame_time: Optional[float] = None
        self._fast_drop = False
        self._last_soft_drop_sound_time = 0.0
        self._state = self._initial_state()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def set_sound_callback(self, callback: Optional[SoundCallback]) -> None:
        """Register the sound observer, replacing any previous one."""

        self._on_sound = callback

    def get_state(self) -> GameState:
        """Return a snapshot of the current state."""

        return self._state.snapshot()

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def fast_drop(self) -> bool:
        return self._fast_drop

    # ------------------------------------------------------------------
    # Time-driven steps
    # ------------------------------------------------------------------
    def tick(self, now: float) -> None:
        """Apply gravity if the drop interval has elapsed at ``now``."""

        self._now = now
        state = self._state
        if state.game_over or state.paused or state.lines_clearing:
            return

        interval = drop_interval_ms(state.level, self._fast_drop)
        if now - state.last_drop_time < interval:
            return

        piece = state.current_piece
        if piece is None:
            self._spawn()
            return

        if can_move(state.board, piece, 0, 1):
            state.current_piece = piece.offset(0, 1)
            state.last_drop_time = now
            if (
                self._fast_drop
                and now - self._last_soft_drop_sound_time >= SOFTDROP_SOUND_THROTTLE_MS
            ):
                self._last_soft_drop_sound_time = now
                self._play(SoundEvent.SOFTDROP)
            self._emit()
        else:
            self._lock()

    def advance_clear_animation(self, now: float) -> None:
        """Remove the cleared rows once the animation window has elapsed."""

        state = self._state
        if not state.lines_clearing:
            return
        self._now = now
        if now - state.lines_clearing_start_time < LINE_CLEAR_ANIMATION_MS:
            return
        state.board.remove_rows(state.lines_clearing)
        state.lines_clearing = ()
        self._spawn()

    def update_particles(self, dt: float) -> None:
        """Advance cosmetic particles by ``dt`` milliseconds."""

        if not self._state.particles:
            return
        self._state.particles = update_particles(self._state.particles, dt)
        self._emit()

    def frame(self, now: float) -> None:
        """Run every time-driven step for one host frame at ``now``."""

        dt = 0.0 if self._last_frame_time is None else now - self._last_frame_time
        self._last_frame_time = now
        self.tick(now)
        self.update_particles(dt)
        self.advance_clear_animation(now)

    # ------------------------------------------------------------------
    # Player intents
    # ------------------------------------------------------------------
    def move(self, dx: int) -> None:
        """Shift the falling piece ``dx`` columns if it fits."""

        if not self._accepts_intents():
            return
        piece = self._state.current_piece
        if can_move(self._state.board, piece, dx, 0):
            self._state.current_piece = piece.offset(dx, 0)
            self._emit()

    def rotate(self) -> None:
        """Turn the falling piece clockwise if the result fits."""

        if not self._accepts_intents():
            return
        rotated = self._state.current_piece.rotate()
        if self._state.board.is_valid(rotated):
            self._state.current_piece = rotated
            self._emit()

    def hard_drop(self) -> None:
        """Drop the falling piece to its resting place and lock it."""

        if not self._accepts_intents():
            return
        state = self._state
        piece = state.current_piece
        while can_move(state.board, piece, 0, 1):
            piece = piece.offset(0, 1)
        state.current_piece = piece
        state.particles = tuple(state.particles) + spawn_particles(piece.cells(), self._rng)
        self._lock(hard_drop=True)

    def set_fast_drop(self, enabled: bool) -> None:
        """Engage or release soft drop."""

        self._fast_drop = bool(enabled)

    def toggle_pause(self) -> bool:
        """Flip the paused flag.  Returns ``False`` once the game is over."""

        if self._state.game_over:
            return False
        self._state.paused = not self._state.paused
        LOGGER.debug("Paused" if self._state.paused else "Resumed")
        self._emit()
        return True

    def restart(self) -> None:
        """Throw the current game away and start a fresh one."""

        self._fast_drop = False
        self._last_soft_drop_sound_time = 0.0
        self._state = self._initial_state()
        LOGGER.info("Game restarted")
        self._emit()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _initial_state(self) -> GameState:
        current, bag = self._draw(())
        upcoming, bag = self._draw(bag)
        return GameState(
            board=Board(),
            current_piece=current,
            next_piece=upcoming,
            bag=bag,
            last_drop_time=self._now,
        )

    def _draw(self, bag: Bag) -> Tuple[Tetromino, Bag]:
        return draw(
            bag,
            self._rng,
            x=SPAWN_X,
            y=SPAWN_Y,
            shuffle=not self._deterministic_bag,
        )

    def _accepts_intents(self) -> bool:
        state = self._state
        return (
            not state.game_over
            and not state.paused
            and not state.lines_clearing
            and state.current_piece is not None
        )

    def _emit(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self._state.snapshot())

    def _play(self, event: SoundEvent) -> None:
        if self._on_sound is not None:
            self._on_sound(event)

    def _spawn(self) -> bool:
        """Promote the upcoming piece to the spawn position.

        A spawn that does not fit ends the game.
        """

        state = self._state
        upcoming = state.next_piece
        if upcoming is None:
            return False
        piece = upcoming.at(SPAWN_X, SPAWN_Y)
        if not state.board.is_valid(piece):
            state.game_over = True
            LOGGER.info(
                "Game over: score=%d level=%d lines=%d",
                state.score,
                state.level,
                state.lines_cleared_total,
            )
            self._play(SoundEvent.GAMEOVER)
            self._emit()
            return False

        state.next_piece, state.bag = self._draw(state.bag)
        state.current_piece = piece
        state.last_drop_time = self._now
        self._emit()
        return True

    def _lock(self, *, hard_drop: bool = False) -> None:
        """Merge the falling piece into the board and score any full rows."""

        state = self._state
        piece = state.current_piece
        if piece is None:
            return
        state.board.merge(piece)
        state.current_piece = None
        if not hard_drop:
            self._play(SoundEvent.DROP)

        full_rows = state.board.find_full_rows()
        if not full_rows:
            LOGGER.debug("Locked %s at (%d, %d)", piece.shape.value, piece.x, piece.y)
            self._spawn()
            return

        count = len(full_rows)
        state.last_lines_cleared = count
        state.lines_clearing = tuple(full_rows)
        state.lines_clearing_start_time = self._now
        self._play(line_clear_event(count))

        points = LINE_SCORES[count] if 0 <= count < len(LINE_SCORES) else 0
        state.score += points * state.level
        state.lines += count
        state.lines_cleared_total += count
        LOGGER.debug(
            "Cleared rows %s for %d points (score=%d)",
            list(full_rows),
            points * state.level,
            state.score,
        )

        new_level = state.lines_cleared_total // LINES_PER_LEVEL + 1
        if new_level > state.level:
            state.level = new_level
            LOGGER.info("Level up: %d", new_level)
            self._play(SoundEvent.LEVELUP)
        self._emit()
