"""Simple pygame front-end for the Tetris engine.

This module is the host side of the engine: it turns keyboard events into
intents, feeds the engine one timestamp per frame, draws the latest snapshot
and records finished games and achievements in the score store.  All game
rules live in :mod:`tetris_sim.engine`.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable, List, Optional

import pygame

from .achievements import AchievementContext, newly_unlocked
from .board import Board, VALUE_COLORS
from .engine import TetrisEngine
from .game_state import GameState
from .particles import CELL_SIZE
from .sound import SoundEvent
from .storage import ScoreStore

LOGGER = logging.getLogger(__name__)

# Frames per second to run the game loop at
FPS = 60
PANEL_WIDTH = 6 * CELL_SIZE

BACKGROUND = (0, 0, 0)
GRID_LINE = (50, 50, 50)
CLEARING = (255, 255, 255)

CELL_COLORS = {0: BACKGROUND}
for value, hex_color in VALUE_COLORS.items():
    CELL_COLORS[value] = pygame.Color(hex_color)


def _draw_cell(screen: pygame.Surface, col: int, row: int, color, offset_x: int = 0) -> None:
    rect = pygame.Rect(offset_x + col * CELL_SIZE, row * CELL_SIZE, CELL_SIZE, CELL_SIZE)
    pygame.draw.rect(screen, color, rect)
    pygame.draw.rect(screen, GRID_LINE, rect, 1)


def draw_board(screen: pygame.Surface, state: GameState) -> None:
    """Render the locked cells, flashing rows that are being cleared."""

    board = state.board
    for r in range(board.height):
        for c in range(board.width):
            if r in state.lines_clearing:
                color = CLEARING
            else:
                color = CELL_COLORS[int(board.grid[r][c])]
            _draw_cell(screen, c, r, color)


def draw_pieces(screen: pygame.Surface, state: GameState) -> None:
    """Render the falling piece and the next-piece preview."""

    if state.current_piece is not None:
        color = pygame.Color(state.current_piece.color)
        for x, y in state.current_piece.cells():
            if y >= 0:
                _draw_cell(screen, x, y, color)
    if state.next_piece is not None:
        color = pygame.Color(state.next_piece.color)
        preview = state.next_piece.at(1, 1)
        for x, y in preview.cells():
            _draw_cell(screen, x, y, color, offset_x=Board.width * CELL_SIZE)


def draw_particles(screen: pygame.Surface, state: GameState) -> None:
    for p in state.particles:
        radius = max(1, int(p.size * p.life / 2))
        pygame.draw.circle(screen, pygame.Color(p.color), (int(p.x), int(p.y)), radius)


def handle_key(
    event: pygame.event.Event,
    engine: TetrisEngine,
    play: Optional[Callable[[SoundEvent], None]] = None,
) -> None:
    """Translate a keyboard event into an engine intent."""

    play = play or (lambda _e: None)
    if event.type == pygame.KEYUP:
        if event.key == pygame.K_DOWN:
            engine.set_fast_drop(False)
        return
    if event.type != pygame.KEYDOWN:
        return

    if engine.get_state().game_over:
        if event.key == pygame.K_r:
            engine.restart()
        return

    if event.key == pygame.K_LEFT:
        play(SoundEvent.MOVE)
        engine.move(-1)
    elif event.key == pygame.K_RIGHT:
        play(SoundEvent.MOVE)
        engine.move(1)
    elif event.key == pygame.K_UP:
        play(SoundEvent.ROTATE)
        engine.rotate()
    elif event.key == pygame.K_DOWN:
        engine.set_fast_drop(True)
    elif event.key == pygame.K_SPACE:
        play(SoundEvent.HARDDROP)
        engine.hard_drop()
    elif event.key == pygame.K_p:
        play(SoundEvent.CLICK)
        engine.toggle_pause()
    elif event.key == pygame.K_r:
        engine.restart()


class GameRunner:
    """Manage the game loop with start/pause/resume/stop controls."""

    def __init__(self, store: Optional[ScoreStore] = None) -> None:
        self._running = False
        self._task: asyncio.Task | None = None
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._store = store
        self._latest: Optional[GameState] = None
        self._recorded = False
        self.sounds: List[SoundEvent] = []
        self.engine = TetrisEngine(self._on_state)
        self.engine.set_sound_callback(self._play)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self.engine.get_state().paused

    def _play(self, event: SoundEvent) -> None:
        if self._store is not None and not self._store.preferences["sound_enabled"]:
            return
        # No synthesizer here; cues are recorded for whoever wants them.
        self.sounds.append(event)
        LOGGER.debug("Sound: %s", event.value)

    def _on_state(self, state: GameState) -> None:
        self._latest = state
        if self._store is None:
            return
        unlocked = newly_unlocked(
            AchievementContext.from_state(state), self._store.achievements
        )
        for achievement_id in self._store.unlock(unlocked):
            LOGGER.info("Achievement unlocked: %s", achievement_id)
        if state.game_over and not self._recorded:
            self._recorded = True
            if self._store.record_game(state):
                LOGGER.info("New high score: %d", state.score)
        elif not state.game_over:
            self._recorded = False

    def _draw(self) -> None:
        if self._screen is None or self._latest is None:
            return
        state = self._latest
        self._screen.fill(BACKGROUND)
        draw_board(self._screen, state)
        draw_pieces(self._screen, state)
        draw_particles(self._screen, state)
        status = "Game over - R to restart - " if state.game_over else ""
        if state.paused:
            status = "Paused - "
        pygame.display.set_caption(
            f"Tetris - {status}Score: {state.score} Level: {state.level} "
            f"Lines: {state.lines_cleared_total}"
        )
        pygame.display.flip()

    async def _run_loop(self) -> None:
        # Ensure SDL/pygame binds to the visible canvas in the page when running on Web.
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_CANVAS_ELEMENT_ID", "#canvas")
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_KEYBOARD_ELEMENT", "#canvas")
        pygame.init()
        board_px = Board.width * CELL_SIZE + PANEL_WIDTH
        board_py = Board.height * CELL_SIZE
        self._screen = pygame.display.set_mode((board_px, board_py))
        pygame.display.set_caption("Tetris")
        self._clock = pygame.time.Clock()

        self.engine.restart()
        self._play(SoundEvent.START)
        LOGGER.info("Game started")

        self._running = True
        while self._running:
            if self._clock:
                self._clock.tick(FPS)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._running = False
                else:
                    handle_key(event, self.engine, self._play)

            self.engine.frame(float(pygame.time.get_ticks()))
            self._draw()

            # Yield to the browser/host event loop to keep UI responsive
            await asyncio.sleep(0)

        pygame.quit()
        LOGGER.info("Game stopped")

    def start(self) -> None:
        if self._task and not self._task.done():
            LOGGER.info("Game already running")
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop (e.g., plain Python); run synchronously
            asyncio.run(self._run_loop())
        else:
            self._task = loop.create_task(self._run_loop())

    def pause(self) -> None:
        if not self._running:
            LOGGER.info("Pause ignored: game not running")
            return
        if not self.paused:
            self.engine.toggle_pause()

    def resume(self) -> None:
        if not self._running:
            LOGGER.info("Resume ignored: game not running")
            return
        if self.paused:
            self.engine.toggle_pause()

    def stop(self) -> None:
        if not self._running:
            LOGGER.info("Stop ignored: game not running")
            return
        self._running = False


def main() -> None:
    """Run the desktop game until the window is closed."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    GameRunner(ScoreStore()).start()


if __name__ == "__main__":  # pragma: no cover - manual execution only
    main()
