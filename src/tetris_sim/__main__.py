"""Headless simulation for the Tetris engine.

Run with: `python -m tetris_sim`

A scripted player drives the engine for a fixed number of simulated frames:
every few frames it turns the falling piece a random number of times, shifts
it toward a random column and hard-drops it.  The final board is printed as
ASCII together with the score line.  Pass ``--help`` for the options.
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional, Sequence

from .engine import TetrisEngine
from .game_state import GameState
from .sound import SoundEvent
from .utils import render_grid


LOGGER = logging.getLogger(__name__)


def _print_grid(grid: list[list[int]]) -> None:
    for row in grid:
        print("".join("#" if cell else "." for cell in row))


def play_turn(engine: TetrisEngine, rng: random.Random) -> None:
    """Place the current piece at a random rotation and column."""

    state = engine.get_state()
    if state.current_piece is None:
        return
    for _ in range(rng.randrange(4)):
        engine.rotate()
    target = rng.randrange(state.board.width)
    for _ in range(state.board.width):
        piece = engine.get_state().current_piece
        if piece is None:
            return
        left = min(x for x, _ in piece.cells())
        if left == target:
            break
        before = piece
        engine.move(1 if target > left else -1)
        if engine.get_state().current_piece == before:
            break
    engine.hard_drop()


def simulate(
    *,
    frames: int,
    frame_ms: float = 1000.0 / 60,
    drop_every: int = 30,
    seed: Optional[int] = None,
    deterministic_bag: bool = False,
) -> GameState:
    """Run the scripted player and return the final snapshot."""

    rng = random.Random(seed)
    engine = TetrisEngine(rng=random.Random(seed), deterministic_bag=deterministic_bag)
    events: List[SoundEvent] = []
    engine.set_sound_callback(events.append)

    for index in range(frames):
        now = index * frame_ms
        engine.frame(now)
        if engine.get_state().game_over:
            LOGGER.info("Game over after %d frames", index + 1)
            break
        if drop_every > 0 and index % drop_every == drop_every - 1:
            play_turn(engine, rng)

    cleared = sum(1 for e in events if e.value.startswith("lineclear"))
    LOGGER.info("%d sound cues, %d line clears", len(events), cleared)
    return engine.get_state()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--frames", type=int, default=3600, help="Number of frames to simulate.")
    parser.add_argument(
        "--frame-ms",
        type=float,
        default=1000.0 / 60,
        help="Simulated milliseconds per frame.",
    )
    parser.add_argument(
        "--drop-every",
        type=int,
        default=30,
        help="Hard-drop a piece every N frames (0 lets gravity do all the work).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for pieces and player.")
    parser.add_argument(
        "--deterministic-bag",
        action="store_true",
        help="Deal pieces in fixed I, O, T, S, Z, J, L order.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    args = parser.parse_args(argv)
    if args.frames < 0:
        parser.error("--frames must not be negative")
    if args.frame_ms <= 0:
        parser.error("--frame-ms must be positive")
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    state = simulate(
        frames=args.frames,
        frame_ms=args.frame_ms,
        drop_every=args.drop_every,
        seed=args.seed,
        deterministic_bag=args.deterministic_bag,
    )
    _print_grid(render_grid(state.board, state.current_piece))
    print(
        f"Score: {state.score}  Level: {state.level}  "
        f"Lines: {state.lines_cleared_total}  Game over: {state.game_over}"
    )


if __name__ == "__main__":
    main()
