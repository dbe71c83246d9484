from __future__ import annotations

import numpy as np

from tetris_sim.engine import SPAWN_X, SPAWN_Y, TetrisEngine
from tetris_sim.game_state import GameState, Phase
from tetris_sim.sound import SoundEvent
from tetris_sim.tetromino import Tetromino, TetrominoType


class Recorder:
    def __init__(self) -> None:
        self.states: list[GameState] = []
        self.sounds: list[SoundEvent] = []

    def __call__(self, state: GameState) -> None:
        self.states.append(state)


def make_engine() -> tuple[TetrisEngine, Recorder]:
    recorder = Recorder()
    engine = TetrisEngine(recorder, deterministic_bag=True)
    engine.set_sound_callback(recorder.sounds.append)
    return engine, recorder


def test_initial_state() -> None:
    engine, recorder = make_engine()
    state = engine.get_state()
    assert state.phase is Phase.PLAYING
    assert state.current_piece == Tetromino(TetrominoType.I, 0, SPAWN_X, SPAWN_Y)
    assert state.next_piece.shape == TetrominoType.O
    assert state.bag == (
        TetrominoType.T,
        TetrominoType.S,
        TetrominoType.Z,
        TetrominoType.J,
        TetrominoType.L,
    )
    assert (state.score, state.level, state.lines, state.lines_cleared_total) == (0, 1, 0, 0)
    assert not state.board.grid.any()
    assert recorder.states == []


def test_move_left_until_wall() -> None:
    engine, recorder = make_engine()
    for _ in range(3):
        engine.move(-1)
    piece = engine.get_state().current_piece
    assert min(x for x, _ in piece.cells()) == 0
    emitted = len(recorder.states)

    engine.move(-1)
    engine.move(-1)

    assert engine.get_state().current_piece == piece
    assert len(recorder.states) == emitted


def test_move_right_until_wall() -> None:
    engine, _ = make_engine()
    for _ in range(6):
        engine.move(1)
    piece = engine.get_state().current_piece
    assert max(x for x, _ in piece.cells()) == 9
    assert piece.x == 6


def test_rotation_refused_when_blocked() -> None:
    engine, _ = make_engine()
    engine.rotate()
    for _ in range(6):
        engine.move(-1)
    piece = engine.get_state().current_piece
    assert piece.rotation == 1
    assert {x for x, _ in piece.cells()} == {0}

    # The next orientation is horizontal and would stick out of the left wall.
    engine.rotate()
    assert engine.get_state().current_piece == piece


def test_rotate_replaces_piece() -> None:
    engine, recorder = make_engine()
    engine.rotate()
    state = engine.get_state()
    assert state.current_piece.rotation == 1
    assert recorder.states[-1].current_piece == state.current_piece


def test_tick_waits_for_drop_interval() -> None:
    engine, _ = make_engine()
    engine.tick(0)
    engine.tick(999)
    assert engine.get_state().current_piece.y == 0
    engine.tick(1000)
    assert engine.get_state().current_piece.y == 1
    assert engine.get_state().last_drop_time == 1000
    engine.tick(1999)
    assert engine.get_state().current_piece.y == 1
    engine.tick(2000)
    assert engine.get_state().current_piece.y == 2


def test_fast_drop_caps_interval_and_throttles_sound() -> None:
    engine, recorder = make_engine()
    engine.set_fast_drop(True)
    for now in (150, 200, 250, 300):
        engine.tick(now)
    assert engine.get_state().current_piece.y == 4
    assert recorder.sounds == [SoundEvent.SOFTDROP, SoundEvent.SOFTDROP]

    engine.set_fast_drop(False)
    engine.tick(350)
    assert engine.get_state().current_piece.y == 4


def test_natural_lock_spawns_next_piece() -> None:
    engine, recorder = make_engine()
    for step in range(1, 19):
        engine.tick(step * 1000)
    assert engine.get_state().current_piece.y == 18

    engine.tick(19000)

    state = engine.get_state()
    assert recorder.sounds == [SoundEvent.DROP]
    assert state.board.grid[19, 3:7].all()
    assert state.current_piece == Tetromino(TetrominoType.O, 0, SPAWN_X, SPAWN_Y)
    assert state.next_piece.shape == TetrominoType.T
    assert state.last_drop_time == 19000

    engine.tick(19999)
    assert engine.get_state().current_piece.y == 0
    engine.tick(20000)
    assert engine.get_state().current_piece.y == 1


def test_tick_spawns_when_no_piece_is_falling() -> None:
    engine, _ = make_engine()
    engine._state.current_piece = None
    engine.tick(1000)
    state = engine.get_state()
    assert state.current_piece.shape == TetrominoType.O
    assert state.next_piece.shape == TetrominoType.T


def test_pause_blocks_ticks_and_intents() -> None:
    engine, _ = make_engine()
    assert engine.toggle_pause() is True
    assert engine.phase is Phase.PAUSED
    before = engine.get_state()

    engine.tick(5000)
    engine.move(1)
    engine.rotate()
    engine.hard_drop()

    after = engine.get_state()
    assert after.current_piece == before.current_piece
    assert not after.board.grid.any()

    assert engine.toggle_pause() is True
    assert engine.phase is Phase.PLAYING
    engine.tick(5000)
    assert engine.get_state().current_piece.y == 1


def test_hard_drop_locks_without_drop_sound() -> None:
    engine, recorder = make_engine()
    engine.hard_drop()
    state = engine.get_state()
    assert state.board.grid[19, 3:7].all()
    assert state.current_piece.shape == TetrominoType.O
    assert SoundEvent.DROP not in recorder.sounds
    assert len(state.particles) == 12


def test_snapshots_are_not_mutated_later() -> None:
    engine, recorder = make_engine()
    snapshot = engine.get_state()
    engine.move(-1)
    emitted = recorder.states[-1]
    engine.hard_drop()

    assert snapshot.current_piece.x == SPAWN_X
    assert not snapshot.board.grid.any()
    assert not emitted.board.grid.any()
    assert snapshot.board is not engine.get_state().board


def test_sound_callback_last_registration_wins() -> None:
    engine, _ = make_engine()
    first: list[SoundEvent] = []
    second: list[SoundEvent] = []
    engine.set_sound_callback(first.append)
    engine.set_sound_callback(second.append)
    for step in range(1, 20):
        engine.tick(step * 1000)
    assert first == []
    assert second == [SoundEvent.DROP]


def test_particles_fade_out() -> None:
    engine, recorder = make_engine()
    engine.hard_drop()
    engine.update_particles(16)
    particles = engine.get_state().particles
    assert len(particles) == 12
    assert all(0 < p.life < 1 for p in particles)

    engine.update_particles(50)
    assert engine.get_state().particles == ()

    emitted = len(recorder.states)
    engine.update_particles(16)
    assert len(recorder.states) == emitted


def test_frame_runs_all_time_steps() -> None:
    engine, _ = make_engine()
    engine._state.board.grid[19, 4:] = 1
    for _ in range(3):
        engine.move(-1)
    engine.frame(0)
    engine.hard_drop()
    assert engine.phase is Phase.CLEARING_LINES

    engine.frame(10)
    assert engine.phase is Phase.CLEARING_LINES
    assert len(engine.get_state().particles) == 12

    engine.frame(400)
    state = engine.get_state()
    assert state.phase is Phase.PLAYING
    assert state.particles == ()
    assert not state.board.grid.any()
    assert state.current_piece.shape == TetrominoType.O


def test_restart_resets_everything() -> None:
    engine, recorder = make_engine()
    engine._state.board.grid[19, 4:] = 1
    engine.hard_drop()
    engine._state.score = 1234
    engine.set_fast_drop(True)

    engine.restart()

    state = engine.get_state()
    assert recorder.states[-1].score == 0
    assert state.score == 0
    assert state.level == 1
    assert state.lines_cleared_total == 0
    assert state.lines_clearing == ()
    assert state.particles == ()
    assert not state.board.grid.any()
    assert state.current_piece.shape == TetrominoType.I
    assert not engine.fast_drop
    assert np.array_equal(state.board.grid, np.zeros((20, 10), dtype=np.uint8))
