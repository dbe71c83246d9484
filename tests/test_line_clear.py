from __future__ import annotations

import pytest

from tetris_sim.board import Board
from tetris_sim.engine import LINE_CLEAR_ANIMATION_MS, LINE_SCORES, TetrisEngine
from tetris_sim.game_state import Phase
from tetris_sim.sound import SoundEvent, line_clear_event
from tetris_sim.tetromino import TetrominoType


def make_engine() -> tuple[TetrisEngine, list[SoundEvent]]:
    sounds: list[SoundEvent] = []
    engine = TetrisEngine(deterministic_bag=True)
    engine.set_sound_callback(sounds.append)
    return engine, sounds


def fill_rows_except_left_column(engine: TetrisEngine, count: int) -> None:
    for row in range(20 - count, 20):
        engine._state.board.grid[row, 1:] = 1


def drop_vertical_i_in_left_column(engine: TetrisEngine) -> None:
    engine.rotate()
    for _ in range(5):
        engine.move(-1)
    engine.hard_drop()


def test_single_line_clear_after_animation() -> None:
    engine, sounds = make_engine()
    engine._state.board.grid[19, 4:] = 1
    for _ in range(3):
        engine.move(-1)
    engine.tick(0)
    engine.hard_drop()

    state = engine.get_state()
    assert state.phase is Phase.CLEARING_LINES
    assert state.lines_clearing == (19,)
    assert state.current_piece is None
    assert state.score == 100
    assert state.lines == 1
    assert state.lines_cleared_total == 1
    assert state.last_lines_cleared == 1
    assert sounds == [SoundEvent.LINECLEAR1]
    # The row is still on the board until the animation finishes.
    assert state.board.grid[19].all()

    engine.tick(5000)
    engine.move(1)
    engine.advance_clear_animation(LINE_CLEAR_ANIMATION_MS - 1)
    assert engine.phase is Phase.CLEARING_LINES

    engine.advance_clear_animation(LINE_CLEAR_ANIMATION_MS)

    state = engine.get_state()
    assert state.phase is Phase.PLAYING
    assert state.lines_clearing == ()
    assert not state.board.grid.any()
    assert state.current_piece.shape == TetrominoType.O
    assert state.last_drop_time == LINE_CLEAR_ANIMATION_MS


@pytest.mark.parametrize("count", [1, 2, 3, 4])
def test_score_scales_with_rows_and_level(count: int) -> None:
    engine, sounds = make_engine()
    engine._state.level = 2
    fill_rows_except_left_column(engine, count)

    drop_vertical_i_in_left_column(engine)

    state = engine.get_state()
    assert state.score == LINE_SCORES[count] * 2
    assert state.last_lines_cleared == count
    assert state.lines_clearing == tuple(range(19, 19 - count, -1))
    assert sounds == [SoundEvent(f"lineclear{count}")]


def test_tetris_removes_four_rows() -> None:
    engine, sounds = make_engine()
    fill_rows_except_left_column(engine, 4)
    engine._state.board.grid[15, 5] = 1

    drop_vertical_i_in_left_column(engine)
    state = engine.get_state()
    assert state.last_lines_cleared == 4
    assert state.score == 800
    assert SoundEvent.LINECLEAR4 in sounds

    engine.advance_clear_animation(LINE_CLEAR_ANIMATION_MS)
    grid = engine.get_state().board.grid
    # Only the block that sat above the cleared rows survives, four rows lower.
    assert int(grid.sum()) == 1
    assert grid[19, 5] == 1


def test_level_up_when_crossing_ten_lines() -> None:
    engine, sounds = make_engine()
    engine._state.lines = 8
    engine._state.lines_cleared_total = 8
    fill_rows_except_left_column(engine, 4)

    drop_vertical_i_in_left_column(engine)

    state = engine.get_state()
    assert state.lines_cleared_total == 12
    assert state.level == 2
    # Points use the level in force before the clear.
    assert state.score == 800
    assert sounds == [SoundEvent.LINECLEAR4, SoundEvent.LEVELUP]


def test_no_level_up_below_threshold() -> None:
    engine, sounds = make_engine()
    engine._state.lines_cleared_total = 5
    fill_rows_except_left_column(engine, 4)

    drop_vertical_i_in_left_column(engine)

    state = engine.get_state()
    assert state.lines_cleared_total == 9
    assert state.level == 1
    assert SoundEvent.LEVELUP not in sounds


def test_exact_threshold_levels_up_once() -> None:
    engine, sounds = make_engine()
    engine._state.lines_cleared_total = 9
    fill_rows_except_left_column(engine, 1)

    drop_vertical_i_in_left_column(engine)

    assert engine.get_state().level == 2
    assert sounds.count(SoundEvent.LEVELUP) == 1


@pytest.mark.parametrize("count", [0, 5])
def test_line_clear_event_falls_back_to_generic_cue(count) -> None:
    assert line_clear_event(count) is SoundEvent.LINECLEAR


def test_oversized_clear_scores_nothing(monkeypatch) -> None:
    engine, sounds = make_engine()
    monkeypatch.setattr(Board, "find_full_rows", lambda self: [19, 18, 17, 16, 15])
    engine.hard_drop()

    state = engine.get_state()
    assert state.score == 0
    assert state.lines_clearing == (19, 18, 17, 16, 15)
    assert state.last_lines_cleared == 5
    assert state.level == 1
    assert sounds == [SoundEvent.LINECLEAR]
