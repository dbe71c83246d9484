"""Discrete sound cues shared between the engine and the host UI."""

from __future__ import annotations

from enum import Enum
from typing import Callable


class SoundEvent(str, Enum):
    DROP = "drop"
    ROTATE = "rotate"
    MOVE = "move"
    SOFTDROP = "softdrop"
    HARDDROP = "harddrop"
    LEVELUP = "levelup"
    LINECLEAR = "lineclear"
    LINECLEAR1 = "lineclear1"
    LINECLEAR2 = "lineclear2"
    LINECLEAR3 = "lineclear3"
    LINECLEAR4 = "lineclear4"
    GAMEOVER = "gameover"
    # Emitted by the host UI only.
    START = "start"
    CLICK = "click"


SoundCallback = Callable[[SoundEvent], None]

_LINE_CLEAR_EVENTS = {
    1: SoundEvent.LINECLEAR1,
    2: SoundEvent.LINECLEAR2,
    3: SoundEvent.LINECLEAR3,
    4: SoundEvent.LINECLEAR4,
}


def line_clear_event(count: int) -> SoundEvent:
    """Return the cue for clearing ``count`` rows at once."""

    return _LINE_CLEAR_EVENTS.get(count, SoundEvent.LINECLEAR)
