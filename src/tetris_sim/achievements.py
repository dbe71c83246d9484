"""Achievement rule table.

Achievements are evaluated by the host from state snapshots.  The table is
pure: given the current numbers and the ids already unlocked it reports which
ids unlock now.  Nothing here is stored; persisting unlocked ids is the score
store's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple

from .game_state import GameState


@dataclass(frozen=True)
class AchievementContext:
    """Numbers an achievement rule can look at."""

    score: int
    level: int
    lines: int
    lines_cleared_total: int
    last_lines_cleared: int
    game_over: bool

    @classmethod
    def from_state(cls, state: GameState) -> "AchievementContext":
        return cls(
            score=state.score,
            level=state.level,
            lines=state.lines,
            lines_cleared_total=state.lines_cleared_total,
            last_lines_cleared=state.last_lines_cleared,
            game_over=state.game_over,
        )


@dataclass(frozen=True)
class Achievement:
    id: str
    icon: str
    check: Callable[[AchievementContext], bool]

    @property
    def name_key(self) -> str:
        return f"achievement.{self.id}.name"

    @property
    def desc_key(self) -> str:
        return f"achievement.{self.id}.desc"


ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement("first_clear", "🌟", lambda ctx: ctx.lines_cleared_total >= 1),
    Achievement("double", "📐", lambda ctx: ctx.last_lines_cleared == 2),
    Achievement("triple", "🔥", lambda ctx: ctx.last_lines_cleared == 3),
    Achievement("tetris", "🎯", lambda ctx: ctx.last_lines_cleared == 4),
    Achievement("score_1k", "💯", lambda ctx: ctx.score >= 1000),
    Achievement("score_5k", "⭐", lambda ctx: ctx.score >= 5000),
    Achievement("score_10k", "🏆", lambda ctx: ctx.score >= 10000),
    Achievement("lines_25", "📊", lambda ctx: ctx.lines_cleared_total >= 25),
    Achievement("lines_50", "📈", lambda ctx: ctx.lines_cleared_total >= 50),
    Achievement("lines_100", "💎", lambda ctx: ctx.lines_cleared_total >= 100),
    Achievement("level_5", "🚀", lambda ctx: ctx.level >= 5),
    Achievement("level_10", "👑", lambda ctx: ctx.level >= 10),
    # Finishing a game without scoring anything.
    Achievement("player_of_the_year", "🏅", lambda ctx: ctx.game_over and ctx.score == 0),
    Achievement(
        "speedrun", "⚡", lambda ctx: ctx.game_over and ctx.lines_cleared_total == 0
    ),
)

ACHIEVEMENT_IDS = tuple(a.id for a in ACHIEVEMENTS)


def newly_unlocked(ctx: AchievementContext, already_unlocked: Iterable[str]) -> List[str]:
    """Return ids satisfied by ``ctx`` that are not yet unlocked, in table order."""

    unlocked = set(already_unlocked)
    return [a.id for a in ACHIEVEMENTS if a.id not in unlocked and a.check(ctx)]
