"""JSON-backed store for high scores, achievements and preferences.

The engine knows nothing about persistence; hosts call into this store with
finished-game snapshots and unlocked achievement ids.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .game_state import GameState


LOGGER = logging.getLogger(__name__)

TOP_N = 5
THEMES = ("classic", "neon", "retro")
LOCALES = ("en", "ru")

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "sound_enabled": True,
    "theme": "classic",
    "locale": "en",
}


def default_store_path() -> Path:
    return Path.home() / ".tetris_sim.json"


@dataclass(frozen=True)
class ScoreEntry:
    score: int
    date: str
    level: Optional[int] = None
    lines: Optional[int] = None


class ScoreStore:
    """High score, top-N list, unlocked achievements and user preferences."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_store_path()
        self.high_score = 0
        self.top_scores: List[ScoreEntry] = []
        self.achievements: List[str] = []
        self.preferences: Dict[str, Any] = dict(DEFAULT_PREFERENCES)
        self._load()

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------
    def record_game(self, state: GameState, *, date: Optional[datetime] = None) -> bool:
        """Add a finished game to the records.

        Returns ``True`` when the game set a new high score.
        """

        when = date or datetime.now(timezone.utc)
        entry = ScoreEntry(
            score=state.score,
            date=when.isoformat(),
            level=state.level,
            lines=state.lines_cleared_total,
        )
        entries = sorted(
            [*self.top_scores, entry], key=lambda e: e.score, reverse=True
        )
        self.top_scores = entries[:TOP_N]
        is_best = state.score > self.high_score
        if is_best:
            self.high_score = state.score
        self.save()
        return is_best

    def clear_records(self) -> None:
        """Forget the high score and the top list."""

        self.high_score = 0
        self.top_scores = []
        self.save()

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------
    def unlock(self, ids: Iterable[str]) -> List[str]:
        """Mark ``ids`` as unlocked and return the ones that were new."""

        added = [i for i in dict.fromkeys(ids) if i not in self.achievements]
        if added:
            self.achievements.extend(added)
            self.save()
        return added

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------
    def set_preference(self, name: str, value: Any) -> None:
        """Validate and store a single preference.

        Raises:
            ValueError: For unknown names or values outside the allowed set.
        """

        _validate_preference(name, value)
        self.preferences[name] = value
        self.save()

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------
    def save(self) -> bool:
        """Write the store to disk.

        A failed write is logged and reported as ``False``; the in-memory
        records stay current so the game can carry on.
        """

        data = {
            "high_score": self.high_score,
            "top_scores": [asdict(e) for e in self.top_scores],
            "achievements": list(self.achievements),
            "preferences": dict(self.preferences),
        }
        try:
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Could not write score store %s: %s", self.path, exc)
            return False
        return True

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("store root must be an object")
            high_score = int(data.get("high_score", 0))
            top_scores = [_entry_from_raw(raw) for raw in data.get("top_scores", [])]
            achievements = [str(i) for i in data.get("achievements", [])]
            preferences = dict(DEFAULT_PREFERENCES)
            for name, value in dict(data.get("preferences", {})).items():
                _validate_preference(name, value)
                preferences[name] = value
        except (OSError, ValueError, TypeError, KeyError) as exc:
            LOGGER.warning("Ignoring unreadable score store %s: %s", self.path, exc)
            return
        self.high_score = high_score
        self.top_scores = sorted(top_scores, key=lambda e: e.score, reverse=True)[:TOP_N]
        self.achievements = achievements
        self.preferences = preferences


def _entry_from_raw(raw: Dict[str, Any]) -> ScoreEntry:
    if not isinstance(raw["score"], int) or isinstance(raw["score"], bool):
        raise ValueError(f"score must be an integer: {raw['score']!r}")
    level = raw.get("level")
    lines = raw.get("lines")
    return ScoreEntry(
        score=raw["score"],
        date=str(raw["date"]),
        level=None if level is None else int(level),
        lines=None if lines is None else int(lines),
    )


def _validate_preference(name: str, value: Any) -> None:
    if name == "sound_enabled":
        if not isinstance(value, bool):
            raise ValueError("sound_enabled must be a boolean")
    elif name == "theme":
        if value not in THEMES:
            raise ValueError(f"Unknown theme: {value!r}")
    elif name == "locale":
        if value not in LOCALES:
            raise ValueError(f"Unknown locale: {value!r}")
    else:
        raise ValueError(f"Unknown preference: {name!r}")
