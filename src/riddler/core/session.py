"""Mutable state of one riddle game."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .scoring import DEFAULT_DIFFICULTY, normalize_difficulty
from .transcript import Transcript


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class Session:
    """Container for tracking a riddle game in progress."""

    difficulty: int = DEFAULT_DIFFICULTY
    current_riddle: str = ""
    attempts: int = 0
    hints_used: int = 0
    score: int = 0
    transcript: Transcript = field(default_factory=Transcript)
    started_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        for name in ("attempts", "hints_used", "score"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "difficulty" and "difficulty" in self.__dict__:
            raise AttributeError("difficulty is fixed once a session is created")
        if name == "current_riddle" and self.__dict__.get("current_riddle"):
            raise AttributeError("current_riddle is set once per session")
        super().__setattr__(name, value)

    @classmethod
    def fresh(cls, difficulty: int = DEFAULT_DIFFICULTY) -> "Session":
        return cls(difficulty=normalize_difficulty(difficulty))

    @property
    def has_riddle(self) -> bool:
        return bool(self.current_riddle)

    def assign_riddle(self, riddle: str) -> None:
        if self.current_riddle:
            raise ValueError("riddle already assigned for this session")
        if not riddle or not riddle.strip():
            raise ValueError("riddle text must not be blank")
        self.current_riddle = riddle

    def record_attempt(self) -> int:
        self.attempts += 1
        return self.attempts

    def record_hint(self) -> int:
        self.hints_used += 1
        return self.hints_used

    def award(self, points: int) -> None:
        if points < 0:
            raise ValueError("score never decreases")
        self.score += points

    def summary(self) -> Dict[str, Any]:
        """Counters suitable for logging and display."""

        return {
            "difficulty": self.difficulty,
            "attempts": self.attempts,
            "hints_used": self.hints_used,
            "score": self.score,
            "turns": len(self.transcript),
        }
