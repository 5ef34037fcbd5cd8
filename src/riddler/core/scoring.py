"""Score computation and difficulty tiers."""

from __future__ import annotations

from typing import Dict, Tuple

EASY, MEDIUM, HARD = 0, 1, 2
DIFFICULTIES: Tuple[int, ...] = (EASY, MEDIUM, HARD)
DEFAULT_DIFFICULTY = MEDIUM

BASE_SCORES: Dict[int, int] = {EASY: 10, MEDIUM: 25, HARD: 50}
FALLBACK_BASE_SCORE = 25
ATTEMPT_PENALTY = 5
HINT_PENALTY = 10

DIFFICULTY_DESCRIPTIONS: Tuple[str, ...] = (
    "Easy: Simple riddles suitable for beginners",
    "Medium: Challenging riddles that will make you think",
    "Hard: Complex mind-benders for riddle masters",
)


def normalize_difficulty(value: object) -> int:
    """Return ``value`` as a known difficulty tier, falling back to medium."""

    if isinstance(value, bool):
        return DEFAULT_DIFFICULTY
    if isinstance(value, int) and value in DIFFICULTIES:
        return value
    return DEFAULT_DIFFICULTY


def difficulty_label(difficulty: int) -> str:
    """Human readable description for a difficulty tier."""

    return DIFFICULTY_DESCRIPTIONS[normalize_difficulty(difficulty)]


def compute_score(difficulty: int, attempts: int, hints: int) -> int:
    """Points awarded for solving a riddle.

    The first attempt is free; every further attempt costs 5 points and every
    hint costs 10. The result is never negative.
    """

    base = BASE_SCORES.get(difficulty, FALLBACK_BASE_SCORE)
    attempt_penalty = ATTEMPT_PENALTY * max(attempts - 1, 0)
    hint_penalty = HINT_PENALTY * hints
    return max(base - attempt_penalty - hint_penalty, 0)
