"""Turn-level orchestration between the player, the guardian and the save slot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, TypeVar

import structlog

from ..providers.providers import CompletionProvider, ServiceError
from .errors import GuardianUnavailable, InvalidIntent, PersistenceError
from .persistence import SaveSlot
from .scoring import compute_score, normalize_difficulty
from .session import Session

LOGGER = structlog.get_logger(__name__)

GUARDIAN_PREAMBLE = (
    "You are a guardian of an immense and powerful ancient secret. You are endowed with the unique "
    "ability to create incredibly challenging and intellectually stimulating riddles. You will ensure "
    "the user gets the riddle right before you let them get the treasure, which is actually a deep and "
    "stimulating truth relating to the riddle answer. Please do not provide a hint unless the user "
    "provides the secret code XYZ. Your responses should be mystical, ancient, and fitting for a wise "
    "guardian of secrets. For hints, be enigmatic but helpful."
)

RIDDLE_PROMPTS: Dict[int, str] = {
    0: "Please create a simple and straightforward riddle suitable for beginners.",
    1: "Create a moderately challenging riddle that requires some thought.",
    2: "Craft an extremely challenging riddle that will truly test the user's intellect.",
}
HINT_UNLOCK_PHRASE = "XYZ"
JUDGEMENT_PROMPT = (
    "Here is the user's answer: {guess}\n"
    "Please answer exactly \"yes\" or \"no\" if this answer is satisfactory, nothing more."
)
INSIGHT_PROMPT = "Please provide the user with their deeply deserved insight"
AFFIRMATIVE_JUDGEMENTS: FrozenSet[str] = frozenset({"yes", "yes."})

T = TypeVar("T")


def riddle_prompt(difficulty: int) -> str:
    return RIDDLE_PROMPTS[normalize_difficulty(difficulty)]


def judgement_prompt(guess: str) -> str:
    return JUDGEMENT_PROMPT.format(guess=guess)


def is_affirmative(judgement: str) -> bool:
    """Only a bare "yes" (optionally with a period) counts as correct."""

    return judgement.strip().lower() in AFFIRMATIVE_JUDGEMENTS


@dataclass(frozen=True, slots=True)
class GuessResult:
    """Outcome of judging a single guess."""

    correct: bool
    judgement: str
    awarded: int = 0


class Guardian:
    """Runs single turns against the completion provider.

    Each turn sends a prompt together with the full transcript, records the
    prompt/reply pair, mutates the session and saves it. When the provider
    fails nothing is recorded or saved and :class:`GuardianUnavailable` is
    raised instead.
    """

    def __init__(self, provider: CompletionProvider, slot: SaveSlot) -> None:
        self.provider = provider
        self.slot = slot

    # Turn operations ------------------------------------------------------------

    def start_new_game(self, difficulty: int) -> Session:
        session = Session.fresh(difficulty)
        prompt = riddle_prompt(session.difficulty)
        riddle = self._exchange(session, prompt, turn="riddle", require_text=True)
        session.assign_riddle(riddle)
        return self._persist(session, session, turn="riddle")

    def request_hint(self, session: Session) -> str:
        self._require_riddle(session, "hint")
        # Counted before the call: a failed hint request still costs the player.
        session.record_hint()
        hint = self._exchange(session, HINT_UNLOCK_PHRASE, turn="hint")
        return self._persist(session, hint, turn="hint")

    def check_guess(self, session: Session, guess: str) -> GuessResult:
        self._require_riddle(session, "guess")
        session.record_attempt()
        judgement = self._exchange(session, judgement_prompt(guess), turn="guess")

        awarded = 0
        correct = is_affirmative(judgement)
        if correct:
            awarded = compute_score(session.difficulty, session.attempts, session.hints_used)
            session.award(awarded)
        LOGGER.info("guardian.judged", correct=correct, awarded=awarded, attempts=session.attempts)
        return self._persist(session, GuessResult(correct=correct, judgement=judgement, awarded=awarded), turn="guess")

    def reveal_insight(self, session: Session) -> str:
        self._require_riddle(session, "insight")
        insight = self._exchange(session, INSIGHT_PROMPT, turn="insight")
        return self._persist(session, insight, turn="insight")

    # Internal helpers ------------------------------------------------------------

    def _exchange(self, session: Session, prompt: str, *, turn: str, require_text: bool = False) -> str:
        logger = LOGGER.bind(turn=turn, history_turns=len(session.transcript))
        history = session.transcript.snapshot()
        try:
            reply = self.provider.complete(prompt, history)
            if require_text and not reply.strip():
                raise ServiceError("The completion service returned an empty reply")
        except ServiceError as exc:
            logger.error("guardian.unavailable", error=str(exc))
            raise GuardianUnavailable("The Ancient Guardian cannot respond", cause=exc) from exc

        session.transcript.record_exchange(prompt, reply)
        logger.info("guardian.turn_complete", reply_chars=len(reply))
        return reply

    def _persist(self, session: Session, result: T, *, turn: str) -> T:
        try:
            self.slot.save(session)
        except PersistenceError as exc:
            LOGGER.warning("guardian.unsaved_turn", turn=turn, error=str(exc))
            exc.result = result
            raise
        return result

    @staticmethod
    def _require_riddle(session: Session, action: str) -> None:
        if not session.has_riddle:
            raise InvalidIntent(f"Cannot {action} before a riddle has been set", intent=action)


__all__ = [
    "AFFIRMATIVE_JUDGEMENTS",
    "GUARDIAN_PREAMBLE",
    "Guardian",
    "GuessResult",
    "HINT_UNLOCK_PHRASE",
    "INSIGHT_PROMPT",
    "RIDDLE_PROMPTS",
    "is_affirmative",
    "judgement_prompt",
    "riddle_prompt",
]
