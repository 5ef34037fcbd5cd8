"""Finite state machine sequencing riddle turns for the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

from .errors import CorruptSave, GuardianUnavailable, InvalidIntent, PersistenceError
from .guardian import Guardian, GuessResult
from .persistence import SaveSlot
from .session import Session

LOGGER = structlog.get_logger(__name__)

HINT_COMMAND = "hint"
RIDDLE_COMMAND = "riddle"

INSTRUCTIONS_TEXT = """Welcome, seeker of ancient wisdom!
In this game, you will face the Ancient Guardian who will test your wit with riddles.
Solve the riddle correctly to receive a profound insight.

Game Features:
- Three difficulty levels
- Hint system (type 'hint' when stuck)
- Scoring based on difficulty, attempts, and hints used
- Automatic game saving

Commands during play:
- Type 'hint' to request a hint (reduces score)
- Type 'riddle' to see the riddle again"""


class State(str, Enum):
    """Controller states."""

    MAIN_MENU = "MAIN_MENU"
    DIFFICULTY_SELECT = "DIFFICULTY_SELECT"
    ACTIVE_RIDDLE = "ACTIVE_RIDDLE"
    NO_SAVED_GAME = "NO_SAVED_GAME"
    INSTRUCTIONS = "INSTRUCTIONS"
    SOLVED = "SOLVED"
    PLAY_AGAIN = "PLAY_AGAIN"
    QUIT = "QUIT"


class Intent(str, Enum):
    """User intents accepted by the controller."""

    NEW_GAME = "NEW_GAME"
    CONTINUE = "CONTINUE"
    INSTRUCTIONS = "INSTRUCTIONS"
    BACK = "BACK"
    CHOOSE_DIFFICULTY = "CHOOSE_DIFFICULTY"
    ANSWER = "ANSWER"
    HINT = "HINT"
    SHOW_RIDDLE = "SHOW_RIDDLE"
    GUESS = "GUESS"
    REVEAL = "REVEAL"
    PLAY_AGAIN = "PLAY_AGAIN"
    QUIT = "QUIT"


class ResultKind(str, Enum):
    """What the presentation layer should render."""

    MENU = "MENU"
    DIFFICULTY_PROMPT = "DIFFICULTY_PROMPT"
    RIDDLE = "RIDDLE"
    RESUMED = "RESUMED"
    HINT = "HINT"
    JUDGEMENT = "JUDGEMENT"
    INSIGHT = "INSIGHT"
    INSTRUCTIONS = "INSTRUCTIONS"
    NO_SAVED_GAME = "NO_SAVED_GAME"
    ERROR = "ERROR"
    FAREWELL = "FAREWELL"


@dataclass(frozen=True, slots=True)
class ControllerResult:
    """Snapshot returned to the presentation layer after every intent."""

    state: State
    kind: ResultKind
    text: str = ""
    correct: Optional[bool] = None
    awarded: int = 0
    difficulty: Optional[int] = None
    attempts: int = 0
    hints_used: int = 0
    score: int = 0
    error: Optional[str] = None
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def classify_answer(text: str) -> Intent:
    """Map raw riddle-loop input to the intent it represents."""

    command = text.strip().lower()
    if command == HINT_COMMAND:
        return Intent.HINT
    if command == RIDDLE_COMMAND:
        return Intent.SHOW_RIDDLE
    return Intent.GUESS


class SessionController:
    """Owns the active session and sequences turns through the guardian.

    New and continued games share the same riddle loop; they only differ in
    how the session entering ``ACTIVE_RIDDLE`` was obtained. The controller
    never writes to disk itself.
    """

    def __init__(self, guardian: Guardian, slot: Optional[SaveSlot] = None) -> None:
        self.guardian = guardian
        self.slot = slot or guardian.slot
        self.state = State.MAIN_MENU
        self.session = Session()
        self._handlers: Dict[Tuple[State, Intent], Callable[[Any], ControllerResult]] = {
            (State.MAIN_MENU, Intent.NEW_GAME): self._on_new_game,
            (State.MAIN_MENU, Intent.CONTINUE): self._on_continue,
            (State.MAIN_MENU, Intent.INSTRUCTIONS): self._on_instructions,
            (State.INSTRUCTIONS, Intent.BACK): self._on_back,
            (State.NO_SAVED_GAME, Intent.BACK): self._on_back,
            (State.DIFFICULTY_SELECT, Intent.CHOOSE_DIFFICULTY): self._on_choose_difficulty,
            (State.ACTIVE_RIDDLE, Intent.ANSWER): self._on_answer,
            (State.ACTIVE_RIDDLE, Intent.HINT): self._on_hint,
            (State.ACTIVE_RIDDLE, Intent.SHOW_RIDDLE): self._on_show_riddle,
            (State.ACTIVE_RIDDLE, Intent.GUESS): self._on_guess,
            (State.SOLVED, Intent.REVEAL): self._on_reveal,
            (State.PLAY_AGAIN, Intent.PLAY_AGAIN): self._on_new_game,
        }

    @property
    def is_finished(self) -> bool:
        return self.state is State.QUIT

    def handle(self, intent: Intent | str, payload: Any = None) -> ControllerResult:
        """Process one intent to completion and report the resulting snapshot."""

        intent = Intent(intent)
        if intent is Intent.QUIT and self.state is not State.QUIT:
            return self._transition(State.QUIT, ResultKind.FAREWELL, text="Farewell, seeker of wisdom!")

        handler = self._handlers.get((self.state, intent))
        if handler is None:
            raise InvalidIntent(
                f"{intent.value} is not allowed while in {self.state.value}",
                state=self.state,
                intent=intent,
            )
        return handler(payload)

    # Menu handlers --------------------------------------------------------------

    def _on_new_game(self, _payload: Any) -> ControllerResult:
        return self._transition(State.DIFFICULTY_SELECT, ResultKind.DIFFICULTY_PROMPT)

    def _on_instructions(self, _payload: Any) -> ControllerResult:
        return self._transition(State.INSTRUCTIONS, ResultKind.INSTRUCTIONS, text=INSTRUCTIONS_TEXT)

    def _on_back(self, _payload: Any) -> ControllerResult:
        return self._transition(State.MAIN_MENU, ResultKind.MENU)

    def _on_continue(self, _payload: Any) -> ControllerResult:
        try:
            session = self.slot.load()
        except CorruptSave as exc:
            return self._transition(
                State.NO_SAVED_GAME,
                ResultKind.NO_SAVED_GAME,
                error=f"Your saved game could not be read: {exc}",
            )
        if not session.has_riddle:
            return self._transition(State.NO_SAVED_GAME, ResultKind.NO_SAVED_GAME, text="No saved game found!")
        return self._enter_riddle(session, ResultKind.RESUMED)

    def _on_choose_difficulty(self, difficulty: Any) -> ControllerResult:
        try:
            session = self.guardian.start_new_game(difficulty)
        except GuardianUnavailable as exc:
            return self._failure(exc)
        except PersistenceError as exc:
            return self._enter_riddle(exc.result, ResultKind.RIDDLE, warning=_unsaved(exc))
        return self._enter_riddle(session, ResultKind.RIDDLE)

    # Riddle loop handlers --------------------------------------------------------

    def _on_answer(self, text: Any) -> ControllerResult:
        text = "" if text is None else str(text)
        intent = classify_answer(text)
        return self.handle(intent, text)

    def _on_show_riddle(self, _payload: Any) -> ControllerResult:
        return self._transition(State.ACTIVE_RIDDLE, ResultKind.RIDDLE, text=self.session.current_riddle)

    def _on_hint(self, _payload: Any) -> ControllerResult:
        warning = None
        try:
            hint = self.guardian.request_hint(self.session)
        except GuardianUnavailable as exc:
            return self._failure(exc)
        except PersistenceError as exc:
            hint, warning = exc.result, _unsaved(exc)
        return self._transition(State.ACTIVE_RIDDLE, ResultKind.HINT, text=hint, warning=warning)

    def _on_guess(self, guess: Any) -> ControllerResult:
        warning = None
        try:
            result: GuessResult = self.guardian.check_guess(self.session, "" if guess is None else str(guess))
        except GuardianUnavailable as exc:
            return self._failure(exc)
        except PersistenceError as exc:
            result, warning = exc.result, _unsaved(exc)

        if not result.correct:
            return self._transition(
                State.ACTIVE_RIDDLE,
                ResultKind.JUDGEMENT,
                text=result.judgement,
                correct=False,
                warning=warning,
            )

        self.state = State.SOLVED
        revealed = self._on_reveal(None)
        return ControllerResult(
            state=revealed.state,
            kind=revealed.kind,
            text=revealed.text,
            correct=True,
            awarded=result.awarded,
            difficulty=revealed.difficulty,
            attempts=revealed.attempts,
            hints_used=revealed.hints_used,
            score=revealed.score,
            error=revealed.error,
            warning=revealed.warning or warning,
        )

    def _on_reveal(self, _payload: Any) -> ControllerResult:
        warning = None
        try:
            insight = self.guardian.reveal_insight(self.session)
        except GuardianUnavailable as exc:
            return self._failure(exc)
        except PersistenceError as exc:
            insight, warning = exc.result, _unsaved(exc)
        return self._transition(State.PLAY_AGAIN, ResultKind.INSIGHT, text=insight, warning=warning)

    # Helpers ----------------------------------------------------------------------

    def _enter_riddle(self, session: Session, kind: ResultKind, *, warning: Optional[str] = None) -> ControllerResult:
        self.session = session
        return self._transition(State.ACTIVE_RIDDLE, kind, text=session.current_riddle, warning=warning)

    def _failure(self, exc: GuardianUnavailable) -> ControllerResult:
        return self._transition(self.state, ResultKind.ERROR, error=str(exc))

    def _transition(self, state: State, kind: ResultKind, **fields: Any) -> ControllerResult:
        previous, self.state = self.state, state
        if previous is not state:
            LOGGER.info("controller.transition", source=previous.value, target=state.value, kind=kind.value)
        session = self.session
        return ControllerResult(
            state=state,
            kind=kind,
            difficulty=session.difficulty if session.has_riddle else None,
            attempts=session.attempts,
            hints_used=session.hints_used,
            score=session.score,
            **fields,
        )


def _unsaved(exc: PersistenceError) -> str:
    return f"Progress could not be saved: {exc}"


__all__ = [
    "ControllerResult",
    "INSTRUCTIONS_TEXT",
    "Intent",
    "ResultKind",
    "SessionController",
    "State",
    "classify_answer",
]
