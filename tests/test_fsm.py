import pytest

from riddler.core.errors import InvalidIntent, PersistenceError
from riddler.core.fsm import (
    INSTRUCTIONS_TEXT,
    Intent,
    ResultKind,
    SessionController,
    State,
    classify_answer,
)
from riddler.core.guardian import Guardian
from riddler.core.session import Session

RIDDLE = "The more you take, the more you leave behind. What am I?"


def _start(controller, provider, difficulty=1):
    controller.handle(Intent.NEW_GAME)
    provider.queue(RIDDLE)
    return controller.handle(Intent.CHOOSE_DIFFICULTY, difficulty)


@pytest.mark.parametrize(
    "text, intent",
    [
        ("hint", Intent.HINT),
        ("  HINT ", Intent.HINT),
        ("Riddle", Intent.SHOW_RIDDLE),
        ("footsteps", Intent.GUESS),
        ("hint please", Intent.GUESS),
        ("", Intent.GUESS),
    ],
)
def test_classify_answer(text, intent):
    assert classify_answer(text) is intent


def test_initial_state(controller):
    assert controller.state is State.MAIN_MENU
    assert controller.session == Session(started_at=controller.session.started_at)
    assert not controller.is_finished


def test_new_game_flow(controller, provider):
    prompt = controller.handle(Intent.NEW_GAME)
    assert prompt.state is State.DIFFICULTY_SELECT
    assert prompt.kind is ResultKind.DIFFICULTY_PROMPT

    provider.queue(RIDDLE)
    result = controller.handle(Intent.CHOOSE_DIFFICULTY, 2)
    assert result.state is State.ACTIVE_RIDDLE
    assert result.kind is ResultKind.RIDDLE
    assert result.text == RIDDLE
    assert result.difficulty == 2
    assert (result.attempts, result.hints_used, result.score) == (0, 0, 0)


def test_riddle_loop_until_solved(controller, provider, slot):
    _start(controller, provider)

    provider.queue("Footprints in the sand.")
    hint = controller.handle(Intent.ANSWER, "hint")
    assert (hint.kind, hint.state, hint.hints_used) == (ResultKind.HINT, State.ACTIVE_RIDDLE, 1)

    again = controller.handle(Intent.ANSWER, "riddle")
    assert again.kind is ResultKind.RIDDLE
    assert again.text == RIDDLE
    assert len(provider.calls) == 2

    provider.queue("no")
    wrong = controller.handle(Intent.ANSWER, "wrong")
    assert wrong.correct is False
    assert wrong.kind is ResultKind.JUDGEMENT
    assert (wrong.attempts, wrong.score, wrong.state) == (1, 0, State.ACTIVE_RIDDLE)

    provider.queue("yes", "Every step leaves a mark upon the world.")
    right = controller.handle(Intent.ANSWER, "right")
    assert right.correct is True
    assert right.kind is ResultKind.INSIGHT
    assert right.state is State.PLAY_AGAIN
    assert right.text == "Every step leaves a mark upon the world."
    assert (right.attempts, right.hints_used, right.score, right.awarded) == (2, 1, 10, 10)
    assert len(controller.session.transcript) == 10
    assert slot.load() == controller.session


def test_play_again_and_quit(controller, provider):
    _start(controller, provider)
    provider.queue("yes", "insight")
    controller.handle(Intent.GUESS, "footsteps")

    assert controller.handle(Intent.PLAY_AGAIN).state is State.DIFFICULTY_SELECT
    provider.queue("Second riddle")
    assert controller.handle(Intent.CHOOSE_DIFFICULTY, 0).text == "Second riddle"
    assert controller.session.score == 0

    farewell = controller.handle(Intent.QUIT)
    assert farewell.state is State.QUIT
    assert farewell.kind is ResultKind.FAREWELL
    assert controller.is_finished


def test_service_failure_keeps_state_and_allows_retry(controller, provider):
    controller.handle(Intent.NEW_GAME)
    provider.fail_next = True
    failed = controller.handle(Intent.CHOOSE_DIFFICULTY, 1)
    assert failed.kind is ResultKind.ERROR
    assert failed.state is State.DIFFICULTY_SELECT
    assert "quota exceeded" in failed.error
    assert not failed.ok

    provider.queue(RIDDLE)
    assert controller.handle(Intent.CHOOSE_DIFFICULTY, 1).state is State.ACTIVE_RIDDLE


@pytest.mark.parametrize("reply", ["", "   \n"])
def test_blank_riddle_keeps_difficulty_select(controller, provider, slot, reply):
    controller.handle(Intent.NEW_GAME)
    provider.queue(reply)
    failed = controller.handle(Intent.CHOOSE_DIFFICULTY, 1)

    assert failed.kind is ResultKind.ERROR
    assert failed.state is State.DIFFICULTY_SELECT
    assert "empty reply" in failed.error
    assert not controller.session.has_riddle
    assert not slot.exists()
    with pytest.raises(InvalidIntent):
        controller.handle(Intent.ANSWER, "hint")

    provider.queue(RIDDLE)
    retried = controller.handle(Intent.CHOOSE_DIFFICULTY, 1)
    assert retried.state is State.ACTIVE_RIDDLE
    assert retried.text == RIDDLE
    assert len(controller.session.transcript) == 2


def test_failed_guess_stays_in_riddle(controller, provider):
    _start(controller, provider)
    provider.fail_next = True
    result = controller.handle(Intent.ANSWER, "footsteps")
    assert result.state is State.ACTIVE_RIDDLE
    assert result.error
    assert len(controller.session.transcript) == 2


def test_insight_failure_can_be_retried(controller, provider):
    _start(controller, provider)
    provider.queue("yes")
    solved = controller.handle(Intent.GUESS, "footsteps")
    assert solved.correct is True
    assert solved.state is State.SOLVED
    assert solved.error
    assert solved.score == 25

    provider.queue("Wisdom at last.")
    revealed = controller.handle(Intent.REVEAL)
    assert revealed.kind is ResultKind.INSIGHT
    assert revealed.state is State.PLAY_AGAIN


def test_continue_resumes_saved_session(provider, slot, controller):
    _start(controller, provider, difficulty=2)
    provider.queue("no")
    controller.handle(Intent.GUESS, "a shadow")

    fresh = SessionController(Guardian(provider, slot), slot)
    resumed = fresh.handle(Intent.CONTINUE)
    assert resumed.kind is ResultKind.RESUMED
    assert resumed.state is State.ACTIVE_RIDDLE
    assert resumed.text == RIDDLE
    assert (resumed.difficulty, resumed.attempts) == (2, 1)

    provider.queue("yes", "insight")
    solved = fresh.handle(Intent.ANSWER, "footsteps")
    assert solved.score == 45
    assert len(provider.calls[-2][1]) == 4


def test_continue_without_save(controller):
    result = controller.handle(Intent.CONTINUE)
    assert result.state is State.NO_SAVED_GAME
    assert result.text == "No saved game found!"
    assert result.error is None
    assert controller.handle(Intent.BACK).state is State.MAIN_MENU


def test_continue_with_corrupt_save(controller, slot):
    slot.path.write_text("{broken")
    result = controller.handle(Intent.CONTINUE)
    assert result.state is State.NO_SAVED_GAME
    assert result.error and "corrupt" in result.error


def test_instructions(controller):
    result = controller.handle(Intent.INSTRUCTIONS)
    assert result.state is State.INSTRUCTIONS
    assert result.text == INSTRUCTIONS_TEXT
    assert controller.handle(Intent.BACK).state is State.MAIN_MENU


@pytest.mark.parametrize("intent", [Intent.HINT, Intent.GUESS, Intent.REVEAL, Intent.PLAY_AGAIN, Intent.BACK])
def test_invalid_intents_in_main_menu(controller, intent):
    with pytest.raises(InvalidIntent) as excinfo:
        controller.handle(intent)
    assert excinfo.value.state is State.MAIN_MENU


def test_nothing_allowed_after_quit(controller):
    controller.handle("QUIT")
    with pytest.raises(InvalidIntent):
        controller.handle(Intent.QUIT)
    with pytest.raises(InvalidIntent):
        controller.handle(Intent.NEW_GAME)


def test_unsaved_turn_reports_warning(controller, provider, slot, monkeypatch):
    _start(controller, provider)

    def broken_save(session):
        raise PersistenceError("disk full", path=slot.path)

    monkeypatch.setattr(slot, "save", broken_save)
    provider.queue("A hint")
    result = controller.handle(Intent.HINT)
    assert result.kind is ResultKind.HINT
    assert result.text == "A hint"
    assert "disk full" in result.warning
    assert result.hints_used == 1


def test_transcript_length_always_even(controller, provider):
    _start(controller, provider)
    provider.fail_next = True
    controller.handle(Intent.HINT)
    provider.queue("hint text", "no")
    controller.handle(Intent.HINT)
    controller.handle(Intent.GUESS, "x")
    assert len(controller.session.transcript) % 2 == 0
