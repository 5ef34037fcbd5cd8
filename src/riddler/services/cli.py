"""Typer CLI entry point for playing against the Ancient Guardian."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import structlog
import typer
from dotenv import load_dotenv

from ..config.settings import DEFAULT_CONFIG_PATH, GuardianConfig, load_config
from ..core.errors import CorruptSave
from ..core.fsm import ControllerResult, Intent, SessionController, State, classify_answer
from ..core.guardian import Guardian
from ..core.persistence import SaveSlot
from ..core.scoring import DIFFICULTY_DESCRIPTIONS, DEFAULT_DIFFICULTY
from ..narrator import MAIN_MENU_OPTIONS, GuardianNarrator
from ..providers.providers import CompletionProvider, ProviderFactory, ServiceError

LOGGER = structlog.get_logger(__name__)

app = typer.Typer(help="Face the Ancient Guardian of Riddles.", invoke_without_command=False)

ANSWER_PROMPT = "Your answer (type 'hint' for a hint, 'riddle' to see the riddle again)"
MENU_INTENTS = (Intent.NEW_GAME, Intent.CONTINUE, Intent.INSTRUCTIONS, Intent.QUIT)

Prompter = Callable[..., str]


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to the console.

    Interactive play keeps only errors so log lines do not interleave with the
    game screen; ``--verbose`` restores the INFO stream.
    """

    level = logging.INFO if verbose else logging.ERROR
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


def resolve_config(config: Path, save_path: Optional[Path]) -> GuardianConfig:
    load_dotenv()
    try:
        settings = load_config(config)
    except ValueError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc
    if save_path is not None:
        settings.save_path = save_path
    return settings


def build_provider(settings: GuardianConfig) -> CompletionProvider:
    """Create the completion provider named in the configuration."""

    return ProviderFactory.create(settings.provider, **settings.provider_kwargs())


def _ask_choice(prompt: Prompter, label: str, count: int, default: int) -> int:
    """Ask for a 1-based menu number until a valid one is given; returns 0-based."""

    while True:
        raw = prompt(label, default=str(default + 1))
        try:
            choice = int(str(raw).strip())
        except ValueError:
            typer.echo(f"Please enter a number between 1 and {count}.")
            continue
        if 1 <= choice <= count:
            return choice - 1
        typer.echo(f"Please enter a number between 1 and {count}.")


def run_session(
    controller: SessionController,
    narrator: GuardianNarrator,
    *,
    prompt: Prompter = typer.prompt,
    confirm: Callable[..., bool] = typer.confirm,
) -> ControllerResult:
    """Drive the controller with interactive input until the player quits."""

    result: Optional[ControllerResult] = None
    while not controller.is_finished:
        state = controller.state
        payload = None

        if state is State.MAIN_MENU:
            narrator.header()
            narrator.menu("Choose an option:", MAIN_MENU_OPTIONS)
            intent = MENU_INTENTS[_ask_choice(prompt, "Option", len(MENU_INTENTS), 0)]
        elif state is State.DIFFICULTY_SELECT:
            narrator.difficulty_menu()
            intent = Intent.CHOOSE_DIFFICULTY
            payload = _ask_choice(prompt, "Difficulty", len(DIFFICULTY_DESCRIPTIONS), DEFAULT_DIFFICULTY)
        elif state is State.ACTIVE_RIDDLE:
            if result is not None:
                narrator.status_line(result)
            payload = prompt(ANSWER_PROMPT)
            intent = Intent.ANSWER
        elif state is State.SOLVED:
            intent = Intent.REVEAL if confirm("Ask the Guardian for your insight again?", default=True) else Intent.QUIT
        elif state is State.PLAY_AGAIN:
            narrator.console.print("\nWould you like to play another riddle?")
            intent = Intent.PLAY_AGAIN if confirm("Play again", default=True) else Intent.QUIT
        elif state is State.INSTRUCTIONS:
            prompt("Press Enter to return to the main menu...", default="", show_default=False)
            intent = Intent.BACK
        else:
            intent = Intent.BACK

        spinner_intent = classify_answer(payload) if intent is Intent.ANSWER else intent
        with narrator.thinking(spinner_intent):
            result = controller.handle(intent, payload)
        narrator.render(result)

    assert result is not None
    return result


@app.command("play")
def play(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to guardian configuration JSON"),
    save_path: Optional[Path] = typer.Option(None, "--save-path", help="Override the save file location"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show structured log output"),
) -> None:
    """Start the interactive riddle game."""

    configure_logging(verbose)
    settings = resolve_config(config, save_path)
    LOGGER.info("play.start", provider=settings.provider, model=settings.model, save_path=str(settings.save_path))

    try:
        provider = build_provider(settings)
    except ServiceError as exc:
        LOGGER.error("play.provider_unavailable", error=str(exc))
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    slot = SaveSlot(settings.save_path)
    with provider:
        controller = SessionController(Guardian(provider, slot), slot)
        final = run_session(controller, GuardianNarrator())
    LOGGER.info("play.finished", score=final.score)


@app.command("status")
def status(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to guardian configuration JSON"),
    save_path: Optional[Path] = typer.Option(None, "--save-path", help="Override the save file location"),
) -> None:
    """Show the saved game, if any."""

    configure_logging()
    settings = resolve_config(config, save_path)
    slot = SaveSlot(settings.save_path)
    try:
        session = slot.load()
    except CorruptSave as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    if not session.has_riddle:
        typer.echo("No saved game found.")
        return
    GuardianNarrator().show_session(session)


@app.command("reset")
def reset(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to guardian configuration JSON"),
    save_path: Optional[Path] = typer.Option(None, "--save-path", help="Override the save file location"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the saved game."""

    configure_logging()
    settings = resolve_config(config, save_path)
    slot = SaveSlot(settings.save_path)
    if not slot.exists():
        typer.echo("No saved game found.")
        return
    if not yes and not typer.confirm(f"Delete the saved game at {slot.path}?"):
        raise typer.Exit(code=1)
    slot.clear()
    typer.echo(f"Saved game removed from {slot.path}")


if __name__ == "__main__":  # pragma: no cover
    app()
