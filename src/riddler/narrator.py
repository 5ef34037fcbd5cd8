"""Terminal presentation for interactive riddle sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .core.fsm import ControllerResult, Intent, ResultKind
from .core.scoring import DIFFICULTY_DESCRIPTIONS, difficulty_label
from .core.session import Session

console = Console()

TITLE_ART = r"""
 ____  _     _     _ _
|  _ \(_) __| | __| | | ___ _ __
| |_) | |/ _` |/ _` | |/ _ \ '__|
|  _ <| | (_| | (_| | |  __/ |
|_| \_\_|\__,_|\__,_|_|\___|_|
"""

MAIN_MENU_OPTIONS: Sequence[str] = ("Start New Game", "Continue Saved Game", "View Instructions", "Quit")

SPINNER_MESSAGES = {
    Intent.CHOOSE_DIFFICULTY: "The Ancient Guardian is thinking of a riddle...",
    Intent.HINT: "The Guardian is considering a hint...",
    Intent.GUESS: "The Guardian is judging your answer...",
    Intent.REVEAL: "The Guardian is preparing your insight...",
}


class GuardianNarrator:
    """Renders controller results with rich."""

    def __init__(self, output: Optional[Console] = None) -> None:
        self.console = output or console

    def divider(self) -> None:
        self.console.print(f"[bright_blue]{'-' * 50}[/bright_blue]")

    def header(self) -> None:
        self.console.print(Text(TITLE_ART, style="bold bright_cyan"))
        self.console.print("[bold bright_magenta]The Ancient Guardian of Riddles[/bold bright_magenta]")
        self.console.print(f"[bright_blue]{'=' * 50}[/bright_blue]\n")

    def message(self, text: str, style: str = "bold") -> None:
        self.console.print()
        self.console.print(text, style=style)

    def menu(self, title: str, options: Sequence[str]) -> None:
        self.console.print(f"[bold cyan]{title}[/bold cyan]")
        for index, option in enumerate(options, start=1):
            self.console.print(f"  [yellow]{index}[/yellow]. {option}")

    def difficulty_menu(self) -> None:
        self.menu("Choose difficulty level:", DIFFICULTY_DESCRIPTIONS)

    @contextmanager
    def thinking(self, intent: Intent) -> Iterator[None]:
        """Spinner shown while the guardian is being consulted."""

        message = SPINNER_MESSAGES.get(intent)
        if message is None:
            yield
            return
        with self.console.status(f"[green]{message}[/green]", spinner="dots"):
            yield

    def status_line(self, result: ControllerResult) -> None:
        self.divider()
        self.console.print(
            f"Attempts: [yellow]{result.attempts}[/yellow] | "
            f"Hints Used: [yellow]{result.hints_used}[/yellow] | "
            f"Score: [green]{result.score}[/green]"
        )
        self.divider()

    def session_table(self, session: Session) -> Table:
        table = Table(show_header=False, header_style="bold cyan")
        table.add_column("Field", style="dim", width=14)
        table.add_column("Value")
        table.add_row("Difficulty", difficulty_label(session.difficulty))
        table.add_row("Attempts", str(session.attempts))
        table.add_row("Hints used", str(session.hints_used))
        table.add_row("Score", str(session.score))
        table.add_row("Started", session.started_at.isoformat(timespec="seconds"))
        table.add_row("Turns", str(len(session.transcript)))
        return table

    def show_session(self, session: Session) -> None:
        self.console.print(self.session_table(session))
        if session.has_riddle:
            self.console.print(Panel(Text(session.current_riddle), title="Current riddle", border_style="yellow"))

    def render(self, result: ControllerResult) -> None:
        """Print a controller result."""

        kind = result.kind
        if kind is ResultKind.ERROR:
            if result.correct:
                self.message("CORRECT!", "bold bright_green")
            self.message("The Ancient Guardian cannot respond...", "bold bright_red")
        if result.error:
            self.console.print(Text(f"Error: {result.error}", style="red"))
        if result.warning:
            self.console.print(Text(f"Warning: {result.warning}", style="yellow"))

        if kind is ResultKind.RIDDLE:
            self.message("The Ancient Guardian speaks:", "bold bright_yellow")
            self.console.print(Text(result.text, style="bright_white"))
        elif kind is ResultKind.RESUMED:
            self.message("Continuing your quest...", "bold bright_blue")
            self.console.print(
                f"Difficulty: [yellow]{difficulty_label(result.difficulty or 0)}[/yellow] | "
                f"Attempts: [yellow]{result.attempts}[/yellow] | Hints: [yellow]{result.hints_used}[/yellow]"
            )
            self.message("The Ancient Guardian's riddle:", "bold bright_yellow")
            self.console.print(Text(result.text, style="bright_white"))
        elif kind is ResultKind.HINT:
            self.message("The Guardian whispers a hint:", "bold bright_magenta")
            self.console.print(Text(result.text, style="bright_white"))
        elif kind is ResultKind.JUDGEMENT:
            self.message("INCORRECT!", "bold bright_red")
            self.console.print("The Ancient Guardian shakes their head. Try again...", style="bright_red")
        elif kind is ResultKind.INSIGHT:
            self.message("CORRECT!", "bold bright_green")
            self.console.print("The Ancient Guardian nods in approval...", style="bright_green")
            self.message("The Guardian reveals the promised wisdom:", "bold bright_cyan")
            self.console.print(Text(result.text, style="bright_white"))
            self.console.print(f"\n[bright_yellow]Final Score:[/bright_yellow] [bright_green]{result.score}[/bright_green]")
        elif kind is ResultKind.INSTRUCTIONS:
            self.message("HOW TO PLAY", "bold bright_blue")
            self.console.print(Text(result.text))
        elif kind is ResultKind.NO_SAVED_GAME and result.text:
            self.message(result.text, "bold bright_red")
        elif kind is ResultKind.FAREWELL:
            self.message(result.text, "bold bright_cyan")
