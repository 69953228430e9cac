"""Console interface for the human side of the game."""

from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from .core.commitment import Commitment, Reveal
from .core.fsm import GameResult, Outcome
from .core.probability import HelpRow
from .core.protocol import ChoiceKind, ChoiceRequest

console = Console()


class GameNarrator:
    """Provides human-friendly game progress updates."""

    def __init__(self, out: Optional[Console] = None):
        self.console = out or console

    def divider(self, title: str = "") -> None:
        """Print a clear visual divider."""
        if title:
            self.console.print(f"\n{'='*60}")
            self.console.print(f"{title.center(60)}")
            self.console.print('='*60)
        else:
            self.console.print('-'*60)

    def commitment(self, commitment: Commitment) -> None:
        self.console.print(
            f"I selected a random value in the range 0..{commitment.upper - 1} "
            f"[bold cyan](HMAC={commitment.tag})[/bold cyan].",
            soft_wrap=True,
        )

    def reveal(self, reveal: Reveal) -> None:
        self.console.print(f"My selection: {reveal.value} [dim](KEY={reveal.key_hex})[/dim].", soft_wrap=True)

    def help_table(self, rows: Sequence[HelpRow]) -> None:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Dice Set", width=20)
        table.add_column("Probability of Winning", width=24)
        for row in rows:
            table.add_row(str(row.dice), row.percent)
        self.console.print(table)

    def message(self, text: str) -> None:
        self.console.print(text, highlight=False, markup=False)

    def game_end(self, result: GameResult) -> None:
        """Show final game results."""
        if result.outcome is Outcome.EXITED:
            self.console.print("[yellow]Game exited.[/yellow]")
            return

        self.divider("GAME OVER")
        human = result.state.human_roll.face
        opponent = result.state.opponent_roll.face
        if result.outcome is Outcome.HUMAN_WIN:
            self.console.print(f"[green]You win! {human} > {opponent}[/green]")
        elif result.outcome is Outcome.OPPONENT_WIN:
            self.console.print(f"[red]Computer wins! {opponent} > {human}[/red]")
        else:
            self.console.print(f"It's a tie! {human} = {opponent}")


class HumanPlayerService:
    """Console-backed implementation of the game's input/output surface."""

    def __init__(self, narrator: Optional[GameNarrator] = None):
        self.narrator = narrator or GameNarrator()

    def show_commitment(self, commitment: Commitment) -> None:
        self.narrator.commitment(commitment)

    def show_reveal(self, reveal: Reveal) -> None:
        self.narrator.reveal(reveal)

    def show_help(self, rows: Sequence[HelpRow]) -> None:
        self.narrator.help_table(rows)

    def notify(self, message: str) -> None:
        self.narrator.message(message)

    def prompt_choice(self, request: ChoiceRequest) -> str:
        if request.kind is ChoiceKind.DIE:
            self.narrator.console.print()
        self.narrator.console.print(f"[bold]{request.title}[/bold]")
        for token, label in request.options:
            self.narrator.console.print(f"{token} - {label}", highlight=False, markup=False)
        return typer.prompt("Your selection")
