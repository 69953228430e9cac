"""Typer CLI entry point for playing a provably fair dice game."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import structlog
import typer
from dotenv import load_dotenv

from ..core.commitment import TAG_BYTES, Reveal, verify_reveal
from ..core.config import DEFAULT_CONFIG_PATH, ConfigError, load_game_config
from ..core.dice import DiceConfigError, parse_dice_sets
from ..core.fsm import Outcome, run_game
from ..human_player import GameNarrator, HumanPlayerService

LOGGER = structlog.get_logger(__name__)

app = typer.Typer(help="Play a provably fair dice game against the computer.", invoke_without_command=False)
_configured_level: Optional[int] = None


def configure_logging(verbose: bool = False) -> None:
    global _configured_level
    # Keep the interactive console clean unless asked for structured logs
    level = logging.INFO if verbose else logging.WARNING
    if _configured_level == level:
        return
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
    _configured_level = level


def _default_config_path() -> Path:
    return Path(os.environ.get("FAIRDICE_CONFIG", str(DEFAULT_CONFIG_PATH)))


@app.command("play")
def play(
    dice: List[str] = typer.Argument(..., help="Dice as comma-separated faces, e.g. 2,2,4,4,9,9 (at least 3)"),
    config: Optional[Path] = typer.Option(None, help="Path to game configuration JSON"),
    seed: Optional[int] = typer.Option(None, help="Seed for the opponent's non-committed die pick"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show structured logs"),
) -> None:
    """Play one game; each opponent choice is committed with HMAC-SHA256 before you answer."""

    load_dotenv()
    configure_logging(verbose)

    config_path = config or _default_config_path()
    try:
        game_config = load_game_config(config_path)
        dice_sets = parse_dice_sets(dice, min_sets=game_config.min_dice)
    except (ConfigError, DiceConfigError) as exc:
        LOGGER.error("game.invalid_setup", error=str(exc))
        typer.echo(f"Invalid input. {exc}", err=True)
        raise typer.Exit(code=1) from exc

    narrator = GameNarrator()
    result = run_game(dice_sets, HumanPlayerService(narrator), config=game_config, seed=seed)
    narrator.game_end(result)
    if result.outcome is not Outcome.EXITED:
        LOGGER.info("game.finished", outcome=result.outcome.value)


@app.command("verify")
def verify(
    key: str = typer.Option(..., help="Revealed secret key (hex)"),
    value: int = typer.Option(..., help="Revealed committed value"),
    tag: str = typer.Option(..., help="HMAC tag published before your answer"),
) -> None:
    """Recompute HMAC-SHA256(key, value) and compare it with the published tag."""

    try:
        key_bytes = bytes.fromhex(key)
    except ValueError as exc:
        typer.echo("Key must be a hex string.", err=True)
        raise typer.Exit(code=2) from exc

    try:
        tag_bytes = bytes.fromhex(tag)
    except ValueError as exc:
        typer.echo("Tag must be a hex string.", err=True)
        raise typer.Exit(code=2) from exc
    if len(tag_bytes) != TAG_BYTES:
        typer.echo(f"Tag must be {TAG_BYTES * 2} hex characters.", err=True)
        raise typer.Exit(code=2)

    if verify_reveal(tag, Reveal(key=key_bytes, value=value, tag=tag)):
        typer.echo("MATCH: the commitment was honest.")
        return
    typer.echo("MISMATCH: the revealed key and value do not reproduce the tag.")
    raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
