"""Provably fair dice game against an automated opponent."""

from . import human_player
from .core import commitment, config, dice, fsm, probability, protocol
from .utils import rng

from .core.fsm import DiceGame, GameResult, Outcome, run_game  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "human_player",
    "commitment",
    "config",
    "dice",
    "fsm",
    "probability",
    "protocol",
    "rng",
    "DiceGame",
    "GameResult",
    "Outcome",
    "run_game",
]
