"""Core game logic: commitments, dice, protocol phases and the game FSM."""

from . import commitment, config, dice, fsm, probability, protocol

__all__ = ["commitment", "config", "dice", "fsm", "probability", "protocol"]
