"""Utility helpers shared across the game."""

from . import rng

__all__ = ["rng"]
