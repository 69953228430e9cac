"""Service modules for the command-line interface."""

from . import cli

__all__ = ["cli"]
