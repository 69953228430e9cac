"""Win-probability estimates shown by the help table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .dice import DiceSet

DEFAULT_BASELINE = 9


@dataclass(frozen=True)
class HelpRow:
    dice: DiceSet
    probability: float

    @property
    def percent(self) -> str:
        return f"{self.probability * 100:.2f}%"


def win_probability(dice: DiceSet, *, baseline: int = DEFAULT_BASELINE) -> float:
    """Rough chance of winning with ``dice``: its best face over the baseline, to 2 places."""

    return round(max(dice.faces) / baseline, 2)


def build_help_rows(dice_sets: Sequence[DiceSet], *, baseline: int = DEFAULT_BASELINE) -> List[HelpRow]:
    return [HelpRow(dice=dice, probability=win_probability(dice, baseline=baseline)) for dice in dice_sets]
