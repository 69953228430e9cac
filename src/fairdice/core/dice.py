"""Dice definitions and startup validation of the command-line dice specs."""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

FACE_COUNT = 6
MIN_DICE = 3

_FACE_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


class DiceConfigError(ValueError):
    """Raised when the dice given at startup cannot form a valid game."""


class DiceSet(BaseModel):
    """A single die: an ordered tuple of integer faces."""

    model_config = ConfigDict(frozen=True)

    faces: Tuple[StrictInt, ...] = Field(...)

    @field_validator("faces")
    @classmethod
    def _check_face_count(cls, faces: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(faces) != FACE_COUNT:
            raise ValueError(f"a die needs exactly {FACE_COUNT} faces, got {len(faces)}")
        return faces

    @property
    def face_count(self) -> int:
        return len(self.faces)

    def face_at(self, index: int) -> int:
        return self.faces[index]

    def __str__(self) -> str:
        return f"[{', '.join(str(face) for face in self.faces)}]"


def parse_dice_spec(token: str, *, position: int | None = None) -> DiceSet:
    """Parse one comma-separated token such as ``"2,2,4,4,9,9"``."""

    label = f"Dice set {position + 1}" if position is not None else "Dice set"
    faces: List[int] = []
    for raw in token.split(","):
        entry = raw.strip()
        if not _FACE_PATTERN.fullmatch(entry):
            raise DiceConfigError(
                f"{label} '{token}' is invalid: '{entry}' is not an integer. "
                f"Each dice set must contain exactly {FACE_COUNT} comma-separated integers."
            )
        faces.append(int(entry))
    try:
        return DiceSet(faces=tuple(faces))
    except ValidationError as exc:
        raise DiceConfigError(
            f"{label} '{token}' is invalid: expected exactly {FACE_COUNT} integers, got {len(faces)}."
        ) from exc


def parse_dice_sets(tokens: Iterable[str], *, min_sets: int = MIN_DICE) -> List[DiceSet]:
    """Validate every startup token; raise :class:`DiceConfigError` before any game starts."""

    tokens = list(tokens)
    if len(tokens) < min_sets:
        raise DiceConfigError(
            f"At least {min_sets} dice sets are required, got {len(tokens)}. "
            f"Example: 2,2,4,4,9,9 1,1,1,5,5,5 3,3,5,5,7,7"
        )
    return [parse_dice_spec(token, position=index) for index, token in enumerate(tokens)]
