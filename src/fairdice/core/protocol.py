"""Interactive phases of the game: first-player decision, die selection and fair rolls.

Each phase talks to the human only through :class:`GameIO`, so the protocol
logic can be driven by a scripted implementation in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple

import structlog

from .commitment import Commitment, FairCommitment, Reveal, ensure_verified
from .config import GameConfig
from .dice import DiceSet
from .probability import HelpRow, build_help_rows

LOGGER = structlog.get_logger(__name__)


class Side(str, Enum):
    """The two parties of a game."""

    HUMAN = "human"
    OPPONENT = "opponent"


class ChoiceKind(str, Enum):
    """Kinds of questions put to the human."""

    FIRST_PLAYER = "FIRST_PLAYER"
    DIE = "DIE"
    OFFSET = "OFFSET"


@dataclass(frozen=True)
class ChoiceRequest:
    """A menu shown to the human: a title plus ``(token, label)`` options."""

    kind: ChoiceKind
    title: str
    options: Tuple[Tuple[str, str], ...]


class GameExited(Exception):
    """Raised when the human enters the exit token; not an error."""

    def __init__(self, phase: ChoiceKind) -> None:
        self.phase = phase
        super().__init__(f"Game exited during {phase.value}")


class GameIO(Protocol):
    """Request/response surface between the protocol and whoever plays the human side."""

    def show_commitment(self, commitment: Commitment) -> None: ...

    def show_reveal(self, reveal: Reveal) -> None: ...

    def prompt_choice(self, request: ChoiceRequest) -> str: ...

    def show_help(self, rows: Sequence[HelpRow]) -> None: ...

    def notify(self, message: str) -> None: ...


@dataclass(frozen=True)
class TurnDecision:
    winner: Side
    guess: int
    reveal: Reveal


@dataclass(frozen=True)
class RollResult:
    side: Side
    committed_index: int
    offset: int
    final_index: int
    face: int
    reveal: Reveal


def combine_index(committed_index: int, offset: int, face_count: int) -> int:
    """Final face index of a fair roll: ``(committed + offset) mod face_count``."""

    if face_count < 1:
        raise ValueError(f"face_count must be positive, got {face_count}")
    return (committed_index + offset) % face_count


class TurnDecider:
    """Decides who picks a die first: the human guesses the opponent's committed bit."""

    def __init__(
        self,
        commitments: FairCommitment,
        io: GameIO,
        dice_sets: Sequence[DiceSet],
        config: Optional[GameConfig] = None,
    ) -> None:
        self.commitments = commitments
        self.io = io
        self.dice_sets = list(dice_sets)
        self.config = config or GameConfig()

    def _request(self) -> ChoiceRequest:
        return ChoiceRequest(
            kind=ChoiceKind.FIRST_PLAYER,
            title="Try to guess my selection:",
            options=(
                ("0", "0"),
                ("1", "1"),
                (self.config.exit_token, "exit"),
                (self.config.help_token, "help"),
            ),
        )

    def decide(self) -> TurnDecision:
        commitment, pending = self.commitments.commit(2)
        self.io.show_commitment(commitment)

        while True:
            answer = self.io.prompt_choice(self._request()).strip()
            if self.config.is_exit(answer):
                LOGGER.info("turn.exited")
                raise GameExited(ChoiceKind.FIRST_PLAYER)
            if self.config.is_help(answer):
                self.io.show_help(build_help_rows(self.dice_sets, baseline=self.config.win_baseline))
                continue
            if answer in ("0", "1"):
                guess = int(answer)
                break
            self.io.notify(
                f"Invalid selection. Please enter 0, 1, {self.config.exit_token}, "
                f"or {self.config.help_token} for help."
            )

        reveal = ensure_verified(commitment, self.commitments.reveal(pending))
        self.io.show_reveal(reveal)
        winner = Side.HUMAN if guess == reveal.value else Side.OPPONENT
        LOGGER.info("turn.decided", guess=guess, committed=reveal.value, winner=winner.value)
        return TurnDecision(winner=winner, guess=guess, reveal=reveal)


class DiceSelector:
    """Reads a validated die index from the human; knows nothing about fairness."""

    def __init__(self, io: GameIO, dice_sets: Sequence[DiceSet]) -> None:
        self.io = io
        self.dice_sets = list(dice_sets)

    def available(self, excluded: Optional[int] = None) -> List[int]:
        return [index for index in range(len(self.dice_sets)) if index != excluded]

    def select(self, excluded: Optional[int] = None) -> int:
        indices = self.available(excluded)
        request = ChoiceRequest(
            kind=ChoiceKind.DIE,
            title="Choose your dice:",
            options=tuple((str(index), ", ".join(str(f) for f in self.dice_sets[index].faces)) for index in indices),
        )
        while True:
            answer = self.io.prompt_choice(request).strip()
            try:
                choice = int(answer)
            except ValueError:
                choice = None
            if choice is not None and choice in indices:
                LOGGER.info("dice.selected", index=choice, excluded=excluded)
                return choice
            self.io.notify("Invalid selection. Please try again.")


class FairRoll:
    """Rolls a die by combining the opponent's committed index with the human's offset."""

    def __init__(
        self,
        commitments: FairCommitment,
        io: GameIO,
        dice_sets: Sequence[DiceSet],
        config: Optional[GameConfig] = None,
    ) -> None:
        self.commitments = commitments
        self.io = io
        self.dice_sets = list(dice_sets)
        self.config = config or GameConfig()

    def _request(self, face_count: int) -> ChoiceRequest:
        options = tuple((str(index), str(index)) for index in range(face_count))
        return ChoiceRequest(
            kind=ChoiceKind.OFFSET,
            title=f"Add your number modulo {face_count}:",
            options=options + ((self.config.exit_token, "exit"), (self.config.help_token, "help")),
        )

    def _read_offset(self, face_count: int) -> int:
        request = self._request(face_count)
        while True:
            answer = self.io.prompt_choice(request).strip()
            if self.config.is_exit(answer):
                raise GameExited(ChoiceKind.OFFSET)
            if self.config.is_help(answer):
                self.io.show_help(build_help_rows(self.dice_sets, baseline=self.config.win_baseline))
                continue
            try:
                return int(answer)
            except ValueError:
                self.io.notify(
                    f"Invalid selection. Please enter a number from 0 to {face_count - 1}, "
                    f"{self.config.exit_token}, or {self.config.help_token} for help."
                )

    def roll(self, dice: DiceSet, side: Side) -> RollResult:
        face_count = dice.face_count
        self.io.notify(f"{side.value.capitalize()} is rolling {dice}...")
        commitment, pending = self.commitments.commit(face_count)
        self.io.show_commitment(commitment)

        try:
            offset = self._read_offset(face_count) % face_count
        except GameExited:
            LOGGER.info("roll.exited", side=side.value)
            raise

        reveal = ensure_verified(commitment, self.commitments.reveal(pending))
        final_index = combine_index(reveal.value, offset, face_count)
        face = dice.face_at(final_index)
        self.io.notify(f"({reveal.value} + {offset}) % {face_count} = {final_index}")
        self.io.notify(f"{side.value.capitalize()} roll is: {face}")
        self.io.show_reveal(reveal)
        LOGGER.info("roll.complete", side=side.value, final_index=final_index, face=face)
        return RollResult(
            side=side,
            committed_index=reveal.value,
            offset=offset,
            final_index=final_index,
            face=face,
            reveal=reveal,
        )
