"""Finite state machine sequencing one game: decide, select, roll, compare."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import structlog

from ..utils.rng import SecureRandom, build_rng, pick_unclaimed
from .commitment import FairCommitment
from .config import GameConfig
from .dice import DiceConfigError, DiceSet
from .protocol import (
    DiceSelector,
    FairRoll,
    GameExited,
    GameIO,
    RollResult,
    Side,
    TurnDecider,
    TurnDecision,
)

LOGGER = structlog.get_logger(__name__)


class State(str, Enum):
    """Game states."""

    SETUP = "SETUP"
    FIRST_PLAYER = "FIRST_PLAYER"
    DICE_SELECTION = "DICE_SELECTION"
    OPPONENT_ROLL = "OPPONENT_ROLL"
    HUMAN_ROLL = "HUMAN_ROLL"
    END_GAME = "END_GAME"


class Outcome(str, Enum):
    """Game outcomes."""

    HUMAN_WIN = "human"
    OPPONENT_WIN = "opponent"
    TIE = "tie"
    EXITED = "exited"


class FSMError(RuntimeError):
    """Raised when the FSM cannot make progress."""


@dataclass
class GameState:
    """Container for tracking game state."""

    dice_sets: List[DiceSet]
    state: State = State.SETUP
    decision: Optional[TurnDecision] = None
    human_die: Optional[int] = None
    opponent_die: Optional[int] = None
    opponent_roll: Optional[RollResult] = None
    human_roll: Optional[RollResult] = None

    @property
    def first_mover(self) -> Optional[Side]:
        return self.decision.winner if self.decision else None

    def die_of(self, side: Side) -> Optional[int]:
        return self.human_die if side is Side.HUMAN else self.opponent_die

    def assign_die(self, side: Side, index: int) -> None:
        if not 0 <= index < len(self.dice_sets):
            raise ValueError(f"Die index {index} out of range for {len(self.dice_sets)} dice")
        other = Side.OPPONENT if side is Side.HUMAN else Side.HUMAN
        if self.die_of(other) == index:
            raise ValueError(f"Die {index} is already held by the {other.value}")
        if self.die_of(side) is not None:
            raise ValueError(f"The {side.value} already holds die {self.die_of(side)}")
        if side is Side.HUMAN:
            self.human_die = index
        else:
            self.opponent_die = index

    def record_roll(self, result: RollResult) -> None:
        if result.side is Side.OPPONENT:
            if self.opponent_roll is not None:
                raise ValueError("Opponent roll already recorded")
            self.opponent_roll = result
        else:
            if self.human_roll is not None:
                raise ValueError("Human roll already recorded")
            self.human_roll = result


@dataclass
class GameResult:
    outcome: Outcome
    state: GameState
    exited_during: Optional[State] = None

    @property
    def winner(self) -> Optional[Side]:
        if self.outcome is Outcome.HUMAN_WIN:
            return Side.HUMAN
        if self.outcome is Outcome.OPPONENT_WIN:
            return Side.OPPONENT
        return None


def decide_outcome(human_face: int, opponent_face: int) -> Outcome:
    """Strictly greater face wins; equal faces tie."""

    if human_face > opponent_face:
        return Outcome.HUMAN_WIN
    if opponent_face > human_face:
        return Outcome.OPPONENT_WIN
    return Outcome.TIE


class DiceGame:
    """Runs one game against the automated opponent."""

    def __init__(
        self,
        dice_sets: Sequence[DiceSet],
        io: GameIO,
        *,
        config: Optional[GameConfig] = None,
        secure_source: Optional[SecureRandom] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        if len(dice_sets) < self.config.min_dice:
            raise DiceConfigError(
                f"At least {self.config.min_dice} dice sets are required, got {len(dice_sets)}."
            )
        self.dice_sets = list(dice_sets)
        self.io = io
        self.rng = rng or build_rng()
        commitments = FairCommitment(secure_source, key_bytes=self.config.key_bytes)
        self.decider = TurnDecider(commitments, io, self.dice_sets, self.config)
        self.selector = DiceSelector(io, self.dice_sets)
        self.roller = FairRoll(commitments, io, self.dice_sets, self.config)
        self.state = GameState(dice_sets=self.dice_sets)

    def run(self) -> GameResult:
        state = self.state
        if state.state is not State.SETUP:
            raise FSMError(f"Game already played (state {state.state.value})")
        LOGGER.info("game.start", dice=[str(d) for d in self.dice_sets])

        try:
            state.state = State.FIRST_PLAYER
            state.decision = self.decider.decide()

            state.state = State.DICE_SELECTION
            self._assign_dice(state)

            state.state = State.OPPONENT_ROLL
            state.record_roll(self.roller.roll(self.dice_sets[state.opponent_die], Side.OPPONENT))

            state.state = State.HUMAN_ROLL
            state.record_roll(self.roller.roll(self.dice_sets[state.human_die], Side.HUMAN))
        except GameExited:
            exited_during = state.state
            state.state = State.END_GAME
            LOGGER.info("game.exited", phase=exited_during.value)
            return GameResult(outcome=Outcome.EXITED, state=state, exited_during=exited_during)

        state.state = State.END_GAME
        outcome = decide_outcome(state.human_roll.face, state.opponent_roll.face)
        LOGGER.info(
            "game.complete",
            outcome=outcome.value,
            human=state.human_roll.face,
            opponent=state.opponent_roll.face,
        )
        return GameResult(outcome=outcome, state=state)

    def _assign_dice(self, state: GameState) -> None:
        if state.first_mover is Side.OPPONENT:
            opponent_die = pick_unclaimed(self.rng, total=len(self.dice_sets))
            state.assign_die(Side.OPPONENT, opponent_die)
            self.io.notify(f"I make the first move and choose the {self.dice_sets[opponent_die]} dice.")
            state.assign_die(Side.HUMAN, self.selector.select(excluded=opponent_die))
        else:
            human_die = self.selector.select(excluded=None)
            state.assign_die(Side.HUMAN, human_die)
            self.io.notify(f"You make the first move and choose the {self.dice_sets[human_die]} dice.")
            state.assign_die(Side.OPPONENT, pick_unclaimed(self.rng, total=len(self.dice_sets), claimed=human_die))

        self.io.notify(f"You chose: {self.dice_sets[state.human_die]}")
        self.io.notify(f"I chose: {self.dice_sets[state.opponent_die]}")


def run_game(
    dice_sets: Sequence[DiceSet],
    io: GameIO,
    *,
    config: Optional[GameConfig] = None,
    secure_source: Optional[SecureRandom] = None,
    seed: Optional[int] = None,
) -> GameResult:
    """Build a :class:`DiceGame` and play it to completion or exit."""

    game = DiceGame(dice_sets, io, config=config, secure_source=secure_source, rng=build_rng(seed=seed))
    return game.run()
