"""
fairdice - Test Configuration and Fixtures

Deterministic stand-ins for the secure random source and the console.
"""

from typing import Any, Iterable, List, Sequence, Tuple

import pytest

from fairdice.core.commitment import Commitment, Reveal
from fairdice.core.dice import DiceSet
from fairdice.core.probability import HelpRow
from fairdice.core.protocol import ChoiceRequest


class FixedSecureRandom:
    """Replays scripted committed values; keys are distinct counters."""

    def __init__(self, values: Iterable[int] = ()):
        self.values = list(values)
        self.keys_issued = 0

    def randbelow(self, upper: int) -> int:
        assert self.values, "FixedSecureRandom ran out of scripted values"
        value = self.values.pop(0)
        assert 0 <= value < upper, f"scripted value {value} outside [0, {upper})"
        return value

    def token_bytes(self, nbytes: int) -> bytes:
        self.keys_issued += 1
        return self.keys_issued.to_bytes(nbytes, "big")


class ScriptedIO:
    """Replays human answers and records everything shown, in order."""

    def __init__(self, answers: Iterable[str] = ()):
        self.answers = list(answers)
        self.events: List[Tuple[str, Any]] = []
        self.requests: List[ChoiceRequest] = []

    def show_commitment(self, commitment: Commitment) -> None:
        self.events.append(("commitment", commitment))

    def show_reveal(self, reveal: Reveal) -> None:
        self.events.append(("reveal", reveal))

    def show_help(self, rows: Sequence[HelpRow]) -> None:
        self.events.append(("help", list(rows)))

    def notify(self, message: str) -> None:
        self.events.append(("notify", message))

    def prompt_choice(self, request: ChoiceRequest) -> str:
        assert self.answers, f"no scripted answer left for {request.kind}"
        self.requests.append(request)
        self.events.append(("prompt", request.kind))
        return self.answers.pop(0)

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.events]

    def of(self, kind: str) -> List[Any]:
        return [payload for event, payload in self.events if event == kind]


class FirstChoiceRng:
    """Plain-rng stub whose ``choice`` always takes the first candidate."""

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def dice_sets() -> List[DiceSet]:
    return [
        DiceSet(faces=(2, 2, 4, 4, 9, 9)),
        DiceSet(faces=(1, 1, 1, 5, 5, 5)),
        DiceSet(faces=(3, 3, 5, 5, 7, 7)),
    ]


@pytest.fixture
def dice_tokens() -> List[str]:
    return ["2,2,4,4,9,9", "1,1,1,5,5,5", "3,3,5,5,7,7"]
