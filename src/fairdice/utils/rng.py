"""Randomness helpers: secure source for commitments, seeded rng for plain picks."""

import random
import secrets
from typing import Protocol, Sequence


class SecureRandom(Protocol):
    """Capability used by commitments; must be backed by a CSPRNG in production."""

    def token_bytes(self, nbytes: int) -> bytes: ...

    def randbelow(self, upper: int) -> int: ...


class SystemSecureRandom:
    """Secure randomness from the operating system via :mod:`secrets`."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)

    def randbelow(self, upper: int) -> int:
        return secrets.randbelow(upper)


def build_rng(*, seed: int | None = None) -> random.Random:
    """Return a deterministic random generator."""
    return random.Random(seed)


def pick_unclaimed(rng: random.Random, *, total: int, claimed: int | None = None) -> int:
    """Pick a uniform index in ``range(total)`` that is not ``claimed``.

    Args:
        rng: Random number generator
        total: Number of candidate indices
        claimed: Index already held by the other side, if any

    Returns:
        The chosen index
    """
    candidates: Sequence[int] = [index for index in range(total) if index != claimed]
    if not candidates:
        raise ValueError("No unclaimed index left to pick")
    return rng.choice(candidates)
