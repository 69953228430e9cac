"""HMAC-SHA256 commit/reveal used to make the opponent's random choices auditable.

The opponent draws a value, binds it with ``HMAC-SHA256(key, str(value))`` and
publishes only the tag. After the human has answered, the key and value are
revealed so anyone can recompute the tag.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass, field

import structlog

from ..utils.rng import SecureRandom, SystemSecureRandom

LOGGER = structlog.get_logger(__name__)

KEY_BYTES = 32
TAG_BYTES = 32


class CommitmentError(RuntimeError):
    """Raised when a commitment is misused (e.g. revealed twice)."""


class IntegrityError(CommitmentError):
    """Raised when a revealed key/value does not reproduce the published tag."""


def compute_tag(key: bytes, value: int) -> str:
    """Return the hex HMAC-SHA256 of the decimal rendering of ``value``."""

    return hmac.new(key, str(value).encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class Commitment:
    """Public half of a commitment: the tag and the exclusive range bound."""

    tag: str
    upper: int


@dataclass(frozen=True)
class Reveal:
    """Disclosed key and value for a previously published tag."""

    key: bytes = field(repr=False)
    value: int
    tag: str

    @property
    def key_hex(self) -> str:
        return self.key.hex()


@dataclass
class PendingReveal:
    """Secret half held by the opponent until the reveal."""

    commitment: Commitment
    _key: bytes = field(repr=False)
    _value: int = field(repr=False)
    revealed: bool = False


class FairCommitment:
    """Creates commitments over uniform integers using an injected secure source."""

    def __init__(self, source: SecureRandom | None = None, *, key_bytes: int = KEY_BYTES) -> None:
        if key_bytes < KEY_BYTES:
            raise ValueError(f"Secret keys must be at least {KEY_BYTES} bytes, got {key_bytes}")
        self._source = source or SystemSecureRandom()
        self._key_bytes = key_bytes

    def commit(self, upper: int) -> tuple[Commitment, PendingReveal]:
        """Commit to a uniform integer in ``[0, upper)``."""

        if upper < 1:
            raise ValueError(f"Commitment range must be positive, got {upper}")
        value = self._source.randbelow(upper)
        if not 0 <= value < upper:
            raise CommitmentError(f"Secure source returned {value} outside [0, {upper})")
        key = self._source.token_bytes(self._key_bytes)
        commitment = Commitment(tag=compute_tag(key, value), upper=upper)
        LOGGER.info("commitment.created", tag=commitment.tag, upper=upper)
        return commitment, PendingReveal(commitment=commitment, _key=key, _value=value)

    def reveal(self, pending: PendingReveal) -> Reveal:
        """Disclose key and value; a second call for the same commitment is an error."""

        if pending.revealed:
            raise CommitmentError(f"Commitment {pending.commitment.tag} was already revealed")
        pending.revealed = True
        reveal = Reveal(key=pending._key, value=pending._value, tag=pending.commitment.tag)
        LOGGER.info("commitment.revealed", tag=reveal.tag, value=reveal.value, key=reveal.key_hex)
        return reveal


def verify_reveal(commitment: Commitment | str, reveal: Reveal) -> bool:
    """Recompute the tag from the reveal and compare it with the published one."""

    tag = commitment.tag if isinstance(commitment, Commitment) else commitment
    return hmac.compare_digest(compute_tag(reveal.key, reveal.value), tag.lower())


def ensure_verified(commitment: Commitment, reveal: Reveal) -> Reveal:
    """Return ``reveal`` unchanged or raise :class:`IntegrityError`."""

    if reveal.tag != commitment.tag or not verify_reveal(commitment, reveal):
        raise IntegrityError(f"Reveal does not match commitment {commitment.tag}")
    if not 0 <= reveal.value < commitment.upper:
        raise IntegrityError(f"Revealed value {reveal.value} outside [0, {commitment.upper})")
    return reveal
