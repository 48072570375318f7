"""Splittable pseudo-random seeds.

A seed is a SplitMix64 state: a 64-bit value advanced by a fixed odd gamma.
Splitting a seed yields two seeds whose streams are independent of each
other, and splitting is a pure function of the input seed, so a whole run can
be replayed from the single seed it started with.
"""

import secrets
from dataclasses import dataclass

MASK64 = 0xFFFF_FFFF_FFFF_FFFF
GOLDEN_GAMMA = 0x9E37_79B9_7F4A_7C15


class InvalidSeedError(ValueError):
    """Raised when a seed cannot be constructed or parsed."""


def _shift_xor(shift: int, word: int) -> int:
    return word ^ (word >> shift)


def _shift_xor_multiply(shift: int, k: int, word: int) -> int:
    return (_shift_xor(shift, word) * k) & MASK64


def mix64(word: int) -> int:
    """Finalise a 64-bit word (MurmurHash3 mixer)."""
    word = _shift_xor_multiply(33, 0xFF51_AFD7_ED55_8CCD, word)
    word = _shift_xor_multiply(33, 0xC4CE_B9FE_1A85_EC53, word)
    return _shift_xor(33, word)


def _mix64_variant13(word: int) -> int:
    word = _shift_xor_multiply(30, 0xBF58_476D_1CE4_E5B9, word)
    word = _shift_xor_multiply(27, 0x94D0_49BB_1331_11EB, word)
    return _shift_xor(31, word)


def mix_gamma(word: int) -> int:
    """Derive an odd gamma with enough bit transitions to be a good stride."""
    gamma = _mix64_variant13(word) | 1
    if (gamma ^ (gamma >> 1)).bit_count() >= 24:
        return gamma
    return gamma ^ 0xAAAA_AAAA_AAAA_AAAA


@dataclass(frozen=True, kw_only=True)
class Seed:
    """Reproducible state of a splittable pseudo-random stream."""

    value: int
    gamma: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= MASK64:
            raise InvalidSeedError(f"Seed value out of 64-bit range: {self.value}")
        if not 0 <= self.gamma <= MASK64 or self.gamma % 2 == 0:
            raise InvalidSeedError(f"Seed gamma must be an odd 64-bit word: {self.gamma}")

    def __str__(self) -> str:
        return f"{self.value}:{self.gamma}"

    @classmethod
    def from_int(cls, number: int) -> "Seed":
        """Derive a seed from a single integer."""
        number &= MASK64
        return cls(
            value=mix64(number),
            gamma=mix_gamma((number + GOLDEN_GAMMA) & MASK64),
        )

    @classmethod
    def random(cls) -> "Seed":
        """Draw a fresh seed from the operating system's entropy source."""
        return cls.from_int(secrets.randbits(64))

    @classmethod
    def parse(cls, text: str) -> "Seed":
        """Parse ``"<value>:<gamma>"`` as rendered by ``str(seed)``.

        A bare integer is accepted too and goes through ``from_int``.
        """
        text = text.strip()
        try:
            if ":" not in text:
                return cls.from_int(int(text))
            value, gamma = (int(part) for part in text.split(":", 1))
        except ValueError as e:
            raise InvalidSeedError(f"Invalid seed {text!r}: {e}") from e
        return cls(value=value, gamma=gamma)

    def _advance(self) -> tuple[int, "Seed"]:
        value = (self.value + self.gamma) & MASK64
        return value, Seed(value=value, gamma=self.gamma)

    def next_word64(self) -> tuple[int, "Seed"]:
        """Return a pseudo-random 64-bit word and the advanced seed."""
        value, seed = self._advance()
        return mix64(value), seed

    def next_integer(self, low: int, high: int) -> tuple[int, "Seed"]:
        """Return an integer in ``[low, high]`` and the advanced seed."""
        if low > high:
            raise ValueError(f"Empty range: [{low}, {high}]")
        span = high - low + 1
        bits = 0
        acc = 0
        seed = self
        while bits < span.bit_length() + 32:
            word, seed = seed.next_word64()
            acc = (acc << 64) | word
            bits += 64
        return low + acc % span, seed

    def split(self) -> tuple["Seed", "Seed"]:
        """Split into two independent seeds.

        The first seed continues this stream, the second starts a new one.
        """
        value, seed = self._advance()
        gamma, seed = seed._advance()
        return seed, Seed(value=mix64(value), gamma=mix_gamma(gamma))


type SeedLike = Seed | str | int


def coerce_seed(seed: SeedLike) -> Seed:
    """Accept a ``Seed``, its string form, or an integer."""
    if isinstance(seed, Seed):
        return seed
    if isinstance(seed, bool):
        raise InvalidSeedError(f"Invalid seed: {seed!r}")
    if isinstance(seed, int):
        return Seed.from_int(seed)
    return Seed.parse(seed)
