"""Seeded linear congruential generator shared by every random choice in a game."""

from __future__ import annotations

from typing import Sequence, TypeVar

from wordsnake.common.constants import LCG_INCREMENT, LCG_MODULUS, LCG_MULTIPLIER

T = TypeVar("T")


class Lcg32:
    """32-bit LCG with a Math.random-like ``next()``."""

    def __init__(self, seed: int) -> None:
        self.state = seed % LCG_MODULUS

    def next(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def randint(self, n: int) -> int:
        """Return an integer in [0, n)."""
        if n <= 0:
            raise ValueError("Upper bound must be positive")
        return int(self.next() * n)

    def choice(self, seq: Sequence[T]) -> T:
        return seq[self.randint(len(seq))]
