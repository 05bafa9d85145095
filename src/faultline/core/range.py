"""Inclusive integer range."""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class Range:
    """An inclusive ``[min, max]`` integer range.

    Used for sequence lengths, key lengths and value sizes.
    """

    min: int
    max: int

    def validate(self) -> bool:
        return 0 <= self.min <= self.max

    def sample(self, rng: random.Random) -> int:
        """Draw a value uniformly from the range.

        A degenerate range (``min == max``) returns ``min`` without consuming
        a draw from the stream.
        """
        if self.min == self.max:
            return self.min
        return rng.randrange(self.min, self.max + 1)

    def __str__(self) -> str:
        return f"[{self.min}, {self.max}]"
