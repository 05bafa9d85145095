"""Weighted operation-kind selection."""

from __future__ import annotations

import random
from collections.abc import Hashable, Iterable

from faultline.errors import ConfigValidationError, ErrorCode, GenerationError


class OperationDistribution:
    """Maps operation kinds to selection weights.

    Entries keep insertion order, which is also the order ``sample`` walks
    them in. Weights may be set unnormalised; ``normalize`` rescales them to
    sum to 1.0.

    Example:
        dist = OperationDistribution()
        dist.set_weight(Op.PUT, 7)
        dist.set_weight(Op.GET, 3)
        dist.normalize()
        kind = dist.sample(rng)
    """

    def __init__(self, weights: dict[Hashable, float] | None = None) -> None:
        self._weights: dict[Hashable, float] = {}
        for kind, weight in (weights or {}).items():
            self.set_weight(kind, weight)

    @classmethod
    def uniform(cls, kinds: Iterable[Hashable]) -> OperationDistribution:
        """Equal weight for every kind, already normalised."""
        dist = cls()
        for kind in kinds:
            dist.set_weight(kind, 1.0)
        dist.normalize()
        return dist

    def set_weight(self, kind: Hashable, weight: float) -> None:
        if weight < 0:
            raise ConfigValidationError(
                message=f"Operation weight must be >= 0, got {weight} for {kind!r}",
                field="operation_weights",
                value=weight,
            )
        self._weights[kind] = float(weight)

    def normalize(self) -> None:
        total = self.total
        if total > 0:
            for kind in self._weights:
                self._weights[kind] /= total

    def sample(self, rng: random.Random) -> Hashable:
        """Pick one kind using exactly one draw from ``rng``.

        If rounding leaves no cumulative bucket above the draw, the first
        entry with a positive weight is returned (or the first entry when
        every weight is zero).
        """
        if not self._weights:
            raise GenerationError(
                "Cannot sample from an empty operation distribution",
                error_code=ErrorCode.EMPTY_DISTRIBUTION,
            )

        draw = rng.random()
        cumulative = 0.0
        for kind, weight in self._weights.items():
            cumulative += weight
            if draw < cumulative:
                return kind

        return self._fallback()

    def _fallback(self) -> Hashable:
        # Deliberately the first positive-weight entry, not the first entry:
        # zero-weight kinds stay unreachable unless every weight is zero.
        for kind, weight in self._weights.items():
            if weight > 0:
                return kind
        return next(iter(self._weights))

    @property
    def total(self) -> float:
        return sum(self._weights.values())

    @property
    def weights(self) -> dict[Hashable, float]:
        return dict(self._weights)

    @property
    def kinds(self) -> list[Hashable]:
        return list(self._weights)

    def weight(self, kind: Hashable) -> float:
        return self._weights.get(kind, 0.0)

    def __len__(self) -> int:
        return len(self._weights)

    def __contains__(self, kind: object) -> bool:
        return kind in self._weights
