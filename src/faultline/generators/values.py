"""Value generation strategies."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any

from faultline.core.range import Range
from faultline.errors import ConfigValidationError

_UPPERCASE = ord("A")

# random_binary sizes: 64..1023 bytes
BINARY_MIN_SIZE = 64
BINARY_SIZE_SPAN = 960


def _random_uppercase(rng: random.Random, size: int) -> bytes:
    return bytes(_UPPERCASE + rng.randrange(26) for _ in range(size))


class ValueStrategy(ABC):
    """Base class for value generators."""

    type_name = "base"

    @abstractmethod
    def generate(self, rng: random.Random) -> bytes: ...

    def validate(self) -> list[str]:
        return []

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name}


class FixedSizeValues(ValueStrategy):
    """Uppercase values of exactly ``size`` bytes."""

    type_name = "fixed_size"

    def __init__(self, size: int = 32) -> None:
        self.size = size

    def validate(self) -> list[str]:
        if self.size < 0:
            return [f"value size must be >= 0, got {self.size}"]
        return []

    def generate(self, rng: random.Random) -> bytes:
        return _random_uppercase(rng, self.size)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "size": self.size}


class VariableSizeValues(ValueStrategy):
    """Uppercase values sized uniformly within ``[min_size, max_size]``."""

    type_name = "variable_size"

    def __init__(self, min_size: int = 8, max_size: int = 256) -> None:
        self.size_range = Range(min_size, max_size)

    def validate(self) -> list[str]:
        if not self.size_range.validate():
            return [f"value size range must satisfy 0 <= min <= max, got {self.size_range}"]
        return []

    def generate(self, rng: random.Random) -> bytes:
        return _random_uppercase(rng, self.size_range.sample(rng))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "min_size": self.size_range.min,
            "max_size": self.size_range.max,
        }


class RandomBinaryValues(ValueStrategy):
    """Arbitrary binary content, 64 to 1023 bytes long."""

    type_name = "random_binary"

    def generate(self, rng: random.Random) -> bytes:
        size = BINARY_MIN_SIZE + rng.randrange(BINARY_SIZE_SPAN)
        return rng.randbytes(size)


VALUE_STRATEGIES: dict[str, type[ValueStrategy]] = {
    FixedSizeValues.type_name: FixedSizeValues,
    VariableSizeValues.type_name: VariableSizeValues,
    RandomBinaryValues.type_name: RandomBinaryValues,
}


def value_strategy_from_dict(data: dict[str, Any]) -> ValueStrategy:
    """Build a value strategy from ``{"type": ..., **options}``."""
    options = dict(data)
    type_name = options.pop("type", VariableSizeValues.type_name)
    strategy_cls = VALUE_STRATEGIES.get(type_name)
    if strategy_cls is None:
        raise ConfigValidationError(
            message=f"Unknown value strategy '{type_name}'. Valid: {sorted(VALUE_STRATEGIES)}",
            field="value_strategy",
            value=type_name,
        )
    try:
        strategy = strategy_cls(**options)
    except TypeError as e:
        raise ConfigValidationError(
            message=f"Invalid options for value strategy '{type_name}': {e}",
            field="value_strategy",
            value=data,
            cause=e,
        ) from e
    errors = strategy.validate()
    if errors:
        raise ConfigValidationError(errors=errors, field="value_strategy", value=data)
    return strategy
