"""Key generation strategies.

Every strategy consumes a fixed number of draws from the shared stream for
fixed inputs, so a sequence is fully reproducible from the seed.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from faultline.errors import ConfigValidationError

_LOWERCASE = ord("a")
_ALPHABET_SIZE = 26


def _random_lowercase(rng: random.Random, length: int) -> bytes:
    return bytes(_LOWERCASE + rng.randrange(_ALPHABET_SIZE) for _ in range(length))


@runtime_checkable
class KeyStrategy(Protocol):
    """Protocol for key generators."""

    def generate(self, rng: random.Random, existing_keys: Sequence[bytes]) -> bytes:
        """Generate one key.

        Args:
            rng: The shared pseudorandom stream.
            existing_keys: Keys generated earlier in the same sequence.
        """
        ...


class BaseKeyStrategy(ABC):
    """Base class for key strategy implementations."""

    @abstractmethod
    def generate(self, rng: random.Random, existing_keys: Sequence[bytes]) -> bytes: ...

    def validate(self) -> list[str]:
        return []

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name}

    type_name = "base"


class UniformRandomKeys(BaseKeyStrategy):
    """Lowercase keys with a length drawn uniformly from ``[min_length, max_length]``."""

    type_name = "uniform_random"

    def __init__(self, min_length: int = 4, max_length: int = 16) -> None:
        self.min_length = min_length
        self.max_length = max_length

    def validate(self) -> list[str]:
        if self.min_length < 0 or self.min_length > self.max_length:
            return [
                f"key length range must satisfy 0 <= min <= max, "
                f"got [{self.min_length}, {self.max_length}]"
            ]
        return []

    def generate(self, rng: random.Random, existing_keys: Sequence[bytes]) -> bytes:
        length = rng.randrange(self.min_length, self.max_length + 1)
        return _random_lowercase(rng, length)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "min_length": self.min_length, "max_length": self.max_length}


class CollisionProneKeys(BaseKeyStrategy):
    """Keys that deliberately sit close to earlier keys.

    With probability ``hash_collision_rate`` an earlier key from the same
    sequence is reused with the lowest bit of its first byte flipped;
    otherwise a random lowercase key of 8..23 bytes is produced.
    """

    type_name = "collision_prone"

    def __init__(self, hash_collision_rate: float = 0.3) -> None:
        self.hash_collision_rate = hash_collision_rate

    def validate(self) -> list[str]:
        if not 0.0 <= self.hash_collision_rate <= 1.0:
            return [f"hash_collision_rate must be within [0, 1], got {self.hash_collision_rate}"]
        return []

    def generate(self, rng: random.Random, existing_keys: Sequence[bytes]) -> bytes:
        if existing_keys and rng.random() < self.hash_collision_rate:
            base = bytearray(existing_keys[rng.randrange(len(existing_keys))])
            if base:
                base[0] ^= 1
            return bytes(base)
        length = 8 + rng.randrange(16)
        return _random_lowercase(rng, length)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "hash_collision_rate": self.hash_collision_rate}


class SequentialKeys(BaseKeyStrategy):
    """A fixed prefix followed by a zero-padded (at least 8 digit) number.

    By default the number is drawn from the stream, so keys share a shape
    but are not ordered. With ``monotonic=True`` the number is the key's
    position within the sequence and no draw is consumed.
    """

    type_name = "sequential"

    def __init__(self, prefix: str | bytes = "key_", monotonic: bool = False) -> None:
        self.prefix = prefix.encode() if isinstance(prefix, str) else bytes(prefix)
        self.monotonic = monotonic

    def generate(self, rng: random.Random, existing_keys: Sequence[bytes]) -> bytes:
        number = len(existing_keys) if self.monotonic else rng.getrandbits(32)
        return self.prefix + f"{number:08d}".encode()

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "prefix": self.prefix.decode(errors="replace"), "monotonic": self.monotonic}


KEY_STRATEGIES: dict[str, type[BaseKeyStrategy]] = {
    UniformRandomKeys.type_name: UniformRandomKeys,
    CollisionProneKeys.type_name: CollisionProneKeys,
    SequentialKeys.type_name: SequentialKeys,
}


def key_strategy_from_dict(data: dict[str, Any]) -> BaseKeyStrategy:
    """Build a key strategy from ``{"type": ..., **options}``.

    Raises:
        ConfigValidationError: If the type is unknown or options are invalid.
    """
    options = dict(data)
    type_name = options.pop("type", UniformRandomKeys.type_name)
    strategy_cls = KEY_STRATEGIES.get(type_name)
    if strategy_cls is None:
        raise ConfigValidationError(
            message=f"Unknown key strategy '{type_name}'. Valid: {sorted(KEY_STRATEGIES)}",
            field="key_strategy",
            value=type_name,
        )
    try:
        strategy = strategy_cls(**options)
    except TypeError as e:
        raise ConfigValidationError(
            message=f"Invalid options for key strategy '{type_name}': {e}",
            field="key_strategy",
            value=data,
            cause=e,
        ) from e
    errors = strategy.validate()
    if errors:
        raise ConfigValidationError(errors=errors, field="key_strategy", value=data)
    return strategy
