"""System conditions and the multipliers keyed on them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SystemCondition(Enum):
    """Operational state a system under test can declare.

    At most one condition is active at a time; the default is none.
    """

    DURING_RECOVERY = "during_recovery"
    UNDER_MEMORY_PRESSURE = "under_memory_pressure"
    HIGH_OPERATION_RATE = "high_operation_rate"
    AFTER_RESTART = "after_restart"
    DURING_FLUSH = "during_flush"
    HASH_TABLE_RESIZE = "hash_table_resize"
    NORMAL_OPERATION = "normal_operation"


@dataclass(frozen=True)
class ConditionalMultiplier:
    """Scales failure probabilities while ``condition`` is declared.

    Attributes:
        condition: The condition this multiplier applies to.
        multiplier: Factor applied to the base probability (>= 0).
        duration: Number of injection decisions after the condition was
            declared during which the multiplier applies. ``None`` means
            for as long as the condition stays declared.
    """

    condition: SystemCondition
    multiplier: float
    duration: int | None = None

    def is_active(self, elapsed: int) -> bool:
        return self.duration is None or elapsed < self.duration

    def validate(self) -> list[str]:
        errors = []
        if self.multiplier < 0:
            errors.append(
                f"multiplier for {self.condition.value} must be >= 0, got {self.multiplier}"
            )
        if self.duration is not None and self.duration < 0:
            errors.append(
                f"duration for {self.condition.value} must be >= 0, got {self.duration}"
            )
        return errors
