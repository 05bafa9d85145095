"""Invariant, Violation, and Severity."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from faultline.core.operation import Operation


class Severity(Enum):
    """How serious a violation is.

    Only CRITICAL violations halt a sequence and trigger shrinking.
    """

    CRITICAL = "critical"  # Abort the sequence, shrink, fail the run
    IMPORTANT = "important"  # Recorded, execution continues
    ADVISORY = "advisory"  # Recorded, execution continues


@dataclass
class Invariant:
    """A predicate over system state that must hold after every operation.

    Predicates should be pure reads of the live system instance.

    Example:
        Invariant(
            name="counter_bounded",
            check=lambda system: system.counter <= 50,
            severity=Severity.CRITICAL,
        )
    """

    name: str
    check: Callable[[Any], bool]
    severity: Severity = Severity.IMPORTANT
    message: str = ""

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Invariant):
            return NotImplemented
        return self.name == other.name

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL


@dataclass
class Violation:
    """A failed invariant check.

    Attributes:
        invariant_name: Name of the invariant that was violated.
        severity: Severity copied from the invariant.
        message: Free-text description of the violation.
        operation_index: Index of the operation after which the check failed.
        operation: The operation after which the check failed.
        iteration: Iteration of the run the violation belongs to.
        timestamp: When the violation was detected.
    """

    invariant_name: str
    severity: Severity
    message: str = ""
    operation_index: int = 0
    operation: Operation | None = None
    iteration: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        invariant: Invariant,
        operation_index: int,
        operation: Operation | None = None,
        iteration: int = 0,
        message_override: str = "",
    ) -> Violation:
        return cls(
            invariant_name=invariant.name,
            severity=invariant.severity,
            message=message_override or invariant.message,
            operation_index=operation_index,
            operation=operation,
            iteration=iteration,
        )

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL


def invariant(
    name: str | None = None,
    message: str = "",
    severity: Severity = Severity.IMPORTANT,
) -> Callable[[Callable[[Any], bool]], Invariant]:
    """Decorator to create an Invariant from a function.

    Example:
        @invariant(severity=Severity.CRITICAL)
        def keys_never_empty(store):
            return all(store.data)
    """

    def decorator(func: Callable[[Any], bool]) -> Invariant:
        return Invariant(
            name=name or func.__name__,
            check=func,
            message=message or func.__doc__ or "",
            severity=severity,
        )

    return decorator
