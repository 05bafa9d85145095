"""Failure-injection probability model."""

from __future__ import annotations

from dataclasses import dataclass, field

from faultline.core.categories import FailureCategory, category_label, is_builtin_label, resolve_category
from faultline.errors import ConfigValidationError, ErrorCode
from faultline.injection.conditions import ConditionalMultiplier, SystemCondition


def clamp_probability(probability: float) -> float:
    return min(1.0, max(0.0, probability))


@dataclass
class FailureInjectionConfig:
    """Base probabilities per category plus condition multipliers.

    Built-in categories have dedicated fields; host-defined categories live
    in ``custom_failure_probabilities``. Both share the same multiplier
    logic, and every probability handed out is clamped to [0.0, 1.0].
    """

    allocator_failure_probability: float = 0.0
    filesystem_error_probability: float = 0.0
    network_error_probability: float = 0.0
    custom_failure_probabilities: dict[str, float] = field(default_factory=dict)
    conditional_multipliers: list[ConditionalMultiplier] = field(default_factory=list)

    def base_probability(self, category: FailureCategory | str) -> float:
        category = resolve_category(category)
        if category is FailureCategory.ALLOCATOR:
            return self.allocator_failure_probability
        if category is FailureCategory.FILESYSTEM:
            return self.filesystem_error_probability
        if category is FailureCategory.NETWORK:
            return self.network_error_probability
        return self.custom_failure_probabilities.get(category, 0.0)

    def set_base_probability(self, category: FailureCategory | str, probability: float) -> None:
        category = resolve_category(category)
        _check_probability(category_label(category), probability)
        if category is FailureCategory.ALLOCATOR:
            self.allocator_failure_probability = probability
        elif category is FailureCategory.FILESYSTEM:
            self.filesystem_error_probability = probability
        elif category is FailureCategory.NETWORK:
            self.network_error_probability = probability
        else:
            self.custom_failure_probabilities[category] = probability

    def set_custom_probability(self, name: str, probability: float) -> None:
        if not name:
            raise ConfigValidationError(
                message="Custom failure name must be non-empty",
                field="custom_failures",
                value=name,
            )
        if is_builtin_label(name):
            raise ConfigValidationError(
                message=f"Custom failure name {name!r} is a built-in category",
                field="custom_failures",
                value=name,
                expected="a name other than " + ", ".join(c.value for c in FailureCategory),
            )
        self.set_base_probability(name, probability)

    def add_multiplier(
        self,
        condition: SystemCondition,
        multiplier: float,
        duration: int | None = None,
    ) -> ConditionalMultiplier:
        entry = ConditionalMultiplier(condition, multiplier, duration)
        errors = entry.validate()
        if errors:
            raise ConfigValidationError(errors=errors, field="conditional_multipliers")
        self.conditional_multipliers.append(entry)
        return entry

    def multiplier_for(self, condition: SystemCondition | None, elapsed: int = 0) -> float:
        """Factor of the first multiplier declared for ``condition``.

        Only the first matching entry is considered; if its window has run
        out no other entry takes over and the factor is 1.0.
        """
        if condition is None:
            return 1.0
        for entry in self.conditional_multipliers:
            if entry.condition == condition:
                return entry.multiplier if entry.is_active(elapsed) else 1.0
        return 1.0

    def effective_probability(
        self,
        base: float,
        condition: SystemCondition | None,
        elapsed: int = 0,
    ) -> float:
        return clamp_probability(base * self.multiplier_for(condition, elapsed))

    def probability_for(
        self,
        category: FailureCategory | str,
        condition: SystemCondition | None = None,
        elapsed: int = 0,
    ) -> float:
        return self.effective_probability(self.base_probability(category), condition, elapsed)

    def validate(self) -> list[str]:
        """Return a list of problems; empty when the config is valid."""
        errors = []
        for category in FailureCategory:
            probability = self.base_probability(category)
            if not 0.0 <= probability <= 1.0:
                errors.append(f"{category.value} failure probability must be within [0, 1], got {probability}")
        for name, probability in self.custom_failure_probabilities.items():
            if not name:
                errors.append("custom failure names must be non-empty")
            elif is_builtin_label(name):
                errors.append(f"custom failure '{name}' collides with a built-in category")
            if not 0.0 <= probability <= 1.0:
                errors.append(f"custom failure '{name}' probability must be within [0, 1], got {probability}")
        for entry in self.conditional_multipliers:
            errors.extend(entry.validate())
        return errors


def _check_probability(name: str, probability: float) -> None:
    if not 0.0 <= probability <= 1.0:
        raise ConfigValidationError(
            message=f"{name} failure probability must be within [0, 1], got {probability}",
            error_code=ErrorCode.INVALID_PROBABILITY,
            field=name,
            value=probability,
            expected="0.0 <= p <= 1.0",
        )
