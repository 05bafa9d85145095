"""Failure injector: turns probabilities into draws on the shared stream."""

from __future__ import annotations

import logging
import random

from faultline.core.categories import FailureCategory, category_label, resolve_category
from faultline.core.statistics import FailureStats
from faultline.injection.conditions import SystemCondition
from faultline.injection.config import FailureInjectionConfig

logger = logging.getLogger(__name__)


class FailureInjector:
    """Decides whether to inject a failure.

    Every decision consumes exactly one draw from ``rng``, whatever the
    probability and whatever the outcome, so the stream stays aligned across
    runs that only differ in their failure configuration.
    """

    def __init__(
        self,
        config: FailureInjectionConfig,
        rng: random.Random,
        stats: FailureStats | None = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.stats = stats
        self._condition: SystemCondition | None = None
        self._decisions_since_condition = 0

    @property
    def condition(self) -> SystemCondition | None:
        return self._condition

    def set_condition(self, condition: SystemCondition | None) -> None:
        """Declare the current condition; restarts multiplier windows."""
        if condition != self._condition:
            logger.debug(f"System condition: {self._condition} -> {condition}")
        self._condition = condition
        self._decisions_since_condition = 0

    def clear_condition(self) -> None:
        self.set_condition(None)

    @property
    def decisions_since_condition(self) -> int:
        return self._decisions_since_condition

    def effective_probability(self, category: FailureCategory | str) -> float:
        return self.config.probability_for(
            category, self._condition, self._decisions_since_condition
        )

    def should_inject(self, category: FailureCategory | str) -> bool:
        category = resolve_category(category)
        probability = self.effective_probability(category)
        draw = self.rng.random()
        self._decisions_since_condition += 1
        inject = draw < probability
        if inject:
            if self.stats is not None:
                self.stats.record(category)
            logger.debug(f"Injecting {category_label(category)} failure (p={probability:.4f})")
        return inject

    def should_inject_allocator_failure(self) -> bool:
        return self.should_inject(FailureCategory.ALLOCATOR)

    def should_inject_filesystem_error(self) -> bool:
        return self.should_inject(FailureCategory.FILESYSTEM)

    def should_inject_network_error(self) -> bool:
        return self.should_inject(FailureCategory.NETWORK)

    def should_inject_custom_failure(self, name: str) -> bool:
        return self.should_inject(name)
