"""Run statistics.

Counters are incremented by the generator, executor, shrinker and
orchestrator; callers only read them after a run. Per-operation timing and
the actual-vs-intended operation distribution are collected only when
detailed statistics are enabled, so the default path stays cheap.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from faultline.core.categories import FailureCategory, category_label, resolve_category
from faultline.errors import StatisticsError


@dataclass
class FailureStats:
    """Failure-injection counters.

    Rates are ``injected / total_operations`` and are 0.0 while no operation
    has been recorded.
    """

    allocator_failures_injected: int = 0
    filesystem_errors_injected: int = 0
    network_errors_injected: int = 0
    custom_failures_injected: dict[str, int] = field(default_factory=dict)
    total_operations: int = 0

    def record_operation(self) -> None:
        self.total_operations += 1

    def record(self, category: FailureCategory | str) -> None:
        """Record one injected failure for ``category``."""
        category = resolve_category(category)
        if category is FailureCategory.ALLOCATOR:
            self.allocator_failures_injected += 1
        elif category is FailureCategory.FILESYSTEM:
            self.filesystem_errors_injected += 1
        elif category is FailureCategory.NETWORK:
            self.network_errors_injected += 1
        elif isinstance(category, str) and category:
            self.custom_failures_injected[category] = (
                self.custom_failures_injected.get(category, 0) + 1
            )
        else:
            raise StatisticsError(f"Cannot record failure for category {category!r}")

    def count(self, category: FailureCategory | str) -> int:
        category = resolve_category(category)
        if category is FailureCategory.ALLOCATOR:
            return self.allocator_failures_injected
        if category is FailureCategory.FILESYSTEM:
            return self.filesystem_errors_injected
        if category is FailureCategory.NETWORK:
            return self.network_errors_injected
        return self.custom_failures_injected.get(category, 0)

    def rate(self, category: FailureCategory | str) -> float:
        if self.total_operations == 0:
            return 0.0
        return self.count(category) / self.total_operations

    @property
    def total_injected(self) -> int:
        return (
            self.allocator_failures_injected
            + self.filesystem_errors_injected
            + self.network_errors_injected
            + sum(self.custom_failures_injected.values())
        )

    def injection_rate(self) -> float:
        """Injected failures of any category per recorded operation."""
        if self.total_operations == 0:
            return 0.0
        return self.total_injected / self.total_operations

    def categories(self) -> list[str]:
        """Labels of every category with at least one recorded injection."""
        labels = [
            category_label(c) for c in FailureCategory if self.count(c) > 0
        ]
        labels.extend(sorted(self.custom_failures_injected))
        return labels


@dataclass
class OperationTiming:
    """Call count and min/max/total wall time for one operation kind."""

    total_calls: int = 0
    total_time_ns: int = 0
    min_time_ns: int | None = None
    max_time_ns: int = 0

    def record_call(self, elapsed_ns: int) -> None:
        if elapsed_ns < 0:
            raise StatisticsError(f"Negative operation time: {elapsed_ns}ns")
        self.total_calls += 1
        self.total_time_ns += elapsed_ns
        self.min_time_ns = elapsed_ns if self.min_time_ns is None else min(self.min_time_ns, elapsed_ns)
        self.max_time_ns = max(self.max_time_ns, elapsed_ns)

    @property
    def average_time_ns(self) -> int:
        if self.total_calls == 0:
            return 0
        return self.total_time_ns // self.total_calls


@dataclass
class OperationAnalytics:
    """Actual operation frequencies versus the intended weights."""

    actual_counts: dict[str, int] = field(default_factory=dict)
    intended_weights: dict[str, float] = field(default_factory=dict)

    def record_operation(self, name: str) -> None:
        self.actual_counts[name] = self.actual_counts.get(name, 0) + 1

    def set_intended_weight(self, name: str, weight: float) -> None:
        if weight < 0:
            raise StatisticsError(f"Intended weight for '{name}' must be >= 0, got {weight}")
        self.intended_weights[name] = weight

    @property
    def total(self) -> int:
        return sum(self.actual_counts.values())

    def actual_distribution(self) -> dict[str, float]:
        """Fraction of executed operations per kind (empty when nothing ran)."""
        total = self.total
        if total == 0:
            return {}
        return {name: count / total for name, count in self.actual_counts.items()}


@dataclass
class TestStatistics:
    """Counters accumulated across the iterations of one run."""

    __test__ = False

    total_operations_generated: int = 0
    sequences_tested: int = 0
    invariant_violations: int = 0
    shrinking_iterations: int = 0
    execution_time_ns: int = 0
    failures: FailureStats = field(default_factory=FailureStats)

    detailed_stats_enabled: bool = False
    operation_timings: dict[str, OperationTiming] = field(default_factory=dict)
    operation_distribution: OperationAnalytics = field(default_factory=OperationAnalytics)
    failure_rates_over_time: list[float] = field(default_factory=list)

    def record_operation_timing(self, name: str, elapsed_ns: int) -> None:
        if not self.detailed_stats_enabled:
            return
        timing = self.operation_timings.get(name)
        if timing is None:
            timing = OperationTiming()
            self.operation_timings[name] = timing
        timing.record_call(elapsed_ns)

    def record_operation_call(self, name: str) -> None:
        if not self.detailed_stats_enabled:
            return
        self.operation_distribution.record_operation(name)

    def set_intended_operation_weight(self, name: str, weight: float) -> None:
        if not self.detailed_stats_enabled:
            return
        self.operation_distribution.set_intended_weight(name, weight)

    def record_failure_rate(self, rate: float) -> None:
        if not self.detailed_stats_enabled:
            return
        if not 0.0 <= rate <= 1.0:
            raise StatisticsError(f"Failure rate must be within [0, 1], got {rate}")
        self.failure_rates_over_time.append(rate)

    @property
    def execution_time_ms(self) -> float:
        return self.execution_time_ns / 1_000_000

    @property
    def average_failure_rate(self) -> float:
        if not self.failure_rates_over_time:
            return 0.0
        return sum(self.failure_rates_over_time) / len(self.failure_rates_over_time)

    def snapshot(self) -> TestStatistics:
        """Independent deep copy, safe to keep after the run is torn down."""
        return copy.deepcopy(self)

    def reset(self) -> None:
        fresh = TestStatistics(detailed_stats_enabled=self.detailed_stats_enabled)
        self.__dict__.update(fresh.__dict__)

    def summary(self) -> dict[str, Any]:
        """Get a flat summary of the run."""
        return {
            "total_operations": self.total_operations_generated,
            "sequences_tested": self.sequences_tested,
            "invariant_violations": self.invariant_violations,
            "shrinking_iterations": self.shrinking_iterations,
            "execution_time_ms": round(self.execution_time_ms, 2),
            "operations_executed": self.failures.total_operations,
            "failures_injected": self.failures.total_injected,
            "injection_rate": round(self.failures.injection_rate(), 4),
        }
