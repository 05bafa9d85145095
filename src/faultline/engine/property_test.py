"""PropertyTest: the run orchestrator.

Owns the seeded pseudorandom stream, the configuration and the statistics,
and drives generation, execution and shrinking iteration by iteration.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Hashable
from enum import Enum
from typing import TYPE_CHECKING, Any

from faultline.core.categories import FailureCategory
from faultline.core.invariant import Invariant, Severity
from faultline.core.operation import kind_name
from faultline.core.range import Range
from faultline.core.statistics import TestStatistics
from faultline.engine.adapter import SystemAdapter
from faultline.engine.executor import Executor
from faultline.engine.shrinker import Shrinker, ShrinkingConfig
from faultline.errors import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    PropertyFailedError,
    StatisticsError,
)
from faultline.generators.distribution import OperationDistribution
from faultline.generators.keys import BaseKeyStrategy, UniformRandomKeys
from faultline.generators.sequence import SequenceGenerator
from faultline.generators.values import ValueStrategy, VariableSizeValues
from faultline.injection.conditions import SystemCondition
from faultline.injection.config import FailureInjectionConfig
from faultline.injection.injector import FailureInjector
from faultline.reporters.console import ConsoleReporter

if TYPE_CHECKING:
    from faultline.config.settings import FaultlineSettings

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100


class TestPhase(Enum):
    """Where the orchestrator is within the current iteration."""

    __test__ = False

    IDLE = "idle"
    GENERATING = "generating"
    EXECUTING = "executing"
    PASSED = "passed"
    VIOLATION_DETECTED = "violation_detected"
    SHRINKING = "shrinking"
    REPORTED = "reported"


class PropertyTest:
    """Deterministic, seed-driven property test.

    Generates random operation sequences, executes each against a fresh
    system instance while injecting failures, checks every invariant after
    every operation, and on a critical violation shrinks the sequence and
    raises ``PropertyFailedError`` carrying a minimal reproduction.

    The stream is re-seeded at the start of every run, so running the same
    configuration twice generates identical sequences.

    Example:
        test = PropertyTest(adapter, name="kv_store", seed=42)
        test.set_failure_probability(FailureCategory.ALLOCATOR, 0.05)
        test.add_invariant("size_bounded", lambda s: len(s) <= 100, Severity.CRITICAL)
        test.run(500)
    """

    __test__ = False

    def __init__(
        self,
        adapter: SystemAdapter,
        *,
        name: str = "property_test",
        seed: int = 42,
        iterations: int = 100,
        sequence_length: Range | tuple[int, int] = Range(50, 200),
        failure_config: FailureInjectionConfig | None = None,
        invariants: list[Invariant] | None = None,
        key_strategy: BaseKeyStrategy | None = None,
        value_strategy: ValueStrategy | None = None,
        distribution: OperationDistribution | None = None,
        shrinking: ShrinkingConfig | None = None,
        detailed_stats: bool = False,
        reporter: ConsoleReporter | None = None,
    ) -> None:
        self.adapter = adapter
        self.name = name
        self.seed = seed
        self.iterations = iterations
        self.sequence_length = _as_range(sequence_length)
        self.failure_config = failure_config or FailureInjectionConfig()
        self.invariants: list[Invariant] = list(invariants or [])
        self.key_strategy = key_strategy or UniformRandomKeys()
        self.value_strategy = value_strategy or VariableSizeValues()
        self.distribution = distribution or OperationDistribution()
        self.shrinking = shrinking or ShrinkingConfig()
        self.statistics = TestStatistics(detailed_stats_enabled=detailed_stats)
        self.reporter = reporter or ConsoleReporter()

        self._rng = random.Random(seed)
        self._phase = TestPhase.IDLE

    @classmethod
    def from_settings(
        cls,
        adapter: SystemAdapter,
        settings: FaultlineSettings,
        invariants: list[Invariant] | None = None,
        reporter: ConsoleReporter | None = None,
    ) -> PropertyTest:
        """Build a test from loaded settings.

        Operation weights in the settings are keyed by kind name and
        resolved against the adapter's operation kinds.
        """
        test = cls(
            adapter,
            name=settings.name,
            seed=settings.seed,
            iterations=settings.iterations,
            sequence_length=settings.sequence_range(),
            failure_config=settings.failure_config(),
            invariants=invariants,
            key_strategy=settings.build_key_strategy(),
            value_strategy=settings.build_value_strategy(),
            shrinking=settings.shrinking_config(),
            detailed_stats=settings.detailed_stats,
            reporter=reporter,
        )
        if settings.operation_weights:
            kinds = {kind_name(k): k for k in adapter.operation_kinds}
            unknown = sorted(set(settings.operation_weights) - set(kinds))
            if unknown:
                raise ConfigValidationError(
                    message=f"Unknown operation kinds in operation_weights: {unknown}. Valid: {sorted(kinds)}",
                    field="operation_weights",
                    value=settings.operation_weights,
                )
            for name, weight in settings.operation_weights.items():
                test.set_operation_weight(kinds[name], weight)
        return test

    @property
    def phase(self) -> TestPhase:
        return self._phase

    @property
    def rng(self) -> random.Random:
        return self._rng

    # Configuration

    def set_iterations(self, iterations: int) -> None:
        self.iterations = iterations

    def set_sequence_length(self, min_length: int, max_length: int) -> None:
        self.sequence_length = Range(min_length, max_length)

    def set_seed(self, seed: int) -> None:
        self.seed = seed
        self._rng.seed(seed)

    def set_failure_probability(self, category: FailureCategory | str, probability: float) -> None:
        self.failure_config.set_base_probability(category, probability)

    def set_custom_failure(self, name: str, probability: float) -> None:
        self.failure_config.set_custom_probability(name, probability)

    def add_conditional_multiplier(
        self,
        condition: SystemCondition,
        multiplier: float,
        duration: int | None = None,
    ) -> None:
        self.failure_config.add_multiplier(condition, multiplier, duration)

    def set_key_strategy(self, strategy: BaseKeyStrategy) -> None:
        self.key_strategy = strategy

    def set_value_strategy(self, strategy: ValueStrategy) -> None:
        self.value_strategy = strategy

    def set_operation_weight(self, kind: Hashable, weight: float) -> None:
        self.distribution.set_weight(kind, weight)

    def add_invariant(
        self,
        invariant: Invariant | str,
        check: Callable[[Any], bool] | None = None,
        severity: Severity = Severity.IMPORTANT,
        message: str = "",
    ) -> Invariant:
        """Register an invariant, either prebuilt or from a name and predicate."""
        if not isinstance(invariant, Invariant):
            if check is None:
                raise ConfigValidationError(
                    message=f"Invariant '{invariant}' needs a check function",
                    field="invariants",
                    value=invariant,
                )
            invariant = Invariant(name=invariant, check=check, severity=severity, message=message)
        self.invariants.append(invariant)
        return invariant

    def set_detailed_stats(self, enabled: bool) -> None:
        self.statistics.detailed_stats_enabled = enabled

    def set_shrinking(self, config: ShrinkingConfig) -> None:
        self.shrinking = config

    # Validation

    def validate(self) -> None:
        """Check the whole configuration before any iteration runs.

        Raises:
            ConfigValidationError: Listing every problem found.
        """
        errors: list[str] = []

        if not isinstance(self.adapter, SystemAdapter):
            errors.append(
                "adapter must provide operation_kinds, create(), teardown() and execute()"
            )
        if self.iterations < 0:
            errors.append(f"iterations must be >= 0, got {self.iterations}")
        if not self.sequence_length.validate():
            errors.append(
                f"sequence length range must satisfy 0 <= min <= max, got {self.sequence_length}"
            )

        errors.extend(self.failure_config.validate())
        errors.extend(self.key_strategy.validate())
        errors.extend(self.value_strategy.validate())
        errors.extend(self.shrinking.validate())

        if not errors:
            errors.extend(self._validate_distribution())

        names = [inv.name for inv in self.invariants]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            errors.append(f"duplicate invariant names: {duplicates}")

        if errors:
            raise ConfigValidationError(errors=errors, error_code=ErrorCode.INVALID_CONFIG)

    def _validate_distribution(self) -> list[str]:
        adapter_kinds = list(self.adapter.operation_kinds)
        if len(self.distribution) == 0:
            if not adapter_kinds:
                return ["no operation kinds: the adapter declares none and no weights were set"]
            return []

        errors = []
        if self.distribution.total <= 0:
            errors.append("operation weights must not all be zero")
        if adapter_kinds:
            unknown = [kind_name(k) for k in self.distribution.kinds if k not in adapter_kinds]
            if unknown:
                errors.append(f"weights set for operation kinds the adapter does not declare: {unknown}")
        return errors

    def _effective_distribution(self) -> OperationDistribution:
        if len(self.distribution) == 0:
            return OperationDistribution.uniform(self.adapter.operation_kinds)
        dist = OperationDistribution(self.distribution.weights)
        dist.normalize()
        return dist

    # Running

    def run(self, iterations: int | None = None) -> None:
        """Run the property test.

        Args:
            iterations: Overrides the configured iteration count.

        Raises:
            ConfigValidationError: If the configuration is invalid.
            PropertyFailedError: On the first critical invariant violation.
            SystemLifecycleError: If the system cannot be constructed or torn down.
        """
        self.validate()
        count = self.iterations if iterations is None else iterations
        if count < 0:
            raise ConfigValidationError(
                message=f"iterations must be >= 0, got {count}",
                field="iterations",
                value=count,
            )

        self._rng.seed(self.seed)
        self.statistics.reset()

        distribution = self._effective_distribution()
        generator = SequenceGenerator(
            distribution,
            self.key_strategy,
            self.value_strategy,
            self.sequence_length,
            statistics=self.statistics,
        )
        injector = FailureInjector(self.failure_config, self._rng, self.statistics.failures)
        executor = Executor(self.adapter, injector, self.statistics, self.invariants)
        shrinker = Shrinker(executor, self._rng, self.shrinking)

        if self.statistics.detailed_stats_enabled:
            for kind, weight in distribution.weights.items():
                self._record_statistic(self.statistics.set_intended_operation_weight, kind_name(kind), weight)

        logger.info(f"Running property test: {self.name} (seed: {self.seed}, iterations: {count})")
        start = time.perf_counter_ns()

        try:
            for i in range(count):
                self._phase = TestPhase.GENERATING
                sequence = generator.generate(self._rng)

                self._phase = TestPhase.EXECUTING
                injected_before = self.statistics.failures.total_injected
                outcome = executor.execute(sequence, iteration=i)

                if outcome.failed and outcome.violation is not None:
                    self._phase = TestPhase.VIOLATION_DETECTED
                    logger.warning(
                        f"Invariant violation detected in iteration {i}, attempting to shrink..."
                    )

                    self._phase = TestPhase.SHRINKING
                    result = shrinker.shrink(sequence, outcome.violation, iteration=i)

                    self.statistics.execution_time_ns = time.perf_counter_ns() - start
                    failure = PropertyFailedError(
                        seed=self.seed,
                        iteration=i,
                        violation=outcome.violation,
                        original_sequence=sequence,
                        minimal_sequence=result.sequence,
                        statistics=self.statistics.snapshot(),
                        context=ErrorContext(test_name=self.name, seed=self.seed, iteration=i),
                    )
                    self._phase = TestPhase.REPORTED
                    self.reporter.report_reproduction(failure)
                    raise failure

                self._phase = TestPhase.PASSED
                self.statistics.sequences_tested += 1

                if self.statistics.detailed_stats_enabled and len(sequence) > 0:
                    injected = self.statistics.failures.total_injected - injected_before
                    self._record_statistic(
                        self.statistics.record_failure_rate, min(1.0, injected / len(sequence))
                    )

                if (i + 1) % PROGRESS_INTERVAL == 0:
                    logger.info(f"Completed {i + 1} iterations...")

            logger.info(f"Property test {self.name} completed successfully")
        finally:
            self.statistics.execution_time_ns = time.perf_counter_ns() - start
            self._phase = TestPhase.IDLE

    def run_with_stats(self, iterations: int | None = None) -> TestStatistics:
        """Run the test and return a snapshot of its statistics.

        A property failure still raises; the failure carries its own snapshot.
        """
        self.run(iterations)
        return self.statistics.snapshot()

    def teardown(self) -> None:
        """Release collected statistics."""
        self.statistics.reset()
        self._phase = TestPhase.IDLE

    def _record_statistic(self, recorder: Callable[..., None], *args: Any) -> None:
        try:
            recorder(*args)
        except StatisticsError as e:
            logger.warning(f"Failed to record statistics: {e}")


def _as_range(value: Range | tuple[int, int]) -> Range:
    if isinstance(value, Range):
        return value
    return Range(*value)
