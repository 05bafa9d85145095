"""Sequence shrinking.

Given a sequence that triggered a critical violation, search for a smaller
sequence that still does. Every candidate is re-executed from scratch
against a new system instance.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from faultline.core.invariant import Violation
from faultline.core.operation import OperationSequence
from faultline.engine.executor import Executor

logger = logging.getLogger(__name__)


class ShrinkStrategy(Enum):
    """Ways of building a smaller candidate from the current sequence."""

    REMOVE_OPERATIONS = "remove_operations"  # drop one operation
    SIMPLIFY_VALUES = "simplify_values"  # halve one value
    REDUCE_KEY_DIVERSITY = "reduce_key_diversity"  # merge two distinct keys


@dataclass
class ShrinkingConfig:
    """Shrinker settings.

    Attributes:
        max_shrink_attempts: Upper bound on shrink attempts.
        strategies: Strategies tried, in order, on every attempt.
        preserve_failure_conditions: Only adopt candidates that violate the
            same invariant as the original failure.
    """

    max_shrink_attempts: int = 100
    strategies: tuple[ShrinkStrategy, ...] = (ShrinkStrategy.REMOVE_OPERATIONS,)
    preserve_failure_conditions: bool = True

    def validate(self) -> list[str]:
        errors = []
        if self.max_shrink_attempts < 0:
            errors.append(f"max_shrink_attempts must be >= 0, got {self.max_shrink_attempts}")
        if not self.strategies:
            errors.append("at least one shrink strategy must be enabled")
        return errors


@dataclass
class ShrinkResult:
    """Outcome of shrinking.

    ``sequence`` may equal the original when no attempt succeeded.
    """

    sequence: OperationSequence
    original_length: int
    violation: Violation | None = None
    attempts: int = 0
    successful_shrinks: int = 0
    applied: dict[str, int] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def reduced(self) -> bool:
        return self.successful_shrinks > 0


class Shrinker:
    """Randomised shrinker driven by the shared stream.

    Each attempt tries the enabled strategies in order. A strategy builds
    one candidate; if the candidate still fails it is adopted and the
    attempt ends. The search stops at the first attempt in which no
    strategy succeeds, as soon as no strategy can build a candidate at all,
    or after ``max_shrink_attempts``.
    """

    def __init__(
        self,
        executor: Executor,
        rng: random.Random,
        config: ShrinkingConfig | None = None,
    ) -> None:
        self.executor = executor
        self.rng = rng
        self.config = config or ShrinkingConfig()

    def shrink(
        self,
        sequence: OperationSequence,
        violation: Violation | None = None,
        iteration: int = 0,
    ) -> ShrinkResult:
        current = sequence.clone()
        result = ShrinkResult(sequence=current, original_length=len(sequence), violation=violation)

        while result.attempts < self.config.max_shrink_attempts:
            candidates_built = False
            shrunk = False
            result.attempts += 1

            for strategy in self.config.strategies:
                candidate = self._candidate(strategy, current)
                if candidate is None:
                    continue
                candidates_built = True

                failure = self._reproduces(candidate, violation, iteration)
                if failure is None:
                    logger.debug(f"Shrink attempt {result.attempts}: {strategy.value} did not reproduce")
                    continue

                current = candidate
                result.sequence = current
                result.violation = failure
                result.successful_shrinks += 1
                result.applied[strategy.value] = result.applied.get(strategy.value, 0) + 1
                self.executor.statistics.shrinking_iterations += 1
                logger.debug(
                    f"Shrink attempt {result.attempts}: {strategy.value} reproduced "
                    f"with {len(current)} operations"
                )
                shrunk = True
                break

            if not candidates_built:
                result.attempts -= 1
                break
            if not shrunk:
                break

        logger.info(
            f"Shrunk sequence from {result.original_length} to {len(result.sequence)} operations "
            f"in {result.attempts} attempts"
        )
        return result

    def _reproduces(
        self,
        candidate: OperationSequence,
        violation: Violation | None,
        iteration: int,
    ) -> Violation | None:
        outcome = self.executor.execute(candidate, iteration=iteration)
        if not outcome.failed or outcome.violation is None:
            return None
        if (
            self.config.preserve_failure_conditions
            and violation is not None
            and outcome.violation.invariant_name != violation.invariant_name
        ):
            return None
        return outcome.violation

    def _candidate(self, strategy: ShrinkStrategy, current: OperationSequence) -> OperationSequence | None:
        if strategy is ShrinkStrategy.REMOVE_OPERATIONS:
            return self._remove_operation(current)
        if strategy is ShrinkStrategy.SIMPLIFY_VALUES:
            return self._simplify_value(current)
        if strategy is ShrinkStrategy.REDUCE_KEY_DIVERSITY:
            return self._merge_keys(current)
        return None

    def _remove_operation(self, current: OperationSequence) -> OperationSequence | None:
        if len(current) <= 1:
            return None
        return current.without(self.rng.randrange(len(current)))

    def _simplify_value(self, current: OperationSequence) -> OperationSequence | None:
        indices = [i for i, op in enumerate(current) if op.value]
        if not indices:
            return None
        index = indices[self.rng.randrange(len(indices))]
        operation = current[index]
        value = operation.value or b""
        return current.replace(index, operation.with_value(value[: len(value) // 2]))

    def _merge_keys(self, current: OperationSequence) -> OperationSequence | None:
        distinct = list(dict.fromkeys(current.keys))
        if len(distinct) < 2:
            return None
        target = distinct[self.rng.randrange(len(distinct))]
        others = [k for k in distinct if k != target]
        merged = others[self.rng.randrange(len(others))]

        return OperationSequence(
            [op.with_key(target) if op.key == merged else op.copy() for op in current]
        )
