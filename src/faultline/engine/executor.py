"""Sequence executor.

Runs one operation sequence against one freshly constructed system
instance, consulting the failure injector before every operation and
checking every invariant after it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from faultline.core.invariant import Invariant, Violation
from faultline.core.operation import Operation, OperationSequence
from faultline.core.statistics import TestStatistics
from faultline.engine.adapter import ExecutionContext, SystemAdapter
from faultline.errors import AdapterError, ErrorCode, ErrorContext, SystemLifecycleError
from faultline.injection.injector import FailureInjector

logger = logging.getLogger(__name__)


@dataclass
class ExecutionOutcome:
    """Result of executing one sequence.

    Attributes:
        failed: True if a critical invariant was violated.
        violation: The critical violation that aborted the sequence.
        violations: Every violation recorded, critical or not.
        operations_executed: Operations handed to the system.
        operations_skipped: Operations skipped by an injected allocator failure.
    """

    failed: bool = False
    violation: Violation | None = None
    violations: list[Violation] = field(default_factory=list)
    operations_executed: int = 0
    operations_skipped: int = 0

    @property
    def passed(self) -> bool:
        return not self.failed


class Executor:
    """Executes sequences against fresh system instances."""

    def __init__(
        self,
        adapter: SystemAdapter,
        injector: FailureInjector,
        statistics: TestStatistics,
        invariants: list[Invariant] | None = None,
    ) -> None:
        self.adapter = adapter
        self.injector = injector
        self.statistics = statistics
        self.invariants = list(invariants or [])

    def execute(self, sequence: OperationSequence, iteration: int = 0) -> ExecutionOutcome:
        """Run ``sequence`` against a new system instance.

        The instance is torn down on every exit path.

        Raises:
            SystemLifecycleError: If the system cannot be constructed or torn down.
        """
        self.injector.clear_condition()
        ctx = ExecutionContext(injector=self.injector, iteration=iteration)
        system = self._create_system(ctx)

        try:
            outcome = self._run(system, sequence, ctx)
        except BaseException:
            self._teardown_system(system, iteration, propagating=True)
            raise

        self._teardown_system(system, iteration, propagating=False)
        return outcome

    def _run(self, system: Any, sequence: OperationSequence, ctx: ExecutionContext) -> ExecutionOutcome:
        outcome = ExecutionOutcome()

        for index, operation in enumerate(sequence):
            ctx.operation_index = index
            self.statistics.failures.record_operation()

            if self.injector.should_inject_allocator_failure():
                outcome.operations_skipped += 1
            else:
                self._execute_operation(system, operation, ctx)
                outcome.operations_executed += 1

            for violation in self._check_invariants(system, index, operation, ctx.iteration):
                outcome.violations.append(violation)
                self.statistics.invariant_violations += 1
                if violation.is_critical:
                    logger.error(
                        f"Critical invariant '{violation.invariant_name}' violated "
                        f"after operation {index} ({operation.name})"
                    )
                    outcome.failed = True
                    outcome.violation = violation
                    return outcome
                logger.warning(
                    f"Invariant '{violation.invariant_name}' ({violation.severity.value}) "
                    f"violated after operation {index} ({operation.name})"
                )

        return outcome

    def _execute_operation(self, system: Any, operation: Operation, ctx: ExecutionContext) -> None:
        detailed = self.statistics.detailed_stats_enabled
        start = time.perf_counter_ns() if detailed else 0

        try:
            self.adapter.execute(system, operation, ctx)
        except AdapterError:
            raise
        except Exception as e:
            # Host errors are the expected result of injected failures
            logger.debug(f"Operation {ctx.operation_index} ({operation.name}) raised {type(e).__name__}: {e}")

        if detailed:
            elapsed = time.perf_counter_ns() - start
            try:
                self.statistics.record_operation_timing(operation.name, elapsed)
                self.statistics.record_operation_call(operation.name)
            except Exception as e:
                # Recording failures never abort a sequence
                logger.warning(f"Failed to record statistics for {operation.name}: {e}")

    def _check_invariants(
        self,
        system: Any,
        index: int,
        operation: Operation,
        iteration: int,
    ) -> list[Violation]:
        violations = []
        for inv in self.invariants:
            try:
                if not inv.check(system):
                    violations.append(
                        Violation.create(inv, index, operation=operation, iteration=iteration)
                    )
            except Exception as e:
                # Invariant check itself failed - treat as violation
                violations.append(
                    Violation.create(
                        inv,
                        index,
                        operation=operation,
                        iteration=iteration,
                        message_override=f"Invariant check raised exception: {e}",
                    )
                )
        return violations

    def _create_system(self, ctx: ExecutionContext) -> Any:
        try:
            return self.adapter.create(ctx)
        except Exception as e:
            raise SystemLifecycleError(
                f"System construction failed: {e}",
                context=ErrorContext(iteration=ctx.iteration),
                cause=e,
            ) from e

    def _teardown_system(self, system: Any, iteration: int, propagating: bool) -> None:
        try:
            self.adapter.teardown(system)
        except Exception as e:
            if propagating:
                logger.error(f"System teardown failed while handling another error: {e}")
                return
            raise SystemLifecycleError(
                f"System teardown failed: {e}",
                error_code=ErrorCode.SYSTEM_TEARDOWN_FAILED,
                context=ErrorContext(iteration=iteration),
                cause=e,
            ) from e
