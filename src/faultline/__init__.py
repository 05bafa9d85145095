"""faultline: deterministic, seed-driven property testing with failure injection.

Generate random operation sequences against a stateful system, inject
failures with configurable probabilities, check invariants after every
operation and shrink failing sequences to a minimal reproduction.

Example:
    from faultline import FunctionAdapter, PropertyTest, Severity

    adapter = FunctionAdapter(
        kinds=list(Op),
        create=lambda ctx: Store(),
        execute=lambda store, op, ctx: store.apply(op),
    )
    test = PropertyTest(adapter, seed=42)
    test.add_invariant("bounded", lambda s: len(s) <= 100, Severity.CRITICAL)
    test.run(200)
"""

__version__ = "0.1.0"

from faultline.core import (
    FailureCategory,
    FailureStats,
    Invariant,
    Operation,
    OperationSequence,
    Range,
    Severity,
    TestStatistics,
    Violation,
    invariant,
)
from faultline.engine import (
    ExecutionContext,
    ExecutionOutcome,
    Executor,
    FunctionAdapter,
    HandlerAdapter,
    PropertyTest,
    Shrinker,
    ShrinkingConfig,
    ShrinkResult,
    ShrinkStrategy,
    SystemAdapter,
    TestPhase,
)
from faultline.errors import (
    AdapterError,
    ConfigValidationError,
    FaultlineError,
    GenerationError,
    PropertyFailedError,
    StatisticsError,
    SystemLifecycleError,
)
from faultline.generators import (
    CollisionProneKeys,
    FixedSizeValues,
    OperationDistribution,
    RandomBinaryValues,
    SequenceGenerator,
    SequentialKeys,
    UniformRandomKeys,
    VariableSizeValues,
)
from faultline.injection import (
    ConditionalMultiplier,
    FailureInjectionConfig,
    FailureInjector,
    SystemCondition,
)
from faultline.reporters import ConsoleReporter

__all__ = [
    "__version__",
    # Core
    "Range",
    "Operation",
    "OperationSequence",
    "Invariant",
    "Violation",
    "Severity",
    "invariant",
    "FailureCategory",
    "FailureStats",
    "TestStatistics",
    # Generators
    "OperationDistribution",
    "SequenceGenerator",
    "UniformRandomKeys",
    "CollisionProneKeys",
    "SequentialKeys",
    "FixedSizeValues",
    "VariableSizeValues",
    "RandomBinaryValues",
    # Injection
    "SystemCondition",
    "ConditionalMultiplier",
    "FailureInjectionConfig",
    "FailureInjector",
    # Engine
    "SystemAdapter",
    "ExecutionContext",
    "FunctionAdapter",
    "HandlerAdapter",
    "Executor",
    "ExecutionOutcome",
    "Shrinker",
    "ShrinkingConfig",
    "ShrinkResult",
    "ShrinkStrategy",
    "PropertyTest",
    "TestPhase",
    # Reporting
    "ConsoleReporter",
    # Errors
    "FaultlineError",
    "ConfigValidationError",
    "GenerationError",
    "SystemLifecycleError",
    "AdapterError",
    "StatisticsError",
    "PropertyFailedError",
]
