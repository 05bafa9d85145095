"""Execution engine: adapters, executor, shrinker and the run orchestrator."""

from faultline.engine.adapter import (
    ExecutionContext,
    FunctionAdapter,
    HandlerAdapter,
    SystemAdapter,
)
from faultline.engine.executor import ExecutionOutcome, Executor
from faultline.engine.property_test import PropertyTest, TestPhase
from faultline.engine.shrinker import (
    Shrinker,
    ShrinkingConfig,
    ShrinkResult,
    ShrinkStrategy,
)

__all__ = [
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
]
