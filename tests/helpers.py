"""Systems under test and adapters shared by the test suite."""

from __future__ import annotations

from enum import Enum
from typing import Any

from faultline.core.invariant import Invariant, Severity
from faultline.core.operation import Operation, OperationSequence
from faultline.engine.adapter import ExecutionContext, FunctionAdapter


class Op(Enum):
    PUT = "put"
    GET = "get"
    DELETE = "delete"


class CounterOp(Enum):
    INCREMENT = "increment"


class KVStore:
    """Tiny key-value store used as a system under test."""

    def __init__(self) -> None:
        self.data: dict[bytes, bytes] = {}
        self.closed = False

    def apply(self, operation: Operation) -> bytes | None:
        if operation.kind == Op.PUT:
            self.data[operation.key] = operation.value
        elif operation.kind == Op.DELETE:
            self.data.pop(operation.key, None)
        return self.data.get(operation.key)


class Counter:
    def __init__(self) -> None:
        self.value = 0
        self.closed = False

    def increment(self) -> None:
        self.value += 1


class TrackingAdapter(FunctionAdapter):
    """FunctionAdapter that records lifecycle calls and executed operations."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.created = 0
        self.torn_down = 0
        self.executed: list[Operation] = []

    def create(self, ctx: ExecutionContext) -> Any:
        system = super().create(ctx)
        self.created += 1
        return system

    def teardown(self, system: Any) -> None:
        self.torn_down += 1
        system.closed = True

    def execute(self, system: Any, operation: Operation, ctx: ExecutionContext) -> Any:
        self.executed.append(operation)
        return super().execute(system, operation, ctx)


def make_kv_adapter() -> TrackingAdapter:
    return TrackingAdapter(
        kinds=list(Op),
        create=lambda ctx: KVStore(),
        execute=lambda store, op, ctx: store.apply(op),
    )


def make_counter_adapter() -> TrackingAdapter:
    return TrackingAdapter(
        kinds=list(CounterOp),
        create=lambda ctx: Counter(),
        execute=lambda counter, op, ctx: counter.increment(),
    )


def counter_bounded(limit: int = 50, severity: Severity = Severity.CRITICAL) -> Invariant:
    return Invariant(
        name="counter_bounded",
        check=lambda counter: counter.value <= limit,
        severity=severity,
        message=f"counter must stay <= {limit}",
    )


def increments(count: int) -> OperationSequence:
    return OperationSequence([Operation(kind=CounterOp.INCREMENT) for _ in range(count)])
