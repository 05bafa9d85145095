"""Host adapter interface.

The engine talks to the system under test through four points: the set of
operation kinds, a constructor, a teardown function and an
execute-one-operation function. ``SystemAdapter`` names them; the two
adapters below cover the common ways of supplying them.

Failure decisions are made through the ``ExecutionContext`` handed to the
host on every call, never through ambient state.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from faultline.core.categories import FailureCategory
from faultline.core.operation import Operation, kind_name
from faultline.errors import AdapterError
from faultline.injection.conditions import SystemCondition
from faultline.injection.injector import FailureInjector

logger = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """Per-execution handle to the failure injector.

    Host code asks it whether to fail and declares its current condition
    through it. ``operation_index`` is ``None`` while the system is being
    constructed.
    """

    injector: FailureInjector
    iteration: int = 0
    operation_index: int | None = None

    @property
    def rng(self) -> random.Random:
        return self.injector.rng

    @property
    def condition(self) -> SystemCondition | None:
        return self.injector.condition

    def set_condition(self, condition: SystemCondition | None) -> None:
        self.injector.set_condition(condition)

    def clear_condition(self) -> None:
        self.injector.clear_condition()

    def should_inject(self, category: FailureCategory | str) -> bool:
        return self.injector.should_inject(category)

    def should_inject_filesystem_error(self) -> bool:
        return self.injector.should_inject_filesystem_error()

    def should_inject_network_error(self) -> bool:
        return self.injector.should_inject_network_error()

    def should_inject_custom_failure(self, name: str) -> bool:
        return self.injector.should_inject_custom_failure(name)


@runtime_checkable
class SystemAdapter(Protocol):
    """Protocol for connecting a system under test to the engine."""

    @property
    def operation_kinds(self) -> Sequence[Hashable]:
        """Every operation kind the system understands."""
        ...

    def create(self, ctx: ExecutionContext) -> Any:
        """Construct a fresh system instance. Never fault-injected."""
        ...

    def teardown(self, system: Any) -> None:
        """Release a system instance."""
        ...

    def execute(self, system: Any, operation: Operation, ctx: ExecutionContext) -> Any:
        """Apply one operation. Exceptions are treated as injected failures."""
        ...


class FunctionAdapter:
    """Adapter built from three plain callables.

    Example:
        adapter = FunctionAdapter(
            kinds=list(Op),
            create=lambda ctx: Store(),
            teardown=lambda store: store.close(),
            execute=lambda store, op, ctx: store.apply(op),
        )
    """

    def __init__(
        self,
        kinds: Iterable[Hashable],
        create: Callable[[ExecutionContext], Any],
        execute: Callable[[Any, Operation, ExecutionContext], Any],
        teardown: Callable[[Any], None] | None = None,
    ) -> None:
        self._kinds = list(kinds)
        self._create = create
        self._execute = execute
        self._teardown = teardown

    @property
    def operation_kinds(self) -> list[Hashable]:
        return list(self._kinds)

    def create(self, ctx: ExecutionContext) -> Any:
        return self._create(ctx)

    def teardown(self, system: Any) -> None:
        if self._teardown is not None:
            self._teardown(system)

    def execute(self, system: Any, operation: Operation, ctx: ExecutionContext) -> Any:
        return self._execute(system, operation, ctx)


class HandlerAdapter:
    """Adapter with an explicit per-kind dispatch table.

    Example:
        adapter = HandlerAdapter(factory=lambda ctx: {})

        @adapter.handler(Op.PUT)
        def put(store, op, ctx):
            store[op.key] = op.value

    Operation kinds are the registered handlers, in registration order.
    """

    def __init__(
        self,
        factory: Callable[[ExecutionContext], Any],
        teardown: Callable[[Any], None] | None = None,
    ) -> None:
        self._factory = factory
        self._teardown = teardown
        self._handlers: dict[Hashable, Callable[[Any, Operation, ExecutionContext], Any]] = {}

    def register(
        self,
        kind: Hashable,
        handler: Callable[[Any, Operation, ExecutionContext], Any],
    ) -> None:
        if kind in self._handlers:
            logger.warning(f"Replacing handler for operation kind {kind_name(kind)}")
        self._handlers[kind] = handler

    def handler(
        self, kind: Hashable
    ) -> Callable[[Callable[[Any, Operation, ExecutionContext], Any]], Callable[[Any, Operation, ExecutionContext], Any]]:
        """Decorator registering the decorated function for ``kind``."""

        def decorator(
            func: Callable[[Any, Operation, ExecutionContext], Any],
        ) -> Callable[[Any, Operation, ExecutionContext], Any]:
            self.register(kind, func)
            return func

        return decorator

    @property
    def operation_kinds(self) -> list[Hashable]:
        return list(self._handlers)

    def create(self, ctx: ExecutionContext) -> Any:
        return self._factory(ctx)

    def teardown(self, system: Any) -> None:
        if self._teardown is not None:
            self._teardown(system)

    def execute(self, system: Any, operation: Operation, ctx: ExecutionContext) -> Any:
        handler = self._handlers.get(operation.kind)
        if handler is None:
            raise AdapterError(
                f"No handler registered for operation kind {operation.name}",
                suggestions=[f"Register one with @adapter.handler({operation.name!r})"],
            )
        return handler(system, operation, ctx)
