"""Operation and OperationSequence."""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, overload


def kind_name(kind: Hashable) -> str:
    """Display name of an operation kind (``Enum.name`` or ``str(kind)``)."""
    if isinstance(kind, Enum):
        return kind.name
    return str(kind)


@dataclass
class Operation:
    """One step of a test sequence.

    The engine never interprets ``kind``; it only forwards it to the host
    and uses its name for statistics. ``context`` is an opaque handle shared
    by reference when a sequence is cloned.
    """

    kind: Hashable
    key: bytes | None = None
    value: bytes | None = None
    context: Any = None

    @property
    def name(self) -> str:
        return kind_name(self.kind)

    def copy(self) -> Operation:
        """Duplicate the key/value buffers; ``context`` is not copied."""
        return Operation(
            kind=self.kind,
            key=bytes(self.key) if self.key is not None else None,
            value=bytes(self.value) if self.value is not None else None,
            context=self.context,
        )

    def with_key(self, key: bytes | None) -> Operation:
        return replace(self, key=key)

    def with_value(self, value: bytes | None) -> Operation:
        return replace(self, value=value)

    def describe(self) -> str:
        if self.key is not None and self.value is not None:
            return f"{self.name} '{self.key.hex()}' = '{self.value.hex()}'"
        if self.key is not None:
            return f"{self.name} '{self.key.hex()}'"
        return self.name


class OperationSequence(Sequence[Operation]):
    """An ordered list of operations generated for one iteration.

    Sequences are never mutated in place by the engine: shrinking builds new
    candidates through ``without`` and ``replace`` so a candidate never
    aliases the sequence it was derived from.
    """

    def __init__(self, operations: list[Operation] | None = None) -> None:
        self._operations: list[Operation] = list(operations or [])

    @overload
    def __getitem__(self, index: int) -> Operation: ...

    @overload
    def __getitem__(self, index: slice) -> OperationSequence: ...

    def __getitem__(self, index: int | slice) -> Operation | OperationSequence:
        if isinstance(index, slice):
            return OperationSequence(self._operations[index])
        return self._operations[index]

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OperationSequence):
            return NotImplemented
        return self._operations == other._operations

    def __repr__(self) -> str:
        return f"OperationSequence({len(self)} operations)"

    def append(self, operation: Operation) -> None:
        self._operations.append(operation)

    def clone(self) -> OperationSequence:
        """Independent deep copy: every key/value buffer is duplicated."""
        return OperationSequence([op.copy() for op in self._operations])

    def without(self, index: int) -> OperationSequence:
        """New sequence with the operation at ``index`` removed."""
        if not 0 <= index < len(self._operations):
            raise IndexError(f"operation index {index} out of range for {len(self)} operations")
        return OperationSequence(
            [op.copy() for i, op in enumerate(self._operations) if i != index]
        )

    def replace(self, index: int, operation: Operation) -> OperationSequence:
        """New sequence with the operation at ``index`` swapped for ``operation``."""
        if not 0 <= index < len(self._operations):
            raise IndexError(f"operation index {index} out of range for {len(self)} operations")
        operations = [op.copy() for op in self._operations]
        operations[index] = operation
        return OperationSequence(operations)

    @property
    def keys(self) -> list[bytes]:
        return [op.key for op in self._operations if op.key is not None]

    def describe(self) -> list[str]:
        """Human-readable lines, one per operation, with hex-encoded buffers."""
        return [f"{i}: {op.describe()}" for i, op in enumerate(self._operations)]
