"""Custom exception hierarchy for faultline.

faultline errors carry:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with run/iteration/operation details
- suggestions: List of actionable steps to resolve the issue

Host errors raised while executing an operation are *not* part of this
hierarchy: they are an expected consequence of failure injection and are
swallowed by the executor. Everything here is raised to the caller.

Example:
    try:
        test.run(500)
    except PropertyFailedError as e:
        print(f"Error: {e}")
        print(f"Seed: {e.seed}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from faultline.core.invariant import Violation
    from faultline.core.operation import OperationSequence
    from faultline.core.statistics import TestStatistics


class ErrorCode(Enum):
    """Standardized error codes for faultline.

    Error codes are organized by category:
    - E2xx: Configuration / validation errors
    - E3xx: Generation errors
    - E4xx: Host system lifecycle errors
    - E5xx: Property failures
    - E6xx: Statistics errors
    - E9xx: Unknown/internal errors
    """

    # Validation errors (E2xx)
    VALIDATION_FAILED = "E201"
    INVALID_CONFIG = "E202"
    INVALID_RANGE = "E203"
    INVALID_PROBABILITY = "E204"

    # Generation errors (E3xx)
    GENERATION_FAILED = "E301"
    EMPTY_DISTRIBUTION = "E302"

    # Host lifecycle errors (E4xx)
    SYSTEM_INIT_FAILED = "E401"
    SYSTEM_TEARDOWN_FAILED = "E402"
    ADAPTER_DISPATCH_FAILED = "E403"

    # Property failures (E5xx)
    PROPERTY_FAILED = "E501"
    SHRINKING_FAILED = "E502"

    # Statistics errors (E6xx)
    STATISTICS_ERROR = "E601"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 300:
            return "validation"
        elif code_num < 400:
            return "generation"
        elif code_num < 500:
            return "lifecycle"
        elif code_num < 600:
            return "property"
        elif code_num < 700:
            return "statistics"
        return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        test_name: Name of the property test being run
        seed: Seed of the pseudorandom stream
        iteration: Iteration index (0-based) when the error occurred
        operation_index: Index of the operation within the sequence
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    test_name: str | None = None
    seed: int | None = None
    iteration: int | None = None
    operation_index: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "test_name": self.test_name,
            "seed": self.seed,
            "iteration": self.iteration,
            "operation_index": self.operation_index,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.test_name:
            parts.append(f"test={self.test_name}")
        if self.seed is not None:
            parts.append(f"seed={self.seed}")
        if self.iteration is not None:
            parts.append(f"iteration={self.iteration}")
        if self.operation_index is not None:
            parts.append(f"operation={self.operation_index}")
        return " > ".join(parts) if parts else "unknown location"


class FaultlineError(Exception):
    """Base exception for all faultline errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(FaultlineError):
    """A validation check failed.

    Check the 'field' and 'value' attributes for specific details about
    what failed validation.
    """

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        result["value"] = repr(self.value)
        if self.expected:
            result["expected"] = self.expected
        return result


class ConfigValidationError(ValidationError):
    """Configuration validation failed.

    Raised before any iteration runs. When several problems are found at
    once they are listed in ``errors``.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check that every range has min <= max",
        "Probabilities must lie in [0.0, 1.0] and multipliers must be >= 0",
        "Run 'faultline validate-config' against your config file",
    ]

    def __init__(
        self,
        message: str | None = None,
        errors: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.errors = list(errors or [])
        if message is None and self.errors:
            message = "Configuration validation failed:\n  " + "\n  ".join(self.errors)
        super().__init__(message=message, **kwargs)


class GenerationError(FaultlineError):
    """Operation sequence generation failed."""

    error_code = ErrorCode.GENERATION_FAILED
    default_message = "Failed to generate an operation"


class SystemLifecycleError(FaultlineError):
    """The host failed to construct or tear down a system instance.

    Lifecycle failures are fatal to the whole run; they are never retried.
    """

    error_code = ErrorCode.SYSTEM_INIT_FAILED
    default_message = "System lifecycle function failed"
    default_suggestions = [
        "Make sure the adapter's create() does not depend on state left by a previous iteration",
        "System construction is never fault-injected; errors here are real bugs",
    ]


class AdapterError(FaultlineError):
    """The host adapter could not dispatch an operation."""

    error_code = ErrorCode.ADAPTER_DISPATCH_FAILED
    default_message = "No handler registered for operation kind"


class StatisticsError(FaultlineError):
    """A statistics recorder was misused.

    The executor logs these as warnings and continues; they never abort a run.
    """

    error_code = ErrorCode.STATISTICS_ERROR
    default_message = "Failed to record statistics"


class PropertyFailedError(FaultlineError):
    """A critical invariant was violated.

    Carries everything needed to reproduce the failure: the seed, the
    iteration, the violation and both the original and the shrunk sequence.
    """

    __test__ = False

    error_code = ErrorCode.PROPERTY_FAILED
    default_message = "Property test failed"
    default_suggestions = [
        "Re-run with the same seed to reproduce the failure",
        "Replay the minimal sequence against a fresh system instance",
    ]

    def __init__(
        self,
        message: str | None = None,
        *,
        seed: int,
        iteration: int,
        violation: Violation,
        original_sequence: OperationSequence,
        minimal_sequence: OperationSequence,
        statistics: TestStatistics | None = None,
        **kwargs: Any,
    ) -> None:
        self.seed = seed
        self.iteration = iteration
        self.violation = violation
        self.original_sequence = original_sequence
        self.minimal_sequence = minimal_sequence
        self.statistics = statistics
        message = message or (
            f"Invariant '{violation.invariant_name}' violated in iteration {iteration}; "
            f"shrunk from {len(original_sequence)} to {len(minimal_sequence)} operations"
        )
        context = kwargs.pop("context", None) or ErrorContext(seed=seed, iteration=iteration)
        super().__init__(message=message, context=context, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["seed"] = self.seed
        result["iteration"] = self.iteration
        result["invariant"] = self.violation.invariant_name
        result["original_length"] = len(self.original_sequence)
        result["minimal_length"] = len(self.minimal_sequence)
        result["reproduction"] = self.minimal_sequence.describe()
        return result
