"""faultline error handling module.

Provides the exception hierarchy raised by the engine:

- Configuration errors, raised before any iteration runs
- Host lifecycle errors, fatal to the whole run
- The property failure signal carrying a minimal reproduction
"""

from faultline.errors.base import (
    AdapterError,
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    FaultlineError,
    GenerationError,
    PropertyFailedError,
    StatisticsError,
    SystemLifecycleError,
    ValidationError,
)

__all__ = [
    "FaultlineError",
    "ErrorCode",
    "ErrorContext",
    "ValidationError",
    "ConfigValidationError",
    "GenerationError",
    "SystemLifecycleError",
    "AdapterError",
    "StatisticsError",
    "PropertyFailedError",
]
