"""Core data objects for faultline.

This module contains the fundamental data structures:
- Range: Inclusive integer ranges
- Operation, OperationSequence: What gets executed
- Invariant, Violation, Severity: Verification
- FailureCategory: Built-in failure categories
- TestStatistics: Counters accumulated over a run
"""

from faultline.core.categories import FailureCategory, resolve_category
from faultline.core.invariant import Invariant, Severity, Violation, invariant
from faultline.core.operation import Operation, OperationSequence, kind_name
from faultline.core.range import Range
from faultline.core.statistics import (
    FailureStats,
    OperationAnalytics,
    OperationTiming,
    TestStatistics,
)

__all__ = [
    "Range",
    "Operation",
    "OperationSequence",
    "kind_name",
    "Invariant",
    "Violation",
    "Severity",
    "invariant",
    "FailureCategory",
    "resolve_category",
    "FailureStats",
    "OperationTiming",
    "OperationAnalytics",
    "TestStatistics",
]
