"""Failure injection.

- FailureInjectionConfig: base probabilities and condition multipliers
- FailureInjector: one draw per decision on the shared stream
- SystemCondition: condition a system declares to scale probabilities
"""

from faultline.core.categories import FailureCategory
from faultline.injection.conditions import ConditionalMultiplier, SystemCondition
from faultline.injection.config import FailureInjectionConfig, clamp_probability
from faultline.injection.injector import FailureInjector

__all__ = [
    "FailureCategory",
    "SystemCondition",
    "ConditionalMultiplier",
    "FailureInjectionConfig",
    "FailureInjector",
    "clamp_probability",
]
