"""Operation sequence generators.

- Key strategies: uniform random, collision prone, sequential
- Value strategies: fixed size, variable size, random binary
- OperationDistribution: weighted kind selection
- SequenceGenerator: composes the above into one sequence per iteration
"""

from faultline.generators.distribution import OperationDistribution
from faultline.generators.keys import (
    BaseKeyStrategy,
    CollisionProneKeys,
    KeyStrategy,
    SequentialKeys,
    UniformRandomKeys,
    key_strategy_from_dict,
)
from faultline.generators.sequence import SequenceGenerator
from faultline.generators.values import (
    FixedSizeValues,
    RandomBinaryValues,
    ValueStrategy,
    VariableSizeValues,
    value_strategy_from_dict,
)

__all__ = [
    "OperationDistribution",
    "SequenceGenerator",
    "KeyStrategy",
    "BaseKeyStrategy",
    "UniformRandomKeys",
    "CollisionProneKeys",
    "SequentialKeys",
    "key_strategy_from_dict",
    "ValueStrategy",
    "FixedSizeValues",
    "VariableSizeValues",
    "RandomBinaryValues",
    "value_strategy_from_dict",
]
