"""Operation sequence generation."""

from __future__ import annotations

import logging
import random

from faultline.core.operation import Operation, OperationSequence
from faultline.core.range import Range
from faultline.core.statistics import TestStatistics
from faultline.generators.distribution import OperationDistribution
from faultline.generators.keys import BaseKeyStrategy, UniformRandomKeys
from faultline.generators.values import ValueStrategy, VariableSizeValues

logger = logging.getLogger(__name__)


class SequenceGenerator:
    """Builds the operation sequence for one iteration.

    Draw order is part of the reproducibility contract: one draw for the
    sequence length, then for every operation the kind, the key and the
    value, in that order.
    """

    def __init__(
        self,
        distribution: OperationDistribution,
        key_strategy: BaseKeyStrategy | None = None,
        value_strategy: ValueStrategy | None = None,
        sequence_length: Range | None = None,
        statistics: TestStatistics | None = None,
    ) -> None:
        self.distribution = distribution
        self.key_strategy = key_strategy or UniformRandomKeys()
        self.value_strategy = value_strategy or VariableSizeValues()
        self.sequence_length = sequence_length or Range(100, 1000)
        self.statistics = statistics

    def generate(self, rng: random.Random) -> OperationSequence:
        length = self.sequence_length.sample(rng)
        sequence = OperationSequence()
        generated_keys: list[bytes] = []

        for _ in range(length):
            kind = self.distribution.sample(rng)
            key = self.key_strategy.generate(rng, generated_keys)
            generated_keys.append(key)
            value = self.value_strategy.generate(rng)
            sequence.append(Operation(kind=kind, key=key, value=value))

            if self.statistics is not None:
                self.statistics.total_operations_generated += 1

        logger.debug(f"Generated sequence of {length} operations")
        return sequence
