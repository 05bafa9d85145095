"""Pytest fixtures for faultline tests."""

from __future__ import annotations

import io
import random

import pytest

from faultline.core.statistics import TestStatistics
from faultline.engine.executor import Executor
from faultline.injection.config import FailureInjectionConfig
from faultline.injection.injector import FailureInjector
from faultline.reporters.console import ConsoleReporter
from tests.helpers import TrackingAdapter, counter_bounded, make_counter_adapter, make_kv_adapter


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def statistics() -> TestStatistics:
    return TestStatistics()


@pytest.fixture
def kv_adapter() -> TrackingAdapter:
    return make_kv_adapter()


@pytest.fixture
def counter_adapter() -> TrackingAdapter:
    return make_counter_adapter()


@pytest.fixture
def failure_config() -> FailureInjectionConfig:
    return FailureInjectionConfig()


@pytest.fixture
def injector(
    failure_config: FailureInjectionConfig,
    rng: random.Random,
    statistics: TestStatistics,
) -> FailureInjector:
    return FailureInjector(failure_config, rng, statistics.failures)


@pytest.fixture
def counter_executor(
    counter_adapter: TrackingAdapter,
    injector: FailureInjector,
    statistics: TestStatistics,
) -> Executor:
    return Executor(counter_adapter, injector, statistics, [counter_bounded()])


@pytest.fixture
def report_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def quiet_reporter(report_stream: io.StringIO) -> ConsoleReporter:
    return ConsoleReporter(file=report_stream, color=False)
