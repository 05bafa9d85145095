"""Tests for run statistics."""

from __future__ import annotations

import pytest

from faultline.core.categories import FailureCategory
from faultline.core.statistics import FailureStats, OperationAnalytics, OperationTiming, TestStatistics
from faultline.errors import StatisticsError


class TestFailureStats:
    def test_rates_are_zero_without_operations(self) -> None:
        stats = FailureStats()
        stats.record(FailureCategory.ALLOCATOR)
        assert stats.rate(FailureCategory.ALLOCATOR) == 0.0
        assert stats.injection_rate() == 0.0

    def test_record_and_rate(self) -> None:
        stats = FailureStats()
        for _ in range(10):
            stats.record_operation()
        stats.record(FailureCategory.ALLOCATOR)
        stats.record(FailureCategory.NETWORK)
        stats.record(FailureCategory.NETWORK)
        stats.record("disk_full")
        assert stats.count(FailureCategory.NETWORK) == 2
        assert stats.rate(FailureCategory.NETWORK) == pytest.approx(0.2)
        assert stats.rate("disk_full") == pytest.approx(0.1)
        assert stats.total_injected == 4
        assert stats.injection_rate() == pytest.approx(0.4)
        assert stats.categories() == ["allocator", "network", "disk_full"]

    def test_invalid_category(self) -> None:
        stats = FailureStats()
        with pytest.raises(StatisticsError):
            stats.record("")
        with pytest.raises(StatisticsError):
            stats.record(None)  # type: ignore[arg-type]


class TestOperationTiming:
    def test_min_max_average(self) -> None:
        timing = OperationTiming()
        assert timing.average_time_ns == 0
        for ns in (300, 100, 200):
            timing.record_call(ns)
        assert timing.total_calls == 3
        assert timing.min_time_ns == 100
        assert timing.max_time_ns == 300
        assert timing.average_time_ns == 200

    def test_negative_time_rejected(self) -> None:
        with pytest.raises(StatisticsError):
            OperationTiming().record_call(-1)


class TestOperationAnalytics:
    def test_actual_distribution(self) -> None:
        analytics = OperationAnalytics()
        assert analytics.actual_distribution() == {}
        for name in ("PUT", "PUT", "PUT", "GET"):
            analytics.record_operation(name)
        assert analytics.actual_distribution() == {"PUT": 0.75, "GET": 0.25}

    def test_negative_intended_weight(self) -> None:
        with pytest.raises(StatisticsError):
            OperationAnalytics().set_intended_weight("PUT", -0.1)


class TestTestStatistics:
    def test_detailed_recorders_disabled_by_default(self) -> None:
        stats = TestStatistics()
        stats.record_operation_timing("PUT", 100)
        stats.record_operation_call("PUT")
        stats.set_intended_operation_weight("PUT", 0.5)
        stats.record_failure_rate(0.5)
        assert stats.operation_timings == {}
        assert stats.operation_distribution.total == 0
        assert stats.failure_rates_over_time == []

    def test_detailed_recorders_enabled(self) -> None:
        stats = TestStatistics(detailed_stats_enabled=True)
        stats.record_operation_timing("PUT", 100)
        stats.record_operation_timing("PUT", 50)
        stats.record_operation_call("PUT")
        stats.set_intended_operation_weight("PUT", 0.5)
        stats.record_failure_rate(0.25)
        stats.record_failure_rate(0.75)
        assert stats.operation_timings["PUT"].total_calls == 2
        assert stats.operation_distribution.actual_counts == {"PUT": 1}
        assert stats.operation_distribution.intended_weights == {"PUT": 0.5}
        assert stats.average_failure_rate == pytest.approx(0.5)

    def test_failure_rate_out_of_range(self) -> None:
        stats = TestStatistics(detailed_stats_enabled=True)
        with pytest.raises(StatisticsError):
            stats.record_failure_rate(1.5)

    def test_snapshot_is_independent(self) -> None:
        stats = TestStatistics()
        stats.sequences_tested = 3
        stats.failures.record("oom")
        snapshot = stats.snapshot()
        stats.sequences_tested = 10
        stats.failures.record("oom")
        assert snapshot.sequences_tested == 3
        assert snapshot.failures.custom_failures_injected == {"oom": 1}

    def test_reset_keeps_detailed_flag(self) -> None:
        stats = TestStatistics(detailed_stats_enabled=True)
        stats.invariant_violations = 4
        stats.record_operation_call("GET")
        stats.reset()
        assert stats.invariant_violations == 0
        assert stats.operation_distribution.total == 0
        assert stats.detailed_stats_enabled

    def test_summary(self) -> None:
        stats = TestStatistics(total_operations_generated=20, sequences_tested=2)
        stats.execution_time_ns = 1_500_000
        summary = stats.summary()
        assert summary["total_operations"] == 20
        assert summary["sequences_tested"] == 2
        assert summary["execution_time_ms"] == 1.5
