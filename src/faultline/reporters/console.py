"""Console reporter for terminal output."""

from __future__ import annotations

import sys
from typing import TextIO

from faultline.core.categories import FailureCategory
from faultline.core.invariant import Severity
from faultline.core.statistics import TestStatistics
from faultline.errors import PropertyFailedError


class ConsoleReporter:
    """Formats run statistics and failure reproductions for the terminal.

    Features:
    - Compact one-line summary of the run
    - Failure-injection rates per category
    - Per-operation timing and actual vs intended distribution when
      detailed statistics were collected
    - Boxed minimal reproduction with hex-encoded keys and values
    """

    # ANSI color codes
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    # Box drawing characters
    BOX_TL = "┌"
    BOX_TR = "┐"
    BOX_BL = "└"
    BOX_BR = "┘"
    BOX_H = "─"
    BOX_V = "│"

    def __init__(self, file: TextIO | None = None, color: bool = True) -> None:
        self._file = file
        self.color = color

    @property
    def file(self) -> TextIO:
        return self._file if self._file is not None else sys.stdout

    def _c(self, text: str, code: str) -> str:
        """Apply color if enabled."""
        if self.color:
            return f"{code}{text}{self.RESET}"
        return text

    def report(self, stats: TestStatistics, name: str | None = None) -> None:
        """Output run statistics to the console."""
        self._newline()
        title = f"faultline statistics: {name}" if name else "faultline statistics"
        self._line(f"  {self._c(title, self.BOLD)}")
        self._line(self._c("  " + "─" * 60, self.DIM))

        summary_parts = [
            f"{stats.sequences_tested} sequences",
            f"{stats.total_operations_generated} operations",
            f"{stats.shrinking_iterations} shrinks",
            f"{stats.execution_time_ms:.0f}ms",
        ]
        self._line(f"  {self._c('Summary:', self.BOLD)} {' │ '.join(summary_parts)}")

        violations_color = self.RED if stats.invariant_violations else self.GREEN
        self._line(
            f"  {self._c('Invariant violations:', self.BOLD)} "
            f"{self._c(str(stats.invariant_violations), violations_color)}"
        )
        self._newline()

        self._report_failures(stats)

        if stats.detailed_stats_enabled:
            self._report_timings(stats)
            self._report_distribution(stats)
            self._report_failure_trend(stats)

        self._line(self._c("  " + "─" * 60, self.DIM))
        self._newline()

    def _report_failures(self, stats: TestStatistics) -> None:
        failures = stats.failures
        self._line(
            f"  {self._c('Failure injection', self.BOLD)} "
            f"({failures.total_operations} operations executed)"
        )
        for category in FailureCategory:
            count = failures.count(category)
            self._line(
                f"    {category.value:<20} {count:>8}  {self._percent(failures.rate(category))}"
            )
        for name in sorted(failures.custom_failures_injected):
            count = failures.count(name)
            self._line(f"    {name:<20} {count:>8}  {self._percent(failures.rate(name))}")
        self._line(
            f"    {'total':<20} {failures.total_injected:>8}  {self._percent(failures.injection_rate())}"
        )
        self._newline()

    def _report_timings(self, stats: TestStatistics) -> None:
        if not stats.operation_timings:
            return
        self._line(f"  {self._c('Operation timings', self.BOLD)}")
        self._line(self._c(f"    {'operation':<20} {'calls':>8} {'avg':>10} {'min':>10} {'max':>10}", self.DIM))
        for name, timing in sorted(stats.operation_timings.items()):
            self._line(
                f"    {name:<20} {timing.total_calls:>8} "
                f"{self._duration(timing.average_time_ns):>10} "
                f"{self._duration(timing.min_time_ns or 0):>10} "
                f"{self._duration(timing.max_time_ns):>10}"
            )
        self._newline()

    def _report_distribution(self, stats: TestStatistics) -> None:
        analytics = stats.operation_distribution
        actual = analytics.actual_distribution()
        names = sorted(set(actual) | set(analytics.intended_weights))
        if not names:
            return
        self._line(f"  {self._c('Operation distribution', self.BOLD)} (actual vs intended)")
        for name in names:
            actual_share = actual.get(name, 0.0)
            intended = analytics.intended_weights.get(name)
            intended_text = self._percent(intended) if intended is not None else "-"
            drift_color = self.DIM
            if intended is not None and abs(actual_share - intended) > 0.05:
                drift_color = self.YELLOW
            self._line(
                f"    {name:<20} {self._percent(actual_share):>8}  "
                f"{self._c(intended_text, drift_color)}"
            )
        self._newline()

    def _report_failure_trend(self, stats: TestStatistics) -> None:
        rates = stats.failure_rates_over_time
        if not rates:
            return
        self._line(
            f"  {self._c('Failure rate over time', self.BOLD)} "
            f"(avg {self._percent(stats.average_failure_rate)}, "
            f"min {self._percent(min(rates))}, max {self._percent(max(rates))})"
        )
        self._newline()

    def report_reproduction(self, failure: PropertyFailedError) -> None:
        """Output the minimal reproduction of a property failure."""
        violation = failure.violation
        self._newline()
        self._line(f"  {self._c('✗', self.RED)} {self._c('Property failed', self.RED + self.BOLD)}")
        self._newline()

        sev_color = self.RED + self.BOLD if violation.severity == Severity.CRITICAL else self.YELLOW
        sev_badge = self._c(f"[{violation.severity.value.upper()}]", sev_color)

        self._line(f"  {self.BOX_TL}{self.BOX_H * 58}{self.BOX_TR}")
        self._line(f"  {self.BOX_V} {sev_badge} {self._c(violation.invariant_name, self.BOLD)}")
        if violation.message:
            self._line(f"  {self.BOX_V}   {self._truncate(violation.message, 54)}")
        self._line(f"  {self.BOX_V}")
        self._line(f"  {self.BOX_V}   {self._c('Seed:', self.CYAN)} {failure.seed}")
        self._line(f"  {self.BOX_V}   {self._c('Iteration:', self.CYAN)} {failure.iteration}")
        self._line(
            f"  {self.BOX_V}   {self._c('Shrunk:', self.CYAN)} "
            f"{len(failure.original_sequence)} → {len(failure.minimal_sequence)} operations"
        )
        self._line(f"  {self.BOX_BL}{self.BOX_H * 58}{self.BOX_BR}")
        self._newline()

        self._line(f"  {self._c('Minimal reproduction', self.BOLD)} ({len(failure.minimal_sequence)} operations)")
        for line in failure.minimal_sequence.describe():
            self._line(f"    {self._truncate(line)}")
        self._newline()
        self._line(f"  {self._c(f'Re-run with seed {failure.seed} to reproduce.', self.YELLOW)}")
        self._newline()

    def _line(self, text: str) -> None:
        print(text, file=self.file)

    def _newline(self) -> None:
        print(file=self.file)

    def _truncate(self, text: str, max_chars: int = 200) -> str:
        """Truncate text to max_chars."""
        if not isinstance(text, str):
            text = str(text)
        if len(text) <= max_chars:
            return text
        return text[:max_chars - 3] + "..."

    @staticmethod
    def _percent(value: float) -> str:
        return f"{value * 100:.2f}%"

    @staticmethod
    def _duration(ns: int) -> str:
        if ns >= 1_000_000:
            return f"{ns / 1_000_000:.2f}ms"
        if ns >= 1_000:
            return f"{ns / 1_000:.1f}µs"
        return f"{ns}ns"
