"""Reporters for faultline run results."""

from faultline.reporters.console import ConsoleReporter

__all__ = ["ConsoleReporter"]
