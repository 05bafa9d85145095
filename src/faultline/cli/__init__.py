"""Command-line interface for faultline."""

from faultline.cli.main import cli

__all__ = ["cli"]
