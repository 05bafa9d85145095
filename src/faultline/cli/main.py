"""CLI commands for faultline."""

from __future__ import annotations

import importlib
import logging
import os
import sys
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from faultline import __version__
from faultline.config import FaultlineSettings, load_config
from faultline.engine.adapter import SystemAdapter
from faultline.engine.property_test import PropertyTest
from faultline.errors import ConfigValidationError, FaultlineError, PropertyFailedError
from faultline.reporters.console import ConsoleReporter

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def resolve_target(target: str) -> Any:
    """Import ``module:attribute`` relative to the working directory."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise click.BadParameter(
            f"expected 'module:attribute', got {target!r}", param_hint="TARGET"
        )

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import module {module_name!r}: {e}", param_hint="TARGET") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise click.BadParameter(
                f"module {module_name!r} has no attribute {attr_path!r}", param_hint="TARGET"
            ) from e
    return obj


def build_property_test(
    obj: Any,
    settings: FaultlineSettings,
    reporter: ConsoleReporter,
) -> PropertyTest:
    """Turn a resolved target into a PropertyTest.

    Accepts a PropertyTest, a SystemAdapter (optionally exposing an
    ``invariants`` list), or a zero-argument factory of either.
    """
    if isinstance(obj, PropertyTest):
        obj.reporter = reporter
        return obj

    if isinstance(obj, type) or (callable(obj) and not isinstance(obj, SystemAdapter)):
        obj = obj()
        if isinstance(obj, PropertyTest):
            obj.reporter = reporter
            return obj

    if isinstance(obj, SystemAdapter):
        return PropertyTest.from_settings(
            obj,
            settings,
            invariants=list(getattr(obj, "invariants", None) or []),
            reporter=reporter,
        )

    raise click.BadParameter(
        f"target must be a PropertyTest or a SystemAdapter, got {type(obj).__name__}",
        param_hint="TARGET",
    )


@click.group()
@click.version_option(version=__version__, prog_name="faultline")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """faultline - deterministic property testing with failure injection."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument("target")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Path to config file")
@click.option("--seed", type=int, default=None, help="Seed for the pseudorandom stream")
@click.option("--iterations", "-n", type=int, default=None, help="Number of iterations")
@click.option("--detailed-stats", is_flag=True, help="Collect per-operation timing and distribution")
@click.option("--no-color", is_flag=True, help="Disable colored output")
def run(
    target: str,
    config_path: str | None,
    seed: int | None,
    iterations: int | None,
    detailed_stats: bool,
    no_color: bool,
) -> None:
    """Run the property test named by TARGET (module:attribute)."""
    console = Console(no_color=no_color, highlight=False)
    reporter = ConsoleReporter(color=not no_color)

    try:
        settings = load_config(config_path)
        test = build_property_test(resolve_target(target), settings, reporter)
        if seed is not None:
            test.set_seed(seed)
        if iterations is not None:
            test.set_iterations(iterations)
        if detailed_stats:
            test.set_detailed_stats(True)

        console.print(
            f"[cyan]Running {test.name}[/cyan] (seed: {test.seed}, iterations: {test.iterations})"
        )
        stats = test.run_with_stats()
    except ConfigValidationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(e.message)}")
        for suggestion in e.suggestions:
            console.print(f"  [yellow]-[/yellow] {escape(suggestion)}")
        sys.exit(EXIT_CONFIG_ERROR)
    except PropertyFailedError as e:
        if e.statistics is not None:
            reporter.report(e.statistics, name=test.name)
        console.print(f"[red]FAILED[/red] {escape(e.message)}")
        console.print(f"[yellow]Reproduce with --seed {e.seed}[/yellow]")
        sys.exit(EXIT_FAILED)
    except FaultlineError as e:
        console.print(f"[red]Error:[/red] {escape(e.format_verbose())}")
        sys.exit(EXIT_FAILED)

    reporter.report(stats, name=test.name)
    console.print(f"[green]PASSED[/green] {stats.sequences_tested} sequences tested")
    sys.exit(EXIT_PASSED)


@cli.command("validate-config")
@click.argument("path", type=click.Path(exists=True))
def validate_config(path: str) -> None:
    """Validate a configuration file."""
    console = Console(highlight=False)

    try:
        settings = load_config(path)
    except ConfigValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(e.message)}")
        sys.exit(EXIT_CONFIG_ERROR)

    table = Table(title=f"{path}", show_header=True)
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, escape(str(value)))
    console.print(table)
    console.print("[green]Configuration is valid[/green]")
