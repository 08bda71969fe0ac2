"""CLI entry point for vwtest."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

import click
from colorama import init as colorama_init

from vwtest import __version__
from vwtest.backends import Executor, find_executable
from vwtest.config import RunConfig, load_config
from vwtest.core.models import TestCase
from vwtest.core.runner import TestRunner
from vwtest.errors import SetupError, VwTestError
from vwtest.reporting import JsonReporter, ReportManager, TerminalReporter
from vwtest.suite import default_suite, load_suite, select_tests

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


class CliState:
    """Holds global CLI state."""

    def __init__(self, verbosity: int) -> None:
        self.verbosity = verbosity


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"vwtest {__version__}")
    raise click.exceptions.Exit()


def _configure_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("vwtest").setLevel(level)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-v", "--verbose", "verbosity", count=True, help="Increase verbosity (repeatable).")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the vwtest version and exit.",
)
@click.pass_context
def cli(ctx: click.Context, verbosity: int) -> None:
    """Golden-file regression tests for the vw command-line program."""

    _configure_logging(verbosity)
    ctx.obj = CliState(verbosity=verbosity)


def _suite_options(func):
    func = click.option("--suite", "suite_path", type=click.Path(dir_okay=False), help="Test specification file (default: embedded suite).")(func)
    func = click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML configuration file.")(func)
    func = click.option("--base-dir", type=click.Path(file_okay=False), help="Directory holding data and reference files.")(func)
    return func


@cli.command()
@click.argument("tests", nargs=-1)
@_suite_options
@click.option("--vw", "executable", type=str, help="Path to the executable under test.")
@click.option("-c", "--print-commands", is_flag=True, help="Print each command before running it.")
@click.option("-d", "--diff-always", is_flag=True, help="Print the diff for every mismatch.")
@click.option("-D", "--diff-on-significant", is_flag=True, help="Print the diff for significant mismatches.")
@click.option("-e", "--fail-fast", is_flag=True, help="Abort the run on the first failing test.")
@click.option("-w", "--ignore-whitespace", is_flag=True, help="Ignore whitespace-only differences.")
@click.option("-f", "--fuzzy/--exact", "fuzzy", default=None, help="Tolerate small numeric differences.")
@click.option("-E", "--epsilon", type=str, help="Tolerance for fuzzy comparison (default 1e-4).")
@click.option("-o", "--overwrite", is_flag=True, help="Replace references that differ from the actual output.")
@click.option("-y", "--copy-failed", is_flag=True, help="Copy failing outputs aside for inspection.")
@click.option("--valgrind", is_flag=True, help="Run the executable under valgrind.")
@click.option("--timeout", type=str, help="Per-test wall-clock limit in seconds.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
    help="Report format.",
)
@click.option("--report-path", type=str, help="When --report json, write to this path.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def run(
    state: CliState,
    tests: Tuple[str, ...],
    suite_path: Optional[str],
    config_path: Optional[str],
    base_dir: Optional[str],
    executable: Optional[str],
    print_commands: bool,
    diff_always: bool,
    diff_on_significant: bool,
    fail_fast: bool,
    ignore_whitespace: bool,
    fuzzy: Optional[bool],
    epsilon: Optional[str],
    overwrite: bool,
    copy_failed: bool,
    valgrind: bool,
    timeout: Optional[str],
    report_format: str,
    report_path: Optional[str],
    no_color: bool,
) -> None:
    """Run the suite, or only the given test numbers."""

    try:
        config = _build_config(config_path, base_dir, verbosity=state.verbosity).with_overrides(
            print_commands=print_commands or None,
            diff_always=diff_always or None,
            diff_on_significant=diff_on_significant or None,
            fail_fast=fail_fast or None,
            ignore_whitespace=ignore_whitespace or None,
            fuzzy=fuzzy,
            epsilon=_parse_positive_float(epsilon, "epsilon"),
            overwrite=overwrite or None,
            copy_failed=copy_failed or None,
            valgrind=valgrind or None,
            timeout=_parse_positive_float(timeout, "timeout"),
        )
        if config.verbosity > state.verbosity:
            _configure_logging(config.verbosity)
        selection = _parse_test_numbers(tests)
        cases = _load_cases(suite_path, config)
        vw = find_executable(executable, base_dir=config.base_dir)
        reporter = ReportManager([_build_reporter(report_format, report_path, use_color=not no_color)])
        if not no_color:
            colorama_init()
        runner = TestRunner(config, executor=Executor(config), reporter=reporter)
        summary = runner.run(cases, vw, selection=selection)
    except VwTestError as exc:
        raise click.ClickException(str(exc)) from exc
    raise click.exceptions.Exit(summary.exit_code)


@cli.command(name="list")
@click.argument("tests", nargs=-1)
@_suite_options
@click.pass_obj
def list_tests(
    state: CliState,
    tests: Tuple[str, ...],
    suite_path: Optional[str],
    config_path: Optional[str],
    base_dir: Optional[str],
) -> None:
    """Print the parsed tests without running them."""

    try:
        config = _build_config(config_path, base_dir, verbosity=state.verbosity)
        cases = _load_cases(suite_path, config)
        selection = _parse_test_numbers(tests)
    except VwTestError as exc:
        raise click.ClickException(str(exc)) from exc
    if selection is not None:
        cases = select_tests(cases, selection)
    for case in cases:
        click.echo(f"{case.number}: {case.command}")
        for kind, reference in sorted(case.expectations.items()):
            click.echo(f"    {kind}: {reference}")


def _build_config(config_path: Optional[str], base_dir: Optional[str], *, verbosity: int) -> RunConfig:
    config = RunConfig(verbosity=verbosity)
    if config_path:
        config = load_config(config_path, config)
    if base_dir:
        config = config.with_overrides(base_dir=Path(base_dir).expanduser().resolve())
    return config


def _load_cases(suite_path: Optional[str], config: RunConfig) -> Sequence[TestCase]:
    if suite_path:
        try:
            return load_suite(suite_path, placeholder=config.placeholder)
        except OSError as exc:
            raise SetupError(f"Cannot read suite file {suite_path}: {exc}") from exc
    return default_suite(config.placeholder)


def _build_reporter(report_format: str, report_path: Optional[str], *, use_color: bool):
    if report_format == "json":
        return JsonReporter(report_path)
    return TerminalReporter(use_color=use_color)


def _parse_positive_float(value: Optional[str], name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError as exc:
        raise SetupError(f"Invalid {name} '{value}': not a number") from exc
    if not number > 0:
        raise SetupError(f"Invalid {name} '{value}': must be positive")
    return number


def _parse_test_numbers(values: Sequence[str]) -> Optional[Tuple[int, ...]]:
    if not values:
        return None
    numbers = []
    for value in values:
        for part in value.replace(",", " ").split():
            try:
                number = int(part)
            except ValueError as exc:
                raise SetupError(f"Invalid test number '{part}'") from exc
            if number < 1:
                raise SetupError(f"Invalid test number '{part}': tests are numbered from 1")
            numbers.append(number)
    return tuple(numbers)


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="vwtest", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
