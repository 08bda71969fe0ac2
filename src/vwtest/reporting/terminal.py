"""Terminal reporter rendering progress and summaries."""
from __future__ import annotations

import time
from typing import Sequence

import click
from colorama import Fore, Style

from vwtest.config import RunConfig
from vwtest.core.models import TestCase, Verdict
from vwtest.core.results import EXEC_FAILED, CaseResult, CheckResult, RunSummary

from .base import Reporter, failure_lines

STATUS_LABELS = {
    "passed": ("PASS", Fore.GREEN),
    "failed": ("FAIL", Fore.RED),
    EXEC_FAILED: ("EXEC-FAIL", Fore.RED),
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        self._start_time = 0.0
        self._failures: list[CaseResult] = []

    def on_start(self, cases: Sequence[TestCase], config: RunConfig) -> None:
        self._start_time = time.perf_counter()
        self._failures.clear()
        mode = f"fuzzy epsilon={config.epsilon:g}" if config.fuzzy else "exact"
        click.echo(
            self._styled(
                f"Starting run: {len(cases)} test(s), {mode}, wrapper={config.wrapper_kind} "
                f"fail_fast={config.fail_fast} overwrite={config.overwrite}",
                color="cyan",
            )
        )

    def on_command(self, case: TestCase, command: str) -> None:
        click.echo(f"{case.identifier()}: {command}")

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        ms = result.duration_s * 1000
        click.echo(f"[{index}/{total}] {result.case.identifier()} -> {self._status(result.status)} ({ms:.0f} ms)")
        if result.status == EXEC_FAILED:
            for line in failure_lines(result):
                click.echo(self._styled(f"    {line}", color="red"))
        for check in result.checks:
            self._print_check(result, check)
        if not result.passed:
            self._failures.append(result)

    def on_complete(self, summary: RunSummary) -> None:
        duration = time.perf_counter() - self._start_time
        color = "green" if summary.failures == 0 else "red"
        click.echo(
            self._styled(
                f"Summary: total={len(summary.results)} passed={summary.passed} "
                f"failed={summary.failed_tests} failures={summary.failures} "
                f"cpu={summary.cpu_s:.2f}s duration={duration:.2f}s",
                color=color,
            )
        )
        if summary.aborted:
            click.echo(self._styled(f"Aborted (fail-fast), exit status {summary.exit_code}", color="red"))
        if summary.perf is not None:
            perf = summary.perf
            if perf.ratio is None:
                click.echo(f"CPU time recorded: {perf.current:.2f}s (no previous record)")
            elif perf.regressed:
                click.echo(
                    self._styled(
                        f"CPU time regression: {perf.current:.2f}s vs {perf.previous:.2f}s "
                        f"(ratio {perf.ratio:.3f} > {perf.tolerance:.2f})",
                        color="yellow",
                    )
                )
            else:
                click.echo(f"CPU time {perf.current:.2f}s vs {perf.previous:.2f}s (ratio {perf.ratio:.3f})")
        if self._failures:
            numbers = " ".join(str(result.case.number) for result in self._failures)
            click.echo(self._styled(f"Failing tests: {numbers}", color="red"))

    def _print_check(self, result: CaseResult, check: CheckResult) -> None:
        number = result.case.number
        if check.failed:
            click.echo(self._styled(f"    test {number}: {check.kind} mismatch: {check.message}", color="red"))
        elif check.verdict is Verdict.COSMETIC:
            click.echo(self._styled(f"    test {number}: {check.kind}: {check.message}", color="yellow"))
        elif check.missing_reference and check.overwritten:
            click.echo(f"    test {number}: {check.kind}: {check.message}")
        if check.overwritten and check.verdict is not None:
            click.echo(f"    test {number}: {check.kind}: reference {check.reference} overwritten")
        if check.diff_text:
            click.echo(check.diff_text)

    def _status(self, status: str) -> str:
        label, color = STATUS_LABELS.get(status, (status.upper(), ""))
        if not self._use_color or not color:
            return label
        return f"{color}{label}{Style.RESET_ALL}"

    def _styled(self, text: str, *, color: str) -> str:
        if not self._use_color:
            return text
        return click.style(text, fg=color)
