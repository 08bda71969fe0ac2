"""Reporter interface definitions."""
from __future__ import annotations

from typing import List, Sequence

from vwtest.config import RunConfig
from vwtest.core.models import TestCase
from vwtest.core.results import EXEC_FAILED, CaseResult, RunSummary


def failure_lines(result: CaseResult) -> List[str]:
    """One diagnostic line per failure, naming the test and what failed."""

    number = result.case.number
    lines = []
    if result.status == EXEC_FAILED and result.execution is not None:
        lines.append(f"test {number}: execution {result.execution.describe_failure()}")
    for check in result.checks:
        if check.failed:
            lines.append(f"test {number}: {check.kind} mismatch: {check.message}")
    return lines


class Reporter:
    """Interface for output renderers."""

    def on_start(self, cases: Sequence[TestCase], config: RunConfig) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_command(self, case: TestCase, command: str) -> None:
        pass

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:  # pragma: no cover
        raise NotImplementedError

    def on_complete(self, summary: RunSummary) -> None:  # pragma: no cover
        raise NotImplementedError


class ReportManager:
    """Dispatches lifecycle callbacks to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)

    def start(self, cases: Sequence[TestCase], config: RunConfig) -> None:
        for reporter in self._reporters:
            reporter.on_start(cases, config)

    def command(self, case: TestCase, command: str) -> None:
        for reporter in self._reporters:
            reporter.on_command(case, command)

    def handle_result(self, result: CaseResult, index: int, total: int) -> None:
        for reporter in self._reporters:
            reporter.on_case_result(result, index, total)

    def complete(self, summary: RunSummary) -> None:
        for reporter in self._reporters:
            reporter.on_complete(summary)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)
