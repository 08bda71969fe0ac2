"""Result data structures produced by the test runner."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .diff import AlignedPair
from .models import ExecutionResult, TestCase, Verdict
from .timing import PerfCheck

PASSED = "passed"
FAILED = "failed"
EXEC_FAILED = "exec-failed"


@dataclass
class CheckResult:
    """Outcome of comparing one output kind against its reference."""

    kind: str
    reference: Optional[Path]
    actual: Path
    verdict: Optional[Verdict]
    failed: bool
    message: str = ""
    missing_reference: bool = False
    overwritten: bool = False
    pairs: Sequence[AlignedPair] = ()
    diff_text: Optional[str] = None


@dataclass
class CaseResult:
    """Outcome of executing a single test case."""

    case: TestCase
    status: str
    duration_s: float
    execution: Optional[ExecutionResult] = None
    checks: List[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == PASSED

    @property
    def failures(self) -> int:
        if self.status == EXEC_FAILED:
            return 1
        return sum(1 for check in self.checks if check.failed)

    @property
    def exit_status(self) -> int:
        if self.execution is not None and self.execution.exit_status != 0:
            return self.execution.exit_status
        return 0 if self.passed else 1


@dataclass
class RunSummary:
    """Aggregate outcome of a run."""

    results: List[CaseResult]
    failures: int
    exit_code: int
    aborted: bool = False
    full_suite: bool = False
    cpu_s: float = 0.0
    duration_s: float = 0.0
    perf: Optional[PerfCheck] = None

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def failed_tests(self) -> int:
        return sum(1 for result in self.results if not result.passed)
