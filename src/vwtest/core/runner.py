"""Test runner orchestrating execution, reference lookup and comparison."""
from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from vwtest.backends import Executor
from vwtest.config import RunConfig
from vwtest.suite import select_tests

from .comparator import NumericComparator
from .diff import align_files, render_unified
from .models import PREDICT, STDERR, STDOUT, ExecutionResult, TestCase, Tolerance, Verdict
from .references import ReferenceResolver, promote
from .results import EXEC_FAILED, FAILED, PASSED, CaseResult, CheckResult, RunSummary
from .timing import record_cpu_time

logger = logging.getLogger(__name__)


class TestRunner:
    """Executes test cases sequentially and judges their outputs."""

    __test__ = False

    def __init__(
        self,
        config: RunConfig,
        *,
        executor: Optional[Executor] = None,
        resolver: Optional[ReferenceResolver] = None,
        comparator: Optional[NumericComparator] = None,
        reporter=None,
    ) -> None:
        self._config = config
        self._executor = executor or Executor(config)
        self._resolver = resolver or ReferenceResolver(
            config.base_dir,
            variant_platforms=config.variant_platforms,
            variant_suffix=config.variant_suffix,
        )
        self._comparator = comparator or NumericComparator(Tolerance(epsilon=config.epsilon))
        self._reporter = reporter

    def run(
        self,
        cases: Sequence[TestCase],
        executable: str | Path,
        *,
        selection: Optional[Sequence[int]] = None,
        on_result: Optional[Callable[[CaseResult, int, int], None]] = None,
    ) -> RunSummary:
        selected = list(cases) if selection is None else select_tests(cases, selection)
        full_suite = selection is None or [c.number for c in selected] == [c.number for c in cases]
        self._executor.prepare()
        if self._reporter is not None:
            self._reporter.start(selected, self._config)

        start = time.perf_counter()
        results: List[CaseResult] = []
        failures = 0
        exit_code = 0
        aborted = False
        total = len(selected)
        for index, case in enumerate(selected, start=1):
            result = self._execute_case(case, executable)
            results.append(result)
            failures += result.failures
            if self._reporter is not None:
                self._reporter.handle_result(result, index, total)
            if on_result:
                on_result(result, index, total)
            if self._config.fail_fast and not result.passed:
                exit_code = result.exit_status
                aborted = True
                logger.info("Stopping after test %d (fail-fast)", case.number)
                break

        if not aborted:
            exit_code = 0 if failures == 0 else 1
        summary = RunSummary(
            results=results,
            failures=failures,
            exit_code=exit_code,
            aborted=aborted,
            full_suite=full_suite and not aborted,
            cpu_s=sum(r.execution.cpu_s for r in results if r.execution is not None),
            duration_s=time.perf_counter() - start,
        )
        if summary.full_suite and failures == 0 and self._executor.wrapper.name != "valgrind":
            state_file = self._config.resolve_path(self._config.state_file)
            summary.perf = record_cpu_time(state_file, summary.cpu_s, self._config.perf_tolerance)
        if self._reporter is not None:
            self._reporter.complete(summary)
        return summary

    def _execute_case(self, case: TestCase, executable: str | Path) -> CaseResult:
        start = time.perf_counter()
        command = self._executor.command_for(case, executable)
        if self._config.print_commands and self._reporter is not None:
            self._reporter.command(case, command)
        execution = self._executor.run(case, command)
        if not execution.succeeded:
            logger.info("test %d: %s", case.number, execution.describe_failure())
            return CaseResult(
                case=case,
                status=EXEC_FAILED,
                duration_s=time.perf_counter() - start,
                execution=execution,
            )
        checks = self._compare_outputs(case, execution)
        status = FAILED if any(check.failed for check in checks) else PASSED
        return CaseResult(
            case=case,
            status=status,
            duration_s=time.perf_counter() - start,
            execution=execution,
            checks=checks,
        )

    def _compare_outputs(self, case: TestCase, execution: ExecutionResult) -> List[CheckResult]:
        checks = [
            self._check(case, STDOUT, execution.stdout_path, mandatory=False),
            self._check(case, STDERR, execution.stderr_path, mandatory=True),
        ]
        if case.reference(PREDICT) and execution.predict_path is not None:
            checks.append(self._check(case, PREDICT, execution.predict_path, mandatory=True))
        return checks

    def _check(self, case: TestCase, kind: str, actual: Path, *, mandatory: bool) -> CheckResult:
        name = case.reference(kind)
        reference = self._resolver.resolve(name) if name else None
        if reference is None or not reference.exists():
            return self._missing_reference(case, kind, reference, actual, mandatory=mandatory)

        pairs = align_files(reference, actual, ignore_whitespace=self._config.ignore_whitespace)
        if not pairs:
            return CheckResult(kind=kind, reference=reference, actual=actual, verdict=Verdict.MATCH, failed=False)

        if self._config.fuzzy:
            judgement = self._comparator.judge(pairs)
            verdict = judgement.verdict
            if verdict is Verdict.SIGNIFICANT:
                where = judgement.pair.location() if judgement.pair else ""
                message = f"{where}: {judgement.reason}"
            else:
                message = "minor precision difference ignored"
                logger.info("test %d: %s: %s", case.number, kind, message)
        else:
            verdict = Verdict.SIGNIFICANT
            message = f"{len(pairs)} differing line(s), first at {pairs[0].location()}"

        check = CheckResult(
            kind=kind,
            reference=reference,
            actual=actual,
            verdict=verdict,
            failed=verdict.failed,
            message=message,
            pairs=tuple(pairs),
        )
        if self._config.diff_always or (self._config.diff_on_significant and verdict.failed):
            check.diff_text = render_unified(reference, actual)
        if check.failed and self._config.copy_failed:
            self._copy_for_inspection(case, actual, reference)
        if self._config.overwrite:
            self._overwrite(check)
        return check

    def _missing_reference(
        self, case: TestCase, kind: str, reference: Optional[Path], actual: Path, *, mandatory: bool
    ) -> CheckResult:
        empty = not actual.exists() or actual.stat().st_size == 0
        if not mandatory and empty:
            return CheckResult(
                kind=kind,
                reference=reference,
                actual=actual,
                verdict=Verdict.MATCH,
                failed=False,
                message="no reference and empty output",
                missing_reference=True,
            )
        check = CheckResult(
            kind=kind,
            reference=reference,
            actual=actual,
            verdict=None,
            failed=True,
            message=f"reference {reference or '(undeclared)'} is missing",
            missing_reference=True,
        )
        if not self._config.overwrite:
            if self._config.copy_failed:
                self._copy_for_inspection(case, actual, reference)
            return check
        if reference is None:
            logger.warning("test %d: %s output has no declared reference to record into", case.number, kind)
            check.failed = False
            return check
        if self._overwrite(check):
            check.failed = False
            check.message = f"reference {reference} created"
        return check

    def _overwrite(self, check: CheckResult) -> bool:
        if check.reference is None:
            return False
        if not check.actual.exists():
            logger.warning("Not overwriting %s: %s was not produced", check.reference, check.actual)
            return False
        promote(check.actual, check.reference)
        check.overwritten = True
        return True

    def _copy_for_inspection(self, case: TestCase, actual: Path, reference: Optional[Path]) -> None:
        if not actual.exists():
            return
        target_dir = self._config.resolve_path(self._config.failed_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        name = reference.name if reference is not None else actual.name
        target = target_dir / f"{case.number}.{name}"
        shutil.copy2(actual, target)
        logger.info("test %d: copied %s to %s", case.number, actual, target)
