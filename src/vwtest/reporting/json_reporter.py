"""JSON reporter emitting structured execution results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
from typing import Any, Dict, Optional, Sequence

import click
from jsonschema import validate

from vwtest.config import RunConfig
from vwtest.core.models import TestCase
from vwtest.core.results import CaseResult, CheckResult, RunSummary

from .base import Reporter, failure_lines
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION


class JsonReporter(Reporter):
    """Writes results as JSON validated against the schema.

    Without a path the report goes to stdout.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._records: list[Dict[str, Any]] = []
        self._config: RunConfig | None = None

    def on_start(self, cases: Sequence[TestCase], config: RunConfig) -> None:
        self._config = config
        self._records.clear()

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        self._records.append(_case_to_dict(result))
        for line in failure_lines(result):
            click.echo(line, err=True)

    def on_complete(self, summary: RunSummary) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
            "summary": _build_summary(summary, self._config),
            "tests": self._records,
        }
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        text = json.dumps(payload, indent=2)
        if self._path is None:
            click.echo(text)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}", err=True)


def _build_summary(summary: RunSummary, config: Optional[RunConfig]) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "total": len(summary.results),
        "passed": summary.passed,
        "failed": summary.failed_tests,
        "failures": summary.failures,
        "exit_code": summary.exit_code,
        "aborted": summary.aborted,
        "full_suite": summary.full_suite,
        "duration_s": summary.duration_s,
        "cpu_s": summary.cpu_s,
        "perf": None,
    }
    if config is not None:
        data["epsilon"] = config.epsilon
        data["fuzzy"] = config.fuzzy
    if summary.perf is not None:
        data["perf"] = {
            "current": summary.perf.current,
            "previous": summary.perf.previous,
            "ratio": summary.perf.ratio,
            "regressed": summary.perf.regressed,
        }
    return data


def _case_to_dict(result: CaseResult) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "number": result.case.number,
        "command": result.execution.command if result.execution else result.case.command,
        "status": result.status,
        "duration_ms": result.duration_s * 1000,
        "exit_status": result.execution.exit_status if result.execution else None,
        "checks": [_check_to_dict(check) for check in result.checks],
    }
    if result.execution is not None and not result.execution.succeeded:
        record["failure"] = result.execution.describe_failure()
    return record


def _check_to_dict(check: CheckResult) -> Dict[str, Any]:
    return {
        "kind": check.kind,
        "verdict": check.verdict.value if check.verdict is not None else None,
        "failed": check.failed,
        "reference": str(check.reference) if check.reference is not None else None,
        "actual": str(check.actual),
        "message": check.message,
        "missing_reference": check.missing_reference,
        "overwritten": check.overwritten,
        "differing_lines": len(check.pairs),
    }
