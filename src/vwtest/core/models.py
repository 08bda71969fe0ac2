"""Core dataclasses shared across vwtest subsystems."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

STDOUT = "stdout"
STDERR = "stderr"
PREDICT = "predict"

EXPECTATION_KINDS = (STDOUT, STDERR, PREDICT)

DEFAULT_PREDICT_FILE = "predictions.out"

# Sentinel exit codes reported by the wrappers.
INSTRUMENTATION_EXIT_CODE = 100
TIMEOUT_EXIT_CODE = 124


class Verdict(str, enum.Enum):
    """Outcome of comparing an actual output file with its reference."""

    MATCH = "match"
    SIGNIFICANT = "significant"
    COSMETIC = "cosmetic"

    @property
    def failed(self) -> bool:
        return self is Verdict.SIGNIFICANT


@dataclass(frozen=True)
class Tolerance:
    """Numeric tolerance used by the fuzzy comparator."""

    epsilon: float = 1e-4
    # |right| must exceed this before a relative comparison is attempted.
    relative_floor: float = 1.0


@dataclass(frozen=True)
class TestCase:
    """One declared test: a command template plus its reference files."""

    __test__ = False  # keep pytest from collecting this class

    number: int
    command: str
    expectations: Mapping[str, str] = field(default_factory=dict)
    predict_file: str = DEFAULT_PREDICT_FILE
    placeholder: str = "{VW}"

    def render(self, executable: str) -> str:
        return self.command.replace(self.placeholder, executable)

    def reference(self, kind: str) -> Optional[str]:
        return self.expectations.get(kind)

    def identifier(self) -> str:
        return f"test {self.number}"


@dataclass(frozen=True)
class ExecutionResult:
    """Raw outcome of running one test's command."""

    test_number: int
    command: str
    exit_status: int
    stdout_path: Path
    stderr_path: Path
    predict_path: Optional[Path] = None
    duration_s: float = 0.0
    cpu_s: float = 0.0
    wrapper: str = "plain"
    wrapper_log: Optional[Path] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0

    @property
    def timed_out(self) -> bool:
        return self.wrapper == "timeout" and self.exit_status == TIMEOUT_EXIT_CODE

    @property
    def instrumentation_error(self) -> bool:
        return self.wrapper == "valgrind" and self.exit_status == INSTRUMENTATION_EXIT_CODE

    def describe_failure(self) -> str:
        if self.timed_out:
            return "timed out"
        if self.instrumentation_error:
            where = f" (see {self.wrapper_log})" if self.wrapper_log else ""
            return f"instrumentation detected an error{where}"
        return f"exited with status {self.exit_status}"
