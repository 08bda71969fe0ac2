"""Command wrappers applied to the executable under test."""
from __future__ import annotations

import shlex
import shutil
from pathlib import Path
from typing import List, Optional

from vwtest.config import RunConfig
from vwtest.core.models import INSTRUMENTATION_EXIT_CODE
from vwtest.errors import SetupError


class CommandWrapper:
    """Runs the executable as-is."""

    name: str = "plain"

    def argv(self, test_number: int) -> List[str]:
        return []

    def log_path(self, test_number: int) -> Optional[Path]:
        return None

    def wrap(self, executable: str, test_number: int) -> str:
        parts = [shlex.quote(part) for part in self.argv(test_number)]
        parts.append(shlex.quote(executable))
        return " ".join(parts)


class ValgrindWrapper(CommandWrapper):
    """Memory checking under valgrind; errors surface as exit status 100."""

    name = "valgrind"

    def __init__(self, scratch_dir: Path, *, tool: str = "valgrind") -> None:
        self._scratch_dir = Path(scratch_dir)
        self._tool = tool

    def log_path(self, test_number: int) -> Optional[Path]:
        return self._scratch_dir / f"{test_number}.valgrind-err"

    def argv(self, test_number: int) -> List[str]:
        return [
            self._tool,
            "--quiet",
            f"--error-exitcode={INSTRUMENTATION_EXIT_CODE}",
            "--track-origins=yes",
            "--leak-check=full",
            f"--log-file={self.log_path(test_number)}",
        ]


class TimeoutWrapper(CommandWrapper):
    """Wall-clock limit enforced by ``timeout``; expiry exits with 124."""

    name = "timeout"

    def __init__(self, seconds: float, *, tool: str = "timeout") -> None:
        self._seconds = seconds
        self._tool = tool

    def argv(self, test_number: int) -> List[str]:
        return [self._tool, f"{self._seconds:g}"]


def build_wrapper(config: RunConfig, scratch_dir: Path) -> CommandWrapper:
    """Pick the single wrapper the configuration asks for."""

    kind = config.wrapper_kind
    if kind == "valgrind":
        tool = shutil.which("valgrind")
        if tool is None:
            raise SetupError("--valgrind requested but valgrind is not on PATH")
        return ValgrindWrapper(scratch_dir, tool=tool)
    if kind == "timeout":
        tool = shutil.which("timeout")
        if tool is None:
            raise SetupError("--timeout requested but the timeout utility is not on PATH")
        return TimeoutWrapper(float(config.timeout), tool=tool)  # type: ignore[arg-type]
    return CommandWrapper()
