"""Runs a test's command and captures its outputs."""
from __future__ import annotations

import logging
import resource
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional

from vwtest.config import RunConfig
from vwtest.core.models import ExecutionResult, PREDICT, TestCase

from .wrappers import CommandWrapper, build_wrapper

logger = logging.getLogger(__name__)


def _children_cpu_seconds() -> float:
    usage = resource.getrusage(resource.RUSAGE_CHILDREN)
    return usage.ru_utime + usage.ru_stime


class Executor:
    """Executes test commands one at a time inside the base directory."""

    def __init__(self, config: RunConfig, *, wrapper: Optional[CommandWrapper] = None) -> None:
        self._config = config
        self._scratch_dir = config.resolve_path(config.scratch_dir)
        self._wrapper = wrapper if wrapper is not None else build_wrapper(config, self._scratch_dir)

    @property
    def wrapper(self) -> CommandWrapper:
        return self._wrapper

    @property
    def scratch_dir(self) -> Path:
        return self._scratch_dir

    def prepare(self) -> None:
        """Clear scratch outputs left by a previous run."""

        if self._scratch_dir.exists():
            shutil.rmtree(self._scratch_dir)
        self._scratch_dir.mkdir(parents=True, exist_ok=True)

    def command_for(self, case: TestCase, executable: str | Path) -> str:
        return case.render(self._wrapper.wrap(str(executable), case.number))

    def predict_path(self, case: TestCase) -> Path:
        return self._config.resolve_path(case.predict_file)

    def run(self, case: TestCase, command: str) -> ExecutionResult:
        self._scratch_dir.mkdir(parents=True, exist_ok=True)
        stdout_path = self._scratch_dir / f"{case.number}.stdout"
        stderr_path = self._scratch_dir / f"{case.number}.stderr"
        predict_path = self.predict_path(case) if case.reference(PREDICT) else None
        if predict_path is not None and predict_path.exists():
            predict_path.unlink()
        logger.debug("test %d: %s", case.number, command)
        cpu_before = _children_cpu_seconds()
        start = time.perf_counter()
        with stdout_path.open("wb") as out, stderr_path.open("wb") as err:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=str(self._config.base_dir),
                stdout=out,
                stderr=err,
                check=False,
            )
        duration = time.perf_counter() - start
        cpu = _children_cpu_seconds() - cpu_before
        status = proc.returncode
        if status < 0:
            # killed by a signal: report it the way a shell would
            status = 128 - status
        logger.debug("test %d: exit %d in %.2fs (cpu %.2fs)", case.number, status, duration, cpu)
        return ExecutionResult(
            test_number=case.number,
            command=command,
            exit_status=status,
            stdout_path=stdout_path,
            stderr_path=stderr_path,
            predict_path=predict_path,
            duration_s=duration,
            cpu_s=cpu,
            wrapper=self._wrapper.name,
            wrapper_log=self._wrapper.log_path(case.number),
        )
