"""Cross-run CPU time bookkeeping."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerfCheck:
    current: float
    previous: Optional[float]
    tolerance: float

    @property
    def ratio(self) -> Optional[float]:
        if not self.previous:
            return None
        return self.current / self.previous

    @property
    def regressed(self) -> bool:
        ratio = self.ratio
        return ratio is not None and ratio > self.tolerance


def load_cpu_time(path: Path) -> Optional[float]:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return float(data["cpu_seconds"])
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("Ignoring unreadable CPU time record %s: %s", path, exc)
        return None


def save_cpu_time(path: Path, seconds: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"cpu_seconds": seconds}, indent=2), encoding="utf-8")


def record_cpu_time(path: Path, seconds: float, tolerance: float) -> PerfCheck:
    """Store ``seconds`` as the latest run and compare with the previous one."""

    previous = load_cpu_time(path)
    save_cpu_time(path, seconds)
    check = PerfCheck(current=seconds, previous=previous, tolerance=tolerance)
    if check.regressed:
        logger.warning(
            "CPU time regression: %.2fs now vs %.2fs before (ratio %.3f > %.2f)",
            seconds,
            previous,
            check.ratio,
            tolerance,
        )
    return check
