"""Numeric tolerant re-judgement of differing output lines."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .diff import AlignedPair
from .models import Tolerance, Verdict

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")


def is_number(word: str) -> bool:
    return bool(_NUMBER_RE.match(word))


@dataclass(frozen=True)
class LineJudgement:
    """Verdict for a single aligned pair of lines."""

    verdict: Verdict
    position: Optional[int] = None
    left_word: Optional[str] = None
    right_word: Optional[str] = None
    reason: str = ""


@dataclass(frozen=True)
class PairsJudgement:
    """Verdict across every differing pair of a file comparison."""

    verdict: Verdict
    pair: Optional[AlignedPair] = None
    line: Optional[LineJudgement] = None
    cosmetic_pairs: int = 0

    @property
    def reason(self) -> str:
        if self.line is None:
            return ""
        return self.line.reason


def judge_words(
    left: Sequence[str], right: Sequence[str], tolerance: Tolerance = Tolerance()
) -> LineJudgement:
    """Compare two tokenized lines word by word.

    A position is tolerated when ``|l - r| <= epsilon`` or, for ``|r| > 1``,
    when ``|l / r - 1| <= epsilon``. The switch looks at the right-hand value
    only.
    """

    if len(left) != len(right):
        return LineJudgement(
            Verdict.SIGNIFICANT,
            reason=f"word count differs ({len(left)} vs {len(right)})",
        )
    differing = [index for index, (lw, rw) in enumerate(zip(left, right)) if lw != rw]
    if not differing:
        return LineJudgement(Verdict.MATCH)

    first_text: Optional[int] = None
    numeric: List[int] = []
    for index in differing:
        if is_number(left[index]) and is_number(right[index]):
            numeric.append(index)
        elif first_text is None:
            first_text = index

    first_numeric: Optional[int] = None
    if numeric:
        lhs = np.array([float(left[i]) for i in numeric], dtype=np.float64)
        rhs = np.array([float(right[i]) for i in numeric], dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            delta = np.abs(lhs - rhs)
            relative = np.abs(lhs / rhs - 1.0)
        tolerated = (delta <= tolerance.epsilon) | (
            (np.abs(rhs) > tolerance.relative_floor) & (relative <= tolerance.epsilon)
        )
        if not bool(np.all(tolerated)):
            first_numeric = numeric[int(np.argmin(tolerated))]

    candidates = [pos for pos in (first_text, first_numeric) if pos is not None]
    if not candidates:
        return LineJudgement(Verdict.COSMETIC)
    position = min(candidates)
    lw, rw = left[position], right[position]
    if position == first_text:
        reason = f"non-numeric mismatch at word {position + 1}: {lw!r} vs {rw!r}"
    else:
        reason = _numeric_reason(position, lw, rw, tolerance)
    return LineJudgement(Verdict.SIGNIFICANT, position, lw, rw, reason)


def _numeric_reason(position: int, left: str, right: str, tolerance: Tolerance) -> str:
    lv, rv = float(left), float(right)
    delta = abs(lv - rv)
    if abs(rv) <= tolerance.relative_floor:
        return (
            f"word {position + 1}: {left} vs {right} delta={delta:.3e} "
            f"exceeds epsilon={tolerance.epsilon:g}"
        )
    return (
        f"word {position + 1}: {left} vs {right} "
        f"relative delta={abs(lv / rv - 1.0):.3e} exceeds epsilon={tolerance.epsilon:g}"
    )


def judge_line(left: str, right: str, tolerance: Tolerance = Tolerance()) -> LineJudgement:
    return judge_words(left.split(), right.split(), tolerance)


class NumericComparator:
    """Re-judges structural differences with a numeric tolerance."""

    def __init__(self, tolerance: Tolerance = Tolerance()) -> None:
        self._tolerance = tolerance

    @property
    def tolerance(self) -> Tolerance:
        return self._tolerance

    def judge(self, pairs: Iterable[AlignedPair]) -> PairsJudgement:
        cosmetic = 0
        seen = False
        for pair in pairs:
            seen = True
            line = judge_line(pair.left, pair.right, self._tolerance)
            if line.verdict is Verdict.SIGNIFICANT:
                logger.debug("Significant difference at %s: %s", pair.location(), line.reason)
                return PairsJudgement(Verdict.SIGNIFICANT, pair=pair, line=line, cosmetic_pairs=cosmetic)
            cosmetic += 1
        if not seen:
            return PairsJudgement(Verdict.MATCH)
        return PairsJudgement(Verdict.COSMETIC, cosmetic_pairs=cosmetic)
