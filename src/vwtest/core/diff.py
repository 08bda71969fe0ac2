"""Line alignment between a reference file and an actual output file.

Lines common to both files are suppressed; only differing regions are
returned, as side-by-side pairs. Inside a changed region the n-th removed
line is paired with the n-th added line and surplus lines are paired with an
empty side, the same shape ``diff --side-by-side --suppress-common-lines``
produces.
"""
from __future__ import annotations

import difflib
import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignedPair:
    """A reference line (left) aligned with an actual output line (right)."""

    left: str
    right: str
    left_lineno: Optional[int] = None
    right_lineno: Optional[int] = None

    def location(self) -> str:
        left = self.left_lineno if self.left_lineno is not None else "-"
        right = self.right_lineno if self.right_lineno is not None else "-"
        return f"line {left}/{right}"


def read_lines(path: Optional[Path]) -> List[str]:
    """Read a file as lines; a missing file reads as empty."""

    if path is None or not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        return handle.read().splitlines()


def _normalize(line: str) -> str:
    return " ".join(line.split())


def align(
    reference: Sequence[str], actual: Sequence[str], *, ignore_whitespace: bool = False
) -> List[AlignedPair]:
    if ignore_whitespace:
        left_keys = [_normalize(line) for line in reference]
        right_keys = [_normalize(line) for line in actual]
    else:
        left_keys = list(reference)
        right_keys = list(actual)
    matcher = difflib.SequenceMatcher(None, left_keys, right_keys, autojunk=False)
    pairs: List[AlignedPair] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        lefts = range(i1, i2)
        rights = range(j1, j2)
        for li, ri in itertools.zip_longest(lefts, rights):
            pairs.append(
                AlignedPair(
                    left=reference[li] if li is not None else "",
                    right=actual[ri] if ri is not None else "",
                    left_lineno=li + 1 if li is not None else None,
                    right_lineno=ri + 1 if ri is not None else None,
                )
            )
    return pairs


def align_files(reference: Path, actual: Path, *, ignore_whitespace: bool = False) -> List[AlignedPair]:
    pairs = align(read_lines(reference), read_lines(actual), ignore_whitespace=ignore_whitespace)
    logger.debug("%s vs %s: %d differing line pair(s)", reference, actual, len(pairs))
    return pairs


def render_unified(reference: Path, actual: Path, *, context: int = 3) -> str:
    """Full human-readable diff of the two files."""

    lines = difflib.unified_diff(
        read_lines(reference),
        read_lines(actual),
        fromfile=str(reference),
        tofile=str(actual),
        n=context,
        lineterm="",
    )
    return "\n".join(lines)
