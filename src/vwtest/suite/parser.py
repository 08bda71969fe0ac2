"""Parser for the line-oriented test specification format.

A suite is a sequence of blocks separated by blank lines::

    # Test 1: plain training run
    {VW} -d train-sets/0001.dat -f models/0001.model \\
        --passes 8 -c
        train-sets/ref/0001.stdout
        train-sets/ref/0001.stderr

The line holding the executable placeholder is the command (a trailing
backslash continues it). Reference lines are bare paths recognized by their
``.stdout``, ``.stderr`` or ``.predict`` suffix.
"""
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from vwtest.core.models import DEFAULT_PREDICT_FILE, EXPECTATION_KINDS, PREDICT, STDERR, TestCase
from vwtest.errors import SpecificationError

logger = logging.getLogger(__name__)

_PREDICT_FLAGS = ("-p", "--predictions")


def predict_file_from_command(command: str) -> Optional[str]:
    """Return the path following ``-p`` in ``command``, if any."""

    try:
        tokens = shlex.split(command)
    except ValueError:
        tokens = command.split()
    for index, token in enumerate(tokens):
        if token in _PREDICT_FLAGS and index + 1 < len(tokens):
            return tokens[index + 1]
        for flag in _PREDICT_FLAGS:
            if flag.startswith("--") and token.startswith(flag + "="):
                return token[len(flag) + 1:]
    return None


def _expectation_kind(text: str) -> Optional[str]:
    for kind in EXPECTATION_KINDS:
        if text.endswith("." + kind):
            return kind
    return None


class _Block:
    def __init__(self, number: int) -> None:
        self.number = number
        self.command: Optional[str] = None
        self.expectations: Dict[str, str] = {}
        self.continued = False
        self.touched = False

    def finish(self, placeholder: str) -> TestCase:
        if self.command is None:
            raise SpecificationError(self.number, "test block has no command line")
        if STDERR not in self.expectations:
            raise SpecificationError(self.number, "test block has no .stderr reference")
        predict_file = predict_file_from_command(self.command) or DEFAULT_PREDICT_FILE
        return TestCase(
            number=self.number,
            command=self.command,
            expectations=dict(self.expectations),
            predict_file=predict_file,
            placeholder=placeholder,
        )


def iter_tests(lines: Iterable[str], *, placeholder: str = "{VW}") -> Iterator[TestCase]:
    """Yield test cases in declaration order.

    Exhaustion of the generator is the end-of-tests signal. A malformed
    block raises :class:`SpecificationError`.
    """

    number = 1
    block = _Block(number)
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        stripped = line.strip()
        if not stripped:
            # a blank line ends the block even inside a continued command
            block.continued = False
            if block.touched:
                yield block.finish(placeholder)
                number += 1
                block = _Block(number)
            continue
        if stripped.startswith("#"):
            continue
        if block.continued:
            continued = stripped.endswith("\\")
            text = stripped[:-1].rstrip() if continued else stripped
            block.command = f"{block.command} {text}".strip() if text else block.command
            block.continued = continued
            continue
        if placeholder in stripped:
            if block.command is not None:
                logger.warning("Line %d: second command in test %d replaces the first", lineno, number)
            continued = stripped.endswith("\\")
            block.command = stripped[:-1].rstrip() if continued else stripped
            block.continued = continued
            block.touched = True
            continue
        kind = _expectation_kind(stripped)
        if kind is not None:
            block.expectations[kind] = stripped
            block.touched = True
            continue
        logger.warning("Line %d: unrecognized specification line in test %d: %r", lineno, number, stripped)
    if block.touched:
        yield block.finish(placeholder)


def parse_suite(text: str, *, placeholder: str = "{VW}") -> List[TestCase]:
    return list(iter_tests(text.splitlines(), placeholder=placeholder))


def load_suite(path: str | Path, *, placeholder: str = "{VW}") -> List[TestCase]:
    """Parse a suite from an external specification file."""

    suite_path = Path(path).expanduser()
    with suite_path.open("r", encoding="utf-8") as handle:
        cases = list(iter_tests(handle, placeholder=placeholder))
    logger.info("Loaded %d test(s) from %s", len(cases), suite_path)
    return cases


def select_tests(cases: Iterable[TestCase], numbers: Iterable[int]) -> List[TestCase]:
    """Restrict ``cases`` to ``numbers``, in ascending order.

    Numbers with no matching test are reported and ignored.
    """

    wanted = sorted(set(numbers))
    by_number = {case.number: case for case in cases}
    selected: List[TestCase] = []
    for number in wanted:
        case = by_number.get(number)
        if case is None:
            logger.warning("Test %d does not exist in this suite, skipping", number)
            continue
        selected.append(case)
    return selected
