"""Test suite parsing and the embedded default suite."""

from .embedded import DEFAULT_SUITE, default_suite
from .parser import iter_tests, load_suite, parse_suite, predict_file_from_command, select_tests

__all__ = [
    "DEFAULT_SUITE",
    "default_suite",
    "iter_tests",
    "load_suite",
    "parse_suite",
    "predict_file_from_command",
    "select_tests",
]
