"""Core models and helpers exposed at the package level."""
from .comparator import NumericComparator, judge_line, judge_words
from .diff import AlignedPair, align, align_files
from .models import DEFAULT_PREDICT_FILE, PREDICT, STDERR, STDOUT, ExecutionResult, TestCase, Tolerance, Verdict
from .references import ReferenceResolver, promote

__all__ = [
    "NumericComparator",
    "judge_line",
    "judge_words",
    "AlignedPair",
    "align",
    "align_files",
    "DEFAULT_PREDICT_FILE",
    "PREDICT",
    "STDERR",
    "STDOUT",
    "ExecutionResult",
    "TestCase",
    "Tolerance",
    "Verdict",
    "ReferenceResolver",
    "promote",
]
