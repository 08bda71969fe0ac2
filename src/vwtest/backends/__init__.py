"""Execution of the program under test."""
from .discovery import SEARCH_DIRS, find_executable
from .executor import Executor
from .wrappers import CommandWrapper, TimeoutWrapper, ValgrindWrapper, build_wrapper

__all__ = [
    "SEARCH_DIRS",
    "find_executable",
    "Executor",
    "CommandWrapper",
    "TimeoutWrapper",
    "ValgrindWrapper",
    "build_wrapper",
]
