"""Exception types raised by vwtest.

Execution and comparison failures are not exceptions: they are recorded on
the per-test results. Only conditions that make the whole run meaningless
are raised.
"""
from __future__ import annotations

from typing import Optional


class VwTestError(Exception):
    """Base class for fatal harness errors."""


class SpecificationError(VwTestError):
    """A test block in the suite is malformed."""

    def __init__(self, test_number: Optional[int], message: str) -> None:
        self.test_number = test_number
        prefix = f"test {test_number}: " if test_number is not None else ""
        super().__init__(f"{prefix}{message}")


class SetupError(VwTestError):
    """The harness cannot start (no executable, invalid option values)."""


class ConfigError(SetupError):
    """The configuration file is unreadable or fails schema validation."""


class ReferenceUpdateError(VwTestError):
    """A reference file could not be demoted or replaced during overwrite."""
