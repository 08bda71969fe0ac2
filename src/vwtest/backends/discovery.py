"""Locating the executable under test."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Sequence

from vwtest.errors import SetupError

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "vw"

SEARCH_DIRS = (
    "vowpalwabbit",
    "../vowpalwabbit",
    "build/vowpalwabbit",
    "../build/vowpalwabbit",
    ".",
)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def find_executable(
    explicit: Optional[str] = None,
    *,
    base_dir: Path = Path("."),
    name: str = EXECUTABLE_NAME,
    search_dirs: Sequence[str] = SEARCH_DIRS,
) -> Path:
    """Resolve the candidate executable.

    An explicit path must exist; otherwise the fixed directories (relative
    to ``base_dir``) are searched before ``PATH``.
    """

    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_absolute():
            path = (Path.cwd() / path)
        if not _is_executable(path):
            raise SetupError(f"{explicit}: not an executable file")
        return path.resolve()
    for directory in search_dirs:
        candidate = Path(base_dir) / directory / name
        if _is_executable(candidate):
            logger.info("Using %s", candidate)
            return candidate.resolve()
    found = shutil.which(name)
    if found:
        logger.info("Using %s from PATH", found)
        return Path(found)
    searched = ", ".join(str(Path(base_dir) / d) for d in search_dirs)
    raise SetupError(f"No '{name}' executable found (searched {searched} and PATH)")
