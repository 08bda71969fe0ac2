"""Reference file lookup and the overwrite (promote) operation."""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from vwtest.errors import ReferenceUpdateError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".prev"


class ReferenceResolver:
    """Maps logical reference names onto the files expected to match.

    Platforms listed in ``variant_platforms`` produce legitimately different
    numeric output; on those a ``<reference><variant_suffix>`` file, when
    present, is used instead of the shared reference.
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        variant_platforms: Sequence[str] = (),
        variant_suffix: str = "-alt",
        platform: Optional[str] = None,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._variant_platforms = tuple(variant_platforms)
        self._variant_suffix = variant_suffix
        self._platform = platform or sys.platform

    @property
    def uses_variants(self) -> bool:
        return any(self._platform.startswith(name) for name in self._variant_platforms)

    def resolve(self, name: str) -> Path:
        path = Path(name)
        if not path.is_absolute():
            path = self._base_dir / path
        if self.uses_variants:
            variant = path.with_name(path.name + self._variant_suffix)
            if variant.exists():
                logger.debug("Using platform variant %s for %s", variant, path)
                return variant
        return path


def backup_path(reference: Path) -> Path:
    return reference.with_name(reference.name + BACKUP_SUFFIX)


def promote(actual: Path, reference: Path) -> Optional[Path]:
    """Replace ``reference`` with ``actual``, keeping the old one as ``.prev``.

    Both steps are renames, so a failure leaves either the old or the new
    reference in place. Returns the backup path when one was written.
    """

    backup: Optional[Path] = None
    if reference.exists():
        backup = backup_path(reference)
        try:
            os.replace(reference, backup)
        except OSError as exc:
            raise ReferenceUpdateError(f"cannot back up {reference} to {backup}: {exc}") from exc
    else:
        reference.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.replace(actual, reference)
    except OSError as exc:
        raise ReferenceUpdateError(f"cannot move {actual} to {reference}: {exc}") from exc
    logger.info("Reference %s updated from %s", reference, actual)
    return backup
