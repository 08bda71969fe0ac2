import os
from pathlib import Path

import pytest

from vwtest.core.references import ReferenceResolver, backup_path, promote
from vwtest.errors import ReferenceUpdateError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_resolver_prefers_variant_on_listed_platform(tmp_path: Path) -> None:
    _write(tmp_path / "ref" / "t.stderr", "shared")
    _write(tmp_path / "ref" / "t.stderr-alt", "variant")
    resolver = ReferenceResolver(tmp_path, variant_platforms=("darwin",), variant_suffix="-alt", platform="darwin")
    assert resolver.resolve("ref/t.stderr") == tmp_path / "ref" / "t.stderr-alt"


def test_resolver_falls_back_without_variant(tmp_path: Path) -> None:
    _write(tmp_path / "ref" / "t.stderr", "shared")
    resolver = ReferenceResolver(tmp_path, variant_platforms=("darwin",), platform="darwin")
    assert resolver.resolve("ref/t.stderr") == tmp_path / "ref" / "t.stderr"


def test_resolver_ignores_variant_on_other_platforms(tmp_path: Path) -> None:
    _write(tmp_path / "ref" / "t.stderr-alt", "variant")
    resolver = ReferenceResolver(tmp_path, variant_platforms=("darwin",), platform="linux")
    assert resolver.resolve("ref/t.stderr") == tmp_path / "ref" / "t.stderr"


def test_promote_keeps_backup(tmp_path: Path) -> None:
    reference = _write(tmp_path / "ref" / "t.stderr", "old\n")
    actual = _write(tmp_path / "out" / "1.stderr", "new\n")
    backup = promote(actual, reference)
    assert backup == backup_path(reference)
    assert reference.read_text(encoding="utf-8") == "new\n"
    assert backup.read_text(encoding="utf-8") == "old\n"
    assert not actual.exists()


def test_promote_creates_missing_reference(tmp_path: Path) -> None:
    actual = _write(tmp_path / "out" / "1.stdout", "data\n")
    reference = tmp_path / "new" / "dir" / "t.stdout"
    assert promote(actual, reference) is None
    assert reference.read_text(encoding="utf-8") == "data\n"


def test_promote_backup_failure_is_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    reference = _write(tmp_path / "t.stderr", "old\n")
    actual = _write(tmp_path / "1.stderr", "new\n")

    def fail(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr(os, "replace", fail)
    with pytest.raises(ReferenceUpdateError, match="cannot back up"):
        promote(actual, reference)
    assert reference.read_text(encoding="utf-8") == "old\n"
