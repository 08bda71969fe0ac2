from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from vwtest.config import RunConfig

# Stand-in for the program under test: writes a progress line to stderr,
# optional stdout and prediction files, and exits with a chosen status.
FAKE_VW = """\
import sys

args = sys.argv[1:]


def option(name, default=None):
    if name in args:
        return args[args.index(name) + 1]
    return default


sys.stderr.write("average loss = %s\\n" % option("--loss", "0.30000"))
if "--stdout" in args:
    sys.stdout.write(option("--stdout") + "\\n")
if "-p" in args:
    with open(option("-p"), "w") as handle:
        handle.write(option("--pred", "0.5") + "\\n")
sys.exit(int(option("--exit", "0")))
"""


@pytest.fixture()
def fake_vw(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "vw"
    path.parent.mkdir()
    path.write_text(f"#!{sys.executable}\n" + FAKE_VW, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def config(tmp_path: Path) -> RunConfig:
    return RunConfig(base_dir=tmp_path)


@pytest.fixture(autouse=True)
def _isolate_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
