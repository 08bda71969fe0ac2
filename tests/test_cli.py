from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from vwtest import __version__
from vwtest.cli.main import cli


def _suite(tmp_path: Path) -> Path:
    ref = tmp_path / "ref" / "1.stderr"
    ref.parent.mkdir(parents=True, exist_ok=True)
    ref.write_text("average loss = 0.30000\n", encoding="utf-8")
    suite = tmp_path / "suite.txt"
    suite.write_text(
        "# Test 1\n{VW}\n  ref/1.stderr\n\n# Test 2\n{VW} --loss 0.30002\n  ref/1.stderr\n",
        encoding="utf-8",
    )
    return suite


def test_cli_help_short_flag() -> None:
    result = CliRunner().invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "run" in result.output


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_list_embedded_suite() -> None:
    result = CliRunner().invoke(cli, ["list", "2"])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("2: {VW} -k -t -d train-sets/0001.dat")
    assert "predict: pred-sets/ref/0001.predict" in result.output


def test_cli_run_exact_then_fuzzy(tmp_path: Path, fake_vw: Path) -> None:
    suite = _suite(tmp_path)
    base = ["run", "--suite", str(suite), "--base-dir", str(tmp_path), "--vw", str(fake_vw), "--no-color"]
    exact = CliRunner().invoke(cli, base)
    assert exact.exit_code == 1, exact.output
    assert "test 2: stderr mismatch" in exact.output

    fuzzy = CliRunner().invoke(cli, base + ["-f", "--epsilon", "1e-3"])
    assert fuzzy.exit_code == 0, fuzzy.output
    assert "minor precision difference ignored" in fuzzy.output


def test_cli_run_selected_tests_json(tmp_path: Path, fake_vw: Path) -> None:
    suite = _suite(tmp_path)
    report = tmp_path / "report.json"
    result = CliRunner().invoke(
        cli,
        [
            "run", "1", "--suite", str(suite), "--base-dir", str(tmp_path), "--vw", str(fake_vw),
            "--report", "json", "--report-path", str(report),
        ],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(report.read_text(encoding="utf-8"))
    assert [test["number"] for test in payload["tests"]] == [1]


def test_cli_json_report_still_names_failures(tmp_path: Path, fake_vw: Path) -> None:
    suite = _suite(tmp_path)
    report = tmp_path / "r.json"
    result = CliRunner().invoke(
        cli,
        [
            "run", "--suite", str(suite), "--base-dir", str(tmp_path), "--vw", str(fake_vw),
            "--report", "json", "--report-path", str(report),
        ],
    )
    assert result.exit_code == 1, result.output
    assert "test 2: stderr mismatch: 1 differing line(s), first at line 1/1" in result.output
    assert "test 1:" not in result.output
    assert report.exists()


def test_cli_fail_fast_exit_status(tmp_path: Path, fake_vw: Path) -> None:
    suite = tmp_path / "suite.txt"
    suite.write_text("{VW} --exit 5\n  ref/1.stderr\n\n{VW}\n  ref/1.stderr\n", encoding="utf-8")
    result = CliRunner().invoke(
        cli, ["run", "-e", "--suite", str(suite), "--base-dir", str(tmp_path), "--vw", str(fake_vw), "--no-color"]
    )
    assert result.exit_code == 5, result.output
    assert "[2/2]" not in result.output


def test_cli_config_file(tmp_path: Path, fake_vw: Path) -> None:
    suite = _suite(tmp_path)
    config = tmp_path / "vwtest.yaml"
    config.write_text("fuzzy: true\nepsilon: 0.001\n", encoding="utf-8")
    result = CliRunner().invoke(
        cli,
        ["run", "--config", str(config), "--suite", str(suite), "--base-dir", str(tmp_path), "--vw", str(fake_vw), "--no-color"],
    )
    assert result.exit_code == 0, result.output


def test_cli_setup_errors_exit_one(tmp_path: Path, fake_vw: Path) -> None:
    suite = _suite(tmp_path)
    common = ["--suite", str(suite), "--base-dir", str(tmp_path), "--no-color"]
    runner = CliRunner()

    bad_epsilon = runner.invoke(cli, ["run", "--vw", str(fake_vw), "-E", "tiny"] + common)
    assert bad_epsilon.exit_code == 1
    assert "Invalid epsilon" in bad_epsilon.output

    bad_test = runner.invoke(cli, ["run", "x7", "--vw", str(fake_vw)] + common)
    assert bad_test.exit_code == 1
    assert "Invalid test number" in bad_test.output

    no_vw = runner.invoke(cli, ["run", "--vw", str(tmp_path / "nope")] + common)
    assert no_vw.exit_code == 1
    assert "not an executable" in no_vw.output


def test_cli_specification_error(tmp_path: Path, fake_vw: Path) -> None:
    suite = tmp_path / "broken.txt"
    suite.write_text("{VW} -t\n  ref/1.stdout\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", "--suite", str(suite), "--vw", str(fake_vw)])
    assert result.exit_code == 1
    assert "test 1: test block has no .stderr reference" in result.output
