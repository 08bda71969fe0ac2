from pathlib import Path

import pytest

from vwtest.config import DEFAULT_EPSILON, RunConfig, load_config
from vwtest.errors import ConfigError


def test_defaults() -> None:
    config = RunConfig()
    assert config.epsilon == DEFAULT_EPSILON == 1e-4
    assert config.perf_tolerance == 1.02
    assert config.wrapper_kind == "plain"
    assert not config.fuzzy


def test_instrumentation_takes_precedence_over_timeout() -> None:
    assert RunConfig(timeout=5).wrapper_kind == "timeout"
    assert RunConfig(timeout=5, valgrind=True).wrapper_kind == "valgrind"


def test_with_overrides_skips_none() -> None:
    config = RunConfig(epsilon=0.5).with_overrides(epsilon=None, fuzzy=True)
    assert config.epsilon == 0.5
    assert config.fuzzy


def test_load_yaml_config(tmp_path: Path) -> None:
    path = tmp_path / "vwtest.yaml"
    path.write_text(
        "fuzzy: true\nepsilon: 0.001\nvariant_platforms: [darwin]\nbase_dir: suite\ntimeout: 30\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.fuzzy
    assert config.epsilon == 0.001
    assert config.variant_platforms == ("darwin",)
    assert config.base_dir == (tmp_path / "suite").resolve()
    assert config.timeout == 30.0
    assert config.resolve_path("ref/a.stderr") == config.base_dir / "ref" / "a.stderr"


def test_schema_errors_are_reported(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("epsilon: -1\nunknown_key: 3\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(path)
    message = str(excinfo.value)
    assert "epsilon" in message
    assert "unknown_key" in message


def test_non_mapping_config(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config(tmp_path / "absent.yaml")
