"""Run configuration: defaults, YAML config files, and CLI overrides."""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-4
DEFAULT_PERF_TOLERANCE = 1.02
DEFAULT_PLACEHOLDER = "{VW}"

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "vwtest configuration",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "print_commands": {"type": "boolean"},
        "diff_always": {"type": "boolean"},
        "diff_on_significant": {"type": "boolean"},
        "fail_fast": {"type": "boolean"},
        "ignore_whitespace": {"type": "boolean"},
        "fuzzy": {"type": "boolean"},
        "epsilon": {"type": "number", "exclusiveMinimum": 0},
        "overwrite": {"type": "boolean"},
        "copy_failed": {"type": "boolean"},
        "failed_dir": {"type": "string", "minLength": 1},
        "verbosity": {"type": "integer", "minimum": 0},
        "valgrind": {"type": "boolean"},
        "timeout": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "placeholder": {"type": "string", "minLength": 1},
        "scratch_dir": {"type": "string", "minLength": 1},
        "state_file": {"type": "string", "minLength": 1},
        "perf_tolerance": {"type": "number", "minimum": 1.0},
        "variant_platforms": {"type": "array", "items": {"type": "string"}},
        "variant_suffix": {"type": "string", "minLength": 1},
        "base_dir": {"type": "string", "minLength": 1},
    },
}

_validator = Draft7Validator(CONFIG_SCHEMA)


@dataclass(frozen=True)
class RunConfig:
    """Explicit configuration handed to every component at construction."""

    print_commands: bool = False
    diff_always: bool = False
    diff_on_significant: bool = False
    fail_fast: bool = False
    ignore_whitespace: bool = False
    fuzzy: bool = False
    epsilon: float = DEFAULT_EPSILON
    overwrite: bool = False
    copy_failed: bool = False
    failed_dir: str = "failed-outputs"
    verbosity: int = 0
    valgrind: bool = False
    timeout: Optional[float] = None
    placeholder: str = DEFAULT_PLACEHOLDER
    scratch_dir: str = ".vwtest-scratch"
    state_file: str = ".vwtest-cpu-time"
    perf_tolerance: float = DEFAULT_PERF_TOLERANCE
    variant_platforms: Tuple[str, ...] = ("darwin", "win32", "cygwin")
    variant_suffix: str = "-alt"
    base_dir: Path = Path(".")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], base: Optional["RunConfig"] = None) -> "RunConfig":
        config = base or cls()
        if not data:
            return config
        values = dict(data)
        if "variant_platforms" in values:
            values["variant_platforms"] = tuple(str(item) for item in values["variant_platforms"])
        if "base_dir" in values:
            values["base_dir"] = Path(values["base_dir"])
        if "epsilon" in values:
            values["epsilon"] = float(values["epsilon"])
        if values.get("timeout") is not None:
            values["timeout"] = float(values["timeout"])
        return dataclasses.replace(config, **values)

    def with_overrides(self, **overrides: Any) -> "RunConfig":
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return dataclasses.replace(self, **values)

    @property
    def wrapper_kind(self) -> str:
        # Instrumentation wins when both are configured.
        if self.valgrind:
            return "valgrind"
        if self.timeout:
            return "timeout"
        return "plain"

    def resolve_path(self, value: str | Path) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.base_dir / path
        return path


def load_config(path: str | Path, base: Optional[RunConfig] = None) -> RunConfig:
    """Load and validate a YAML configuration file."""

    config_path = Path(path).expanduser()
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {config_path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError("Config file must contain a mapping at the top level")
    errors = sorted(_validator.iter_errors(raw), key=lambda e: [str(part) for part in e.path])
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ConfigError(f"Config schema validation failed: {messages}")
    logger.debug("Loaded config %s: %s", config_path, raw)
    config = RunConfig.from_mapping(raw, base)
    if "base_dir" in raw and not config.base_dir.is_absolute():
        config = dataclasses.replace(config, base_dir=(config_path.parent / config.base_dir).resolve())
    return config
