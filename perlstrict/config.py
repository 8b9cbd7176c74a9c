"""Configuration loading for perlstrict (.perlstrict.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".perlstrict.yml"
DEFAULT_PERL = "perl"
DEFAULT_COVERAGE_THRESHOLD = 50.0
DEFAULT_INCLUDE_DIRS = ("lib",)

ENV_PERL = "PERLSTRICT_PERL"
ENV_COVER = "PERLSTRICT_COVER"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CoverageConfig:
    """Settings for the Devel::Cover sweep."""

    cover: Optional[str] = None
    threshold: float = DEFAULT_COVERAGE_THRESHOLD


@dataclass
class StrictConfig:
    """Represents the settings defined in .perlstrict.yml."""

    root: Path
    perl: str = DEFAULT_PERL
    include_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_DIRS))
    exclude: List[str] = field(default_factory=list)
    test_syntax: bool = True
    test_strict: bool = True
    test_warnings: bool = False
    can_use_warnings: Optional[bool] = None
    coverage: CoverageConfig = field(default_factory=CoverageConfig)


def load_config(config_path: Path, environ: Mapping[str, str] | None = None) -> StrictConfig:
    """Load configuration from disk, applying environment overrides."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = StrictConfig(root=root)

    perl = _as_str(data.get("perl"))
    if perl:
        config.perl = perl
    if "include_dirs" in data:
        config.include_dirs = _as_str_list(data.get("include_dirs"))
    config.exclude = _as_str_list(data.get("exclude"))

    for key in ("test_syntax", "test_strict", "test_warnings"):
        value = _as_bool(data.get(key))
        if value is not None:
            setattr(config, key, value)
    config.can_use_warnings = _as_bool(data.get("can_use_warnings"))

    coverage_data = _as_dict(data.get("coverage"))
    if coverage_data:
        config.coverage.cover = _as_str(coverage_data.get("cover"))
        if coverage_data.get("threshold") is not None:
            threshold = _as_float(coverage_data.get("threshold"))
            if threshold is None:
                raise ConfigError("coverage.threshold must be a number")
            config.coverage.threshold = check_threshold(threshold)

    if env.get(ENV_PERL):
        config.perl = env[ENV_PERL]
    if env.get(ENV_COVER):
        config.coverage.cover = env[ENV_COVER]

    return config


def check_threshold(value: float) -> float:
    """Return *value* if it is a usable coverage percentage."""
    if value < 0 or value > 100:
        raise ConfigError(f"coverage threshold must be between 0 and 100, got {value}")
    return value


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%"))
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "CoverageConfig",
    "StrictConfig",
    "check_threshold",
    "load_config",
]
