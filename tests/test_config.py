"""Tests for perlstrict.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from perlstrict.config import ConfigError, CoverageConfig, StrictConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, StrictConfig)
    assert config.root == tmp_path.resolve()
    assert config.perl == "perl"
    assert config.include_dirs == ["lib"]
    assert config.exclude == []
    assert config.test_syntax is True
    assert config.test_strict is True
    assert config.test_warnings is False
    assert config.can_use_warnings is None
    assert config.coverage == CoverageConfig(cover=None, threshold=50.0)


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".perlstrict.yml"
    config_file.write_text(
        """
perl: /opt/perl/bin/perl
include_dirs: [lib, blib/lib]
exclude:
  - "t/author-*.t"
  - inc/
test_syntax: false
test_warnings: yes
can_use_warnings: false
coverage:
  cover: /opt/perl/bin/cover
  threshold: "80%"
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.perl == "/opt/perl/bin/perl"
    assert config.include_dirs == ["lib", "blib/lib"]
    assert config.exclude == ["t/author-*.t", "inc/"]
    assert config.test_syntax is False
    assert config.test_strict is True
    assert config.test_warnings is True
    assert config.can_use_warnings is False
    assert config.coverage.cover == "/opt/perl/bin/cover"
    assert config.coverage.threshold == pytest.approx(80.0)


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".perlstrict.yml").write_text("perl: perl5.36\n", encoding="utf-8")

    config = load_config(
        tmp_path,
        environ={"PERLSTRICT_PERL": "/usr/local/bin/perl", "PERLSTRICT_COVER": "/usr/local/bin/cover"},
    )

    assert config.perl == "/usr/local/bin/perl"
    assert config.coverage.cover == "/usr/local/bin/cover"


def test_empty_include_dirs_are_respected(tmp_path: Path) -> None:
    (tmp_path / ".perlstrict.yml").write_text("include_dirs: []\n", encoding="utf-8")

    assert load_config(tmp_path, environ={}).include_dirs == []


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    (tmp_path / ".perlstrict.yml").write_text("perl: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    (tmp_path / ".perlstrict.yml").write_text("- perl\n- cover\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


@pytest.mark.parametrize("value", ["120", "-1", "lots"])
def test_bad_threshold_raises(tmp_path: Path, value: str) -> None:
    (tmp_path / ".perlstrict.yml").write_text(f"coverage:\n  threshold: {value}\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".perlstrict.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path, environ={}).perl == "perl"
