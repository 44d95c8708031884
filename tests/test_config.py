"""Tests for projgraph.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from projgraph.config import (
    AffectedConfig,
    InferenceConfig,
    ProjgraphConfig,
    WorkspaceConfig,
    load_config,
)
from projgraph.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ProjgraphConfig)
    assert config.root == tmp_path.resolve()
    assert config.workspace == WorkspaceConfig()
    assert config.inference == InferenceConfig()
    assert config.affected == AffectedConfig()
    assert "Directory.Build.props" in config.affected.global_files
    assert config.default_solution_name() == f"{tmp_path.resolve().name}.sln"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".projgraph.yml"
    config_file.write_text(
        """
workspace:
  solution_file: "MyCompany.sln"
  override_file: "targets.json"
  exclude_paths:
    - "samples/"
    - "legacy/**"
inference:
  output_dir: "out"
  lint_ruleset: "eng/.editorconfig"
  test_runner: "NUnit"
  swagger_output_dir: "libs/api"
  serve: false
  package: "no"
affected:
  global_files:
    - "global.json"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.workspace.solution_file == "MyCompany.sln"
    assert config.workspace.override_file == "targets.json"
    assert config.workspace.exclude_paths == ["samples/", "legacy/**"]
    assert config.default_solution_name() == "MyCompany.sln"

    assert config.inference.output_dir == "out"
    assert config.inference.lint_ruleset == "eng/.editorconfig"
    assert config.inference.test_runner == "nunit"
    assert config.inference.swagger_output_dir == "libs/api"
    assert config.inference.serve is False
    assert config.inference.package is False

    assert config.affected.global_files == ["global.json"]


def test_load_config_accepts_any_path_inside_root(tmp_path: Path) -> None:
    (tmp_path / ".projgraph.yml").write_text("inference:\n  output_dir: build\n", encoding="utf-8")

    config = load_config(tmp_path / "anything.txt")

    assert config.inference.output_dir == "build"


def test_empty_global_files_disables_global_invalidation(tmp_path: Path) -> None:
    (tmp_path / ".projgraph.yml").write_text("affected:\n  global_files: []\n", encoding="utf-8")

    assert load_config(tmp_path).affected.global_files == []


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".projgraph.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.inference == InferenceConfig()


@pytest.mark.parametrize("content", ["workspace: [unclosed\n", "- just\n- a list\n"])
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".projgraph.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
