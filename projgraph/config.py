"""Configuration loading for projgraph (.projgraph.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".projgraph.yml"

_DEFAULT_GLOBAL_FILES = (
    "Directory.Build.props",
    "Directory.Build.targets",
    "Directory.Packages.props",
)


@dataclass
class WorkspaceConfig:
    """Workspace layout settings."""

    solution_file: Optional[str] = None
    override_file: str = "project.json"
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class InferenceConfig:
    """Defaults used when inferring targets."""

    output_dir: str = "dist"
    lint_ruleset: str = ".editorconfig"
    test_runner: str = "xunit"
    swagger_output_dir: str = "libs/generated"
    serve: bool = True
    package: bool = True


@dataclass
class AffectedConfig:
    """Affected-set calculation settings."""

    global_files: List[str] = field(default_factory=lambda: list(_DEFAULT_GLOBAL_FILES))


@dataclass
class ProjgraphConfig:
    """Represents the settings defined in .projgraph.yml."""

    root: Path
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    affected: AffectedConfig = field(default_factory=AffectedConfig)

    def default_solution_name(self) -> str:
        if self.workspace.solution_file:
            return self.workspace.solution_file
        return f"{self.root.name or 'workspace'}.sln"


def load_config(config_path: Path) -> ProjgraphConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjgraphConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    workspace = WorkspaceConfig()
    workspace_data = _as_dict(data.get("workspace"))
    if workspace_data:
        workspace.solution_file = _as_str(workspace_data.get("solution_file"))
        workspace.override_file = (
            _as_str(workspace_data.get("override_file")) or workspace.override_file
        )
        workspace.exclude_paths = _as_str_list(workspace_data.get("exclude_paths"))

    inference = InferenceConfig()
    inference_data = _as_dict(data.get("inference"))
    if inference_data:
        inference.output_dir = _as_str(inference_data.get("output_dir")) or inference.output_dir
        inference.lint_ruleset = (
            _as_str(inference_data.get("lint_ruleset")) or inference.lint_ruleset
        )
        inference.test_runner = (
            _as_str(inference_data.get("test_runner")) or inference.test_runner
        ).lower()
        inference.swagger_output_dir = (
            _as_str(inference_data.get("swagger_output_dir")) or inference.swagger_output_dir
        )
        serve = _as_bool(inference_data.get("serve"))
        if serve is not None:
            inference.serve = serve
        package = _as_bool(inference_data.get("package"))
        if package is not None:
            inference.package = package

    affected = AffectedConfig()
    affected_data = _as_dict(data.get("affected"))
    if affected_data and "global_files" in affected_data:
        affected.global_files = _as_str_list(affected_data.get("global_files"))

    return ProjgraphConfig(
        root=root,
        workspace=workspace,
        inference=inference,
        affected=affected,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


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
    "AffectedConfig",
    "CONFIG_FILENAME",
    "InferenceConfig",
    "ProjgraphConfig",
    "WorkspaceConfig",
    "load_config",
]
