"""File-system probe feeding the target inference engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional

from ..errors import ParseError
from ..manifest.project import is_manifest_file, read_project_manifest
from ..models import ProjectManifest
from .overrides import ProjectOverride, load_override

_SKIPPED_DIRS = {"bin", "obj", ".vs", ".git", "node_modules", "TestResults"}


@dataclass(frozen=True)
class ProjectProbe:
    """Snapshot of everything inference looks at for one project."""

    project_root: str
    name: str
    files: FrozenSet[str] = frozenset()
    manifest: Optional[ProjectManifest] = None
    manifest_path: Optional[str] = None
    override: Optional[ProjectOverride] = None
    override_error: Optional[str] = None
    manifest_error: Optional[str] = None

    @property
    def has_override(self) -> bool:
        return self.override is not None

    def contains(self, *names: str) -> bool:
        lowered = {name.lower() for name in self.files}
        return any(name.lower() in lowered for name in names)


def probe_project(
    directory: str | Path,
    workspace_root: str | Path,
    *,
    override_file: str = "project.json",
    manifest_path: str | Path | None = None,
    name: str | None = None,
) -> ProjectProbe:
    """Read a project directory into a ProjectProbe."""
    workspace = Path(os.path.abspath(workspace_root))
    project_dir = Path(os.path.abspath(directory))
    project_root = _relative(project_dir, workspace)

    files = frozenset(_list_files(project_dir))

    manifest: Optional[ProjectManifest] = None
    manifest_error: Optional[str] = None
    chosen = Path(manifest_path) if manifest_path is not None else _first_manifest(project_dir)
    if chosen is not None:
        if not chosen.is_absolute():
            chosen = project_dir / chosen
        try:
            manifest = read_project_manifest(chosen)
        except ParseError as exc:
            manifest_error = str(exc)

    override: Optional[ProjectOverride] = None
    override_error: Optional[str] = None
    override_path = project_dir / override_file
    if override_path.is_file():
        try:
            override = load_override(override_path)
        except (OSError, ValueError) as exc:
            override_error = f"{override_path.name}: {exc}"

    project_name = name or (override.name if override is not None and override.name else None)
    return ProjectProbe(
        project_root=project_root,
        name=project_name or project_dir.name,
        files=files,
        manifest=manifest,
        manifest_path=_relative(chosen, workspace) if manifest is not None and chosen else None,
        override=override,
        override_error=override_error,
        manifest_error=manifest_error,
    )


def _relative(path: Path, root: Path) -> str:
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
    return "" if relative == "." else relative


def _list_files(project_dir: Path) -> List[str]:
    if not project_dir.is_dir():
        return []
    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(project_dir):
        dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_DIRS)
        current = Path(dirpath)
        for filename in filenames:
            found.append((current / filename).relative_to(project_dir).as_posix())
    return sorted(found)


def _first_manifest(project_dir: Path) -> Optional[Path]:
    if not project_dir.is_dir():
        return None
    candidates = sorted(
        entry for entry in project_dir.iterdir() if entry.is_file() and is_manifest_file(entry.name)
    )
    return candidates[0] if candidates else None


__all__ = ["ProjectProbe", "probe_project"]
