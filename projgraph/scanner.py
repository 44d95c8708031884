"""Workspace scanning for project directories."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import ProjgraphConfig, load_config
from .logging import get_logger
from .manifest.project import is_manifest_file

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".vs",
    ".vscode",
    ".idea",
    ".nx",
    "bin",
    "obj",
    "dist",
    "node_modules",
    "TestResults",
    "__pycache__",
}

logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .projgraph.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


@dataclass
class ProjectLocation:
    """A directory that holds a project manifest or an override file."""

    directory: Path
    relative: str
    manifests: List[Path] = field(default_factory=list)
    has_override: bool = False

    @property
    def name(self) -> str:
        return self.directory.name


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class WorkspaceScanner:
    """Walks the workspace to find project directories."""

    def __init__(self, config: ProjgraphConfig | None = None) -> None:
        self._config = config

    def scan(self, root: str | Path) -> List[ProjectLocation]:
        """Return every project directory below root, sorted by relative path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Workspace path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Workspace path is not a directory: {root}")

        config = self._config or load_config(root_path)
        rules = _parse_gitignore(root_path / ".gitignore")
        for pattern in config.workspace.exclude_paths:
            rule = _build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)

        override_file = config.workspace.override_file
        locations: List[ProjectLocation] = []
        for directory, filenames in self._iter_directories(root_path, rules):
            manifests = sorted(directory / name for name in filenames if is_manifest_file(name))
            has_override = override_file in filenames and directory != root_path
            if not manifests and not has_override:
                continue
            relative = directory.relative_to(root_path).as_posix()
            locations.append(
                ProjectLocation(
                    directory=directory,
                    relative="" if relative == "." else relative,
                    manifests=manifests,
                    has_override=has_override,
                )
            )

        logger.debug("Discovered %d project directories under %s", len(locations), root_path)
        return sorted(locations, key=lambda location: location.relative)

    @staticmethod
    def _iter_directories(
        root: Path, rules: Sequence[IgnoreRule]
    ) -> Iterator[tuple[Path, List[str]]]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

            visible = []
            for filename in filenames:
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if not _should_ignore(rel_path, False, rules):
                    visible.append(filename)
            yield current_dir, visible


__all__ = ["IgnoreRule", "ProjectLocation", "WorkspaceScanner"]
