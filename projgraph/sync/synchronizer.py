"""Keeps a generated solution file listing its member projects.

The synchronizer performs an unlocked read-modify-write. Callers that may
add members to the same solution path concurrently must serialize those
calls themselves (see ``projgraph.workspace.PathLocks``).
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import List, Optional, Union

from ..atomic import atomic_write
from ..models import MutationResult
from .solution import (
    SolutionEntry,
    empty_solution_text,
    entry_guid,
    normalize_member_path,
    parse_solution,
    read_solution,
    type_guid_for,
)


def member_path(aggregate_path: Path, project_manifest_path: Union[str, Path]) -> str:
    """Return the manifest path relative to the solution directory, using `/`."""
    raw = str(project_manifest_path).replace("\\", "/")
    if not posixpath.isabs(raw):
        return normalize_member_path(raw)
    solution_dir = Path(os.path.abspath(aggregate_path)).parent.as_posix()
    return normalize_member_path(posixpath.relpath(posixpath.normpath(raw), solution_dir))


def ensure_member(
    aggregate_path: Union[str, Path],
    project_manifest_path: Union[str, Path],
    display_name: str,
) -> MutationResult:
    """Make sure the solution lists the given project manifest exactly once.

    Relative manifest paths are taken relative to the solution directory.
    A second call with the same arguments returns a NOOP result and leaves the
    file untouched.
    """
    solution_path = Path(aggregate_path)
    relative = member_path(solution_path, project_manifest_path)
    written_path = relative.replace("/", "\\")

    if solution_path.exists():
        solution = read_solution(solution_path)
        status = MutationResult.APPENDED
    else:
        solution = parse_solution(empty_solution_text(), solution_path.as_posix())
        status = MutationResult.CREATED

    if solution.find(relative) is not None:
        return MutationResult(status=MutationResult.NOOP, path=str(solution_path), entry=written_path)

    updated = solution.with_entry(
        name=display_name,
        path=written_path,
        type_guid=type_guid_for(relative),
        guid=entry_guid(relative),
    )
    atomic_write(solution_path, updated.encode("utf-8"))
    return MutationResult(status=status, path=str(solution_path), entry=written_path)


def list_members(aggregate_path: Union[str, Path]) -> List[SolutionEntry]:
    """Return the project entries of a solution, or an empty list when absent."""
    solution_path = Path(aggregate_path)
    if not solution_path.exists():
        return []
    return read_solution(solution_path).members()


def resolve_solution_path(
    root: Union[str, Path],
    option: Union[bool, str, None],
    default_name: Optional[str] = None,
) -> Optional[Path]:
    """Translate a solution option into a path.

    ``None`` or ``False`` means no solution, ``True`` selects the workspace
    default and a string names a solution relative to the workspace root.
    """
    workspace = Path(root)
    if option is None or option is False:
        return None
    if option is True:
        name = default_name or f"{workspace.resolve().name or 'workspace'}.sln"
        return workspace / name
    if isinstance(option, str) and option.strip():
        candidate = Path(option.strip())
        if candidate.suffix.lower() != ".sln":
            candidate = candidate.with_name(candidate.name + ".sln")
        return candidate if candidate.is_absolute() else workspace / candidate
    return None


__all__ = ["ensure_member", "list_members", "member_path", "resolve_solution_path"]
