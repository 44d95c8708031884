"""Affected-set calculation over a reference graph."""

from __future__ import annotations

import posixpath
from collections import deque
from fnmatch import fnmatchcase
from typing import Iterable, Sequence, Set

from ..models import ProjectNode
from .builder import ReferenceGraph, normalize_path


def owning_projects(graph: ReferenceGraph, changed_paths: Iterable[str]) -> Set[str]:
    """Map changed paths to the identities of the projects that contain them."""
    owners: Set[str] = set()
    for path in changed_paths:
        owner = graph.owner_of(path)
        if owner is not None:
            owners.add(owner.id)
    return owners


def affected(
    graph: ReferenceGraph,
    changed_paths: Iterable[str],
    *,
    global_files: Sequence[str] = (),
) -> Set[ProjectNode]:
    """Return changed projects plus every project that transitively depends on them."""
    paths = [path for path in changed_paths if path and path.strip()]
    if global_files and any(
        graph.owner_of(path) is None and _is_global(graph, path, global_files)
        for path in paths
    ):
        return set(graph.nodes.values())

    seeds = owning_projects(graph, paths)
    result: Set[str] = set(seeds)
    queue = deque(sorted(seeds))
    while queue:
        node_id = queue.popleft()
        for dependent in sorted(graph.dependents(node_id)):
            if dependent not in result:
                result.add(dependent)
                queue.append(dependent)
    return {graph.nodes[node_id] for node_id in result}


def _is_global(graph: ReferenceGraph, path: str, patterns: Sequence[str]) -> bool:
    normalized = normalize_path(path, graph.root)
    if normalized != graph.root and not normalized.startswith(graph.root.rstrip("/") + "/"):
        return False
    relative = posixpath.relpath(normalized, graph.root)
    name = posixpath.basename(relative)
    for pattern in patterns:
        if "/" in pattern:
            if fnmatchcase(relative, pattern):
                return True
        elif fnmatchcase(name, pattern):
            return True
    return False


__all__ = ["affected", "owning_projects"]
