"""Reference graph construction from project manifests."""

from __future__ import annotations

import os
import posixpath
from collections import Counter
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..errors import CycleError, DanglingReferenceError, ManifestParseFailures
from ..manifest.project import parse_manifests
from ..models import ProjectManifest, ProjectNode

Edge = Tuple[str, str]


def normalize_path(path: str, base: str | None = None) -> str:
    """Return an absolute, separator-agnostic POSIX path."""
    candidate = path.strip().replace("\\", "/")
    if base is not None and not posixpath.isabs(candidate):
        candidate = posixpath.join(base, candidate)
    elif not posixpath.isabs(candidate):
        candidate = posixpath.join(Path(os.getcwd()).as_posix(), candidate)
    return posixpath.normpath(candidate)


class ReferenceGraph:
    """Directed "depends on" graph keyed by manifest identity."""

    def __init__(self, root: str, nodes: Dict[str, ProjectNode], edges: Dict[str, Set[str]]) -> None:
        self.root = root
        self.nodes = nodes
        self.edges = edges
        self._reverse: Dict[str, Set[str]] = {node_id: set() for node_id in nodes}
        for source, targets in edges.items():
            for target in targets:
                self._reverse.setdefault(target, set()).add(source)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def dependencies(self, node_id: str) -> Set[str]:
        return set(self.edges.get(node_id, ()))

    def dependents(self, node_id: str) -> Set[str]:
        return set(self._reverse.get(node_id, ()))

    def edge_set(self) -> FrozenSet[Edge]:
        return frozenset(
            (source, target) for source, targets in self.edges.items() for target in targets
        )

    def find(self, key: str) -> Optional[ProjectNode]:
        """Look a node up by name, manifest path or project directory."""
        for node in self.nodes.values():
            if node.name == key:
                return node
        normalized = normalize_path(key, self.root)
        if normalized in self.nodes:
            return self.nodes[normalized]
        for node in self.nodes.values():
            if node.directory == normalized:
                return node
        return None

    def owner_of(self, path: str) -> Optional[ProjectNode]:
        """Return the project whose directory most specifically contains path."""
        normalized = normalize_path(path, self.root)
        owner: Optional[ProjectNode] = None
        for node in self.nodes.values():
            prefix = node.directory.rstrip("/") + "/"
            if normalized == node.directory or normalized.startswith(prefix):
                if owner is None or len(node.directory) > len(owner.directory):
                    owner = node
        return owner

    def relative(self, node_id: str) -> str:
        return posixpath.relpath(node_id, self.root)


class ReferenceGraphBuilder:
    """Builds a ReferenceGraph from a known set of manifest paths."""

    def __init__(self, root: str | Path | None = None) -> None:
        base = Path(root) if root is not None else Path(os.getcwd())
        self.root = normalize_path(Path(os.path.abspath(base)).as_posix())

    def build(self, project_paths: Iterable[str | Path]) -> ReferenceGraph:
        identities = {
            normalize_path(Path(path).as_posix(), self.root) for path in project_paths
        }
        manifests, errors = parse_manifests(identities)
        if errors:
            raise ManifestParseFailures(errors)

        nodes = _build_nodes(manifests)
        edges: Dict[str, Set[str]] = {node_id: set() for node_id in nodes}
        for node_id in sorted(manifests):
            manifest = manifests[node_id]
            directory = posixpath.dirname(node_id)
            for reference in manifest.references:
                target = normalize_path(reference.normalized, directory)
                if target not in nodes:
                    raise DanglingReferenceError(node_id, target)
                edges[node_id].add(target)

        _check_acyclic(edges)
        return ReferenceGraph(self.root, nodes, edges)


def build_graph(
    project_paths: Iterable[str | Path], *, root: str | Path | None = None
) -> ReferenceGraph:
    """Parse the given manifests and return their reference graph."""
    return ReferenceGraphBuilder(root).build(project_paths)


def _build_nodes(manifests: Dict[str, ProjectManifest]) -> Dict[str, ProjectNode]:
    per_directory = Counter(posixpath.dirname(node_id) for node_id in manifests)
    nodes: Dict[str, ProjectNode] = {}
    for node_id, manifest in sorted(manifests.items()):
        directory = posixpath.dirname(node_id)
        if per_directory[directory] > 1:
            name = posixpath.splitext(posixpath.basename(node_id))[0]
        else:
            name = posixpath.basename(directory)
        nodes[node_id] = ProjectNode(
            id=node_id, name=name, directory=directory, manifest=manifest
        )
    return nodes


def _check_acyclic(edges: Dict[str, Set[str]]) -> None:
    """Depth-first search with recursion-stack marking."""
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for start in sorted(edges):
        if start in visited:
            continue
        stack: List[Tuple[str, List[str]]] = [(start, sorted(edges.get(start, ())))]
        path: List[str] = [start]
        on_stack.add(start)
        visited.add(start)
        while stack:
            node, pending = stack[-1]
            if not pending:
                stack.pop()
                path.pop()
                on_stack.discard(node)
                continue
            target = pending.pop(0)
            if target in on_stack:
                cycle = path[path.index(target):] + [target]
                raise CycleError(target, cycle)
            if target in visited:
                continue
            visited.add(target)
            on_stack.add(target)
            path.append(target)
            stack.append((target, sorted(edges.get(target, ()))))


__all__ = ["ReferenceGraph", "ReferenceGraphBuilder", "build_graph", "normalize_path"]
