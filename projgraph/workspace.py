"""Caller-side facade tying discovery, graph, inference and sync together."""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

from .config import ProjgraphConfig, load_config
from .errors import ProjectNotFoundError
from .graph import ReferenceGraph, affected, build_graph
from .inference import ProjectProbe, TargetInferenceEngine, probe_project
from .logging import get_logger
from .models import InferredTargetSet, MutationResult, ProjectNode
from .scanner import ProjectLocation, WorkspaceScanner
from .sync import ensure_member, ensure_project_reference, resolve_solution_path

logger = get_logger("workspace")


class PathLocks:
    """Hands out one lock per normalized file path.

    The synchronizer itself does not lock; writers to the same solution or
    manifest go through the lock returned for that path.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, path: Union[str, Path]) -> threading.Lock:
        key = Path(os.path.abspath(path)).as_posix()
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, path: Union[str, Path]) -> Iterator[None]:
        with self.lock_for(path):
            yield


class Workspace:
    """High-level operations over one workspace root."""

    def __init__(
        self,
        root: Union[str, Path],
        config: ProjgraphConfig | None = None,
        *,
        locks: PathLocks | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.config = config or load_config(self.root)
        self.locks = locks or PathLocks()
        self._scanner = WorkspaceScanner(self.config)
        self._engine = TargetInferenceEngine(self.config.inference)

    def projects(self) -> List[ProjectLocation]:
        return self._scanner.scan(self.root)

    def manifest_paths(self) -> List[Path]:
        return [manifest for location in self.projects() for manifest in location.manifests]

    def graph(self) -> ReferenceGraph:
        """Rebuild the reference graph from the manifests currently on disk."""
        paths = self.manifest_paths()
        graph = build_graph(paths, root=self.root)
        logger.debug(
            "Built reference graph with %d projects and %d edges",
            len(graph),
            len(graph.edge_set()),
        )
        return graph

    def probe(self, name: str) -> ProjectProbe:
        location = self._location(name)
        manifest: Optional[Path] = None
        project_name: Optional[str] = None
        if location.manifests:
            manifest = _select_manifest(location, name)
            # Directories holding several projects name each one after its manifest.
            if len(location.manifests) > 1:
                project_name = manifest.stem
        return probe_project(
            location.directory,
            self.root,
            override_file=self.config.workspace.override_file,
            manifest_path=manifest,
            name=project_name,
        )

    def targets(self, name: str) -> InferredTargetSet:
        probe = self.probe(name)
        if probe.override_error:
            logger.warning("Ignoring unreadable override for %s: %s", name, probe.override_error)
        if probe.manifest_error:
            logger.warning("Ignoring unreadable manifest for %s: %s", name, probe.manifest_error)
        targets = self._engine.infer(probe)
        logger.debug("Targets for %s: %s", name, ", ".join(targets.names()) or "(none)")
        return targets

    def affected(self, changed_paths: Iterable[str]) -> Set[ProjectNode]:
        paths = list(changed_paths)
        result = affected(
            self.graph(), paths, global_files=self.config.affected.global_files
        )
        logger.info("%d changed file(s) affect %d project(s)", len(paths), len(result))
        return result

    def add_to_solution(
        self, name: str, solution: Union[bool, str, None] = True
    ) -> Optional[MutationResult]:
        """Add a project's manifest to the selected solution file."""
        solution_path = resolve_solution_path(
            self.root, solution, self.config.default_solution_name()
        )
        if solution_path is None:
            return None
        manifest = self._manifest_for(name)
        with self.locks.hold(solution_path):
            result = ensure_member(solution_path, manifest.resolve(), manifest.stem)
        if result.changed:
            logger.info("Project %s added to %s", result.entry, solution_path.name)
        else:
            logger.debug("%s already lists %s", solution_path.name, result.entry)
        return result

    def add_reference(self, name: str, reference: str) -> MutationResult:
        """Make project `name` reference project `reference`."""
        source = self._manifest_for(name)
        target = self._manifest_for(reference)
        with self.locks.hold(source):
            result = ensure_project_reference(source, target)
        if result.changed:
            logger.info("Reference %s added to the project", result.entry)
        return result

    # ------------------------------------------------------------------
    # Internals

    def _location(self, key: str) -> ProjectLocation:
        normalized = key.replace("\\", "/").strip("/")
        for location in self.projects():
            if location.name == key or location.relative == normalized:
                return location
            if any(manifest.stem == key for manifest in location.manifests):
                return location
        raise ProjectNotFoundError(f"No project named {key!r} under {self.root}")

    def _manifest_for(self, key: str) -> Path:
        location = self._location(key)
        if not location.manifests:
            raise ProjectNotFoundError(f"Project {key!r} has no manifest")
        return _select_manifest(location, key)


def _select_manifest(location: ProjectLocation, key: str) -> Path:
    """Pick the manifest whose stem matches key, else the location's first one."""
    for manifest in location.manifests:
        if manifest.stem == key:
            return manifest
    return location.manifests[0]


__all__ = ["PathLocks", "Workspace"]
