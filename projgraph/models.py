"""Core data models shared across projgraph components."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

KIND_EXECUTABLE = "executable"
KIND_LIBRARY = "library"
KIND_TEST = "test"
KIND_WEBAPI = "webapi"

SOURCE_INFERRED = "inferred"
SOURCE_OVERRIDE = "override"


@dataclass(frozen=True)
class ProjectReference:
    """A `<ProjectReference>` entry as declared in a manifest."""

    include: str

    @property
    def normalized(self) -> str:
        return self.include.strip().replace("\\", "/")


@dataclass(frozen=True)
class PackageReference:
    """An opaque package reference, passed through unmodified."""

    name: str
    version: Optional[str] = None


@dataclass
class ProjectManifest:
    """Typed view of a single project manifest."""

    path: str
    kind: str
    sdk: Optional[str] = None
    output_type: Optional[str] = None
    target_frameworks: List[str] = field(default_factory=list)
    is_test_project: bool = False
    is_packable: Optional[bool] = None
    references: List[ProjectReference] = field(default_factory=list)
    packages: List[PackageReference] = field(default_factory=list)
    test_runner: Optional[str] = None

    @property
    def directory(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def package_names(self) -> List[str]:
        return [package.name for package in self.packages]


@dataclass(frozen=True)
class ProjectNode:
    """Graph vertex: one manifest identity plus its resolved directory."""

    id: str
    name: str
    directory: str
    manifest: Optional[ProjectManifest] = field(default=None, compare=False, repr=False)


@dataclass
class TargetDefinition:
    """Executor identity plus default options for one operation."""

    executor: str
    options: Dict[str, Any] = field(default_factory=dict)
    depends_on: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    configurations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    failure_mode: str = "fatal"
    source: str = SOURCE_INFERRED
    raw: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        # Override targets are passed through exactly as written.
        if self.raw is not None:
            return copy.deepcopy(self.raw)
        data: Dict[str, Any] = {
            "executor": self.executor,
            "options": copy.deepcopy(self.options),
        }
        if self.depends_on:
            data["dependsOn"] = list(self.depends_on)
        if self.outputs:
            data["outputs"] = list(self.outputs)
        if self.configurations:
            data["configurations"] = copy.deepcopy(self.configurations)
        if self.failure_mode != "fatal":
            data["failureMode"] = self.failure_mode
        return data


class InferredTargetSet(Mapping[str, TargetDefinition]):
    """Mapping from operation name to its target definition."""

    def __init__(self, targets: Mapping[str, TargetDefinition] | None = None) -> None:
        self._targets: Dict[str, TargetDefinition] = dict(targets or {})

    def __getitem__(self, name: str) -> TargetDefinition:
        return self._targets[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InferredTargetSet):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    def __repr__(self) -> str:
        return f"InferredTargetSet({sorted(self._targets)})"

    def names(self) -> List[str]:
        return sorted(self._targets)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: self._targets[name].to_dict() for name in sorted(self._targets)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a synchronizer call."""

    CREATED = "created"
    APPENDED = "appended"
    NOOP = "noop"

    status: str
    path: str
    entry: str

    @property
    def changed(self) -> bool:
        return self.status != self.NOOP


__all__ = [
    "InferredTargetSet",
    "KIND_EXECUTABLE",
    "KIND_LIBRARY",
    "KIND_TEST",
    "KIND_WEBAPI",
    "MutationResult",
    "PackageReference",
    "ProjectManifest",
    "ProjectNode",
    "ProjectReference",
    "SOURCE_INFERRED",
    "SOURCE_OVERRIDE",
    "TargetDefinition",
]
