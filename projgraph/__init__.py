"""Dependency graph, target inference and solution sync for compiled projects."""

from .errors import (
    ConfigError,
    CycleError,
    DanglingReferenceError,
    GraphError,
    MalformedSolutionError,
    ManifestParseFailures,
    ParseError,
    ProjectNotFoundError,
    ProjgraphError,
    SyncError,
)
from .graph import ReferenceGraph, affected, build_graph
from .inference import ProjectProbe, TargetInferenceEngine, infer_targets, probe_project
from .manifest import parse, read_project_manifest
from .models import InferredTargetSet, MutationResult, ProjectManifest, ProjectNode, TargetDefinition
from .sync import ensure_member, ensure_project_reference
from .workspace import PathLocks, Workspace

__all__ = [
    "ConfigError",
    "CycleError",
    "DanglingReferenceError",
    "GraphError",
    "InferredTargetSet",
    "MalformedSolutionError",
    "ManifestParseFailures",
    "MutationResult",
    "ParseError",
    "PathLocks",
    "ProjectManifest",
    "ProjectNode",
    "ProjectNotFoundError",
    "ProjectProbe",
    "ProjgraphError",
    "ReferenceGraph",
    "SyncError",
    "TargetDefinition",
    "TargetInferenceEngine",
    "Workspace",
    "affected",
    "build_graph",
    "ensure_member",
    "ensure_project_reference",
    "infer_targets",
    "parse",
    "probe_project",
    "read_project_manifest",
]
