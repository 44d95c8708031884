"""Error taxonomy shared by projgraph components."""

from __future__ import annotations

from typing import Sequence


class ProjgraphError(RuntimeError):
    """Base class for errors raised by projgraph."""


class ConfigError(ProjgraphError):
    """Raised when the configuration file cannot be parsed."""


class ParseError(ProjgraphError):
    """Raised when a manifest is missing or is not well-formed markup."""

    def __init__(self, path: str, cause: object) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to parse {path}: {cause}")


class GraphError(ProjgraphError):
    """Integrity failure while assembling the reference graph."""


class CycleError(GraphError):
    """Raised when project references form a cycle."""

    def __init__(self, node: str, path: Sequence[str]) -> None:
        self.node = node
        self.path = list(path)
        chain = " -> ".join(self.path) if self.path else node
        super().__init__(f"Reference cycle detected at {node}: {chain}")


class DanglingReferenceError(GraphError):
    """Raised when a manifest references a project outside the known set."""

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"{source} references unknown project {target}")


class ManifestParseFailures(GraphError):
    """Raised when one or more manifests in a graph build could not be parsed."""

    def __init__(self, errors: Sequence[ParseError]) -> None:
        self.errors = list(errors)
        paths = ", ".join(error.path for error in self.errors)
        super().__init__(f"Unable to parse {len(self.errors)} manifest(s): {paths}")


class SyncError(ProjgraphError):
    """Raised when a generated file cannot be synchronized."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot update {path}: {reason}")


class MalformedSolutionError(SyncError):
    """Raised when an existing solution file does not follow the expected grammar."""


class ProjectNotFoundError(LookupError):
    """Raised when a project name or path does not match any known project."""


__all__ = [
    "ConfigError",
    "CycleError",
    "DanglingReferenceError",
    "GraphError",
    "MalformedSolutionError",
    "ManifestParseFailures",
    "ParseError",
    "ProjectNotFoundError",
    "ProjgraphError",
    "SyncError",
]
