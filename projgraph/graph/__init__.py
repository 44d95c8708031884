"""Project reference graph and affected-set calculation."""

from .affected import affected, owning_projects
from .builder import ReferenceGraph, ReferenceGraphBuilder, build_graph, normalize_path

__all__ = [
    "ReferenceGraph",
    "ReferenceGraphBuilder",
    "affected",
    "build_graph",
    "normalize_path",
    "owning_projects",
]
