"""Synchronization of generated solution files and manifest references."""

from .references import ensure_project_reference, reference_include
from .solution import (
    SolutionEntry,
    SolutionFile,
    empty_solution_text,
    normalize_member_path,
    parse_solution,
    read_solution,
)
from .synchronizer import ensure_member, list_members, member_path, resolve_solution_path

__all__ = [
    "SolutionEntry",
    "SolutionFile",
    "empty_solution_text",
    "ensure_member",
    "ensure_project_reference",
    "list_members",
    "member_path",
    "normalize_member_path",
    "parse_solution",
    "read_solution",
    "reference_include",
    "resolve_solution_path",
]
