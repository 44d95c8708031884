"""Manifest parsing: XML trees and typed project manifests."""

from .parser import ElementNode, ManifestTree, parse, parse_string
from .project import (
    MANIFEST_SUFFIXES,
    is_manifest_file,
    parse_manifests,
    project_manifest_from_string,
    read_project_manifest,
)

__all__ = [
    "ElementNode",
    "MANIFEST_SUFFIXES",
    "ManifestTree",
    "is_manifest_file",
    "parse",
    "parse_manifests",
    "parse_string",
    "project_manifest_from_string",
    "read_project_manifest",
]
