"""Typed project manifests built from parsed manifest trees."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import ParseError
from ..models import (
    KIND_EXECUTABLE,
    KIND_LIBRARY,
    KIND_TEST,
    KIND_WEBAPI,
    PackageReference,
    ProjectManifest,
    ProjectReference,
)
from .parser import ManifestTree, parse, parse_string

MANIFEST_SUFFIXES = (".csproj", ".fsproj", ".vbproj")

_WEB_SDKS = {"microsoft.net.sdk.web"}
_EXECUTABLE_OUTPUT_TYPES = {"exe", "winexe"}
_TEST_SDK_PACKAGES = {"microsoft.net.test.sdk"}

# Ordered: the first matching prefix decides the runner.
_TEST_RUNNER_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("xunit", "xunit"),
    ("nunit", "nunit"),
    ("mstest", "mstest"),
)


def is_manifest_file(name: str) -> bool:
    return name.lower().endswith(MANIFEST_SUFFIXES)


def read_project_manifest(path: str | Path) -> ProjectManifest:
    """Parse a manifest file into a ProjectManifest."""
    tree = parse(path)
    return project_manifest_from_tree(tree, _identity(path))


def project_manifest_from_string(text: str, path: str) -> ProjectManifest:
    """Build a ProjectManifest from in-memory markup."""
    return project_manifest_from_tree(parse_string(text, path), path)


def parse_manifests(
    paths: Iterable[str | Path],
) -> Tuple[Dict[str, ProjectManifest], List[ParseError]]:
    """Parse a batch of manifests; failures are collected, not raised."""
    manifests: Dict[str, ProjectManifest] = {}
    errors: List[ParseError] = []
    for path in sorted({_identity(path) for path in paths}):
        try:
            manifests[path] = read_project_manifest(path)
        except ParseError as exc:
            errors.append(exc)
    return manifests, errors


def project_manifest_from_tree(tree: ManifestTree, path: str) -> ProjectManifest:
    properties = _read_properties(tree)
    references = _read_project_references(tree)
    packages = _read_package_references(tree)
    sdk = tree.attribute("Sdk")

    output_type = properties.get("OutputType")
    declared_test = _as_bool(properties.get("IsTestProject"))
    is_test_project = (
        declared_test if declared_test is not None else _references_test_packages(packages)
    )
    test_runner = _detect_test_runner(packages)

    frameworks_value = properties.get("TargetFrameworks") or properties.get("TargetFramework")
    target_frameworks = [
        framework.strip()
        for framework in (frameworks_value or "").split(";")
        if framework.strip()
    ]

    return ProjectManifest(
        path=path,
        kind=_resolve_kind(sdk, output_type, is_test_project),
        sdk=sdk,
        output_type=output_type,
        target_frameworks=target_frameworks,
        is_test_project=is_test_project,
        is_packable=_as_bool(properties.get("IsPackable")),
        references=references,
        packages=packages,
        test_runner=test_runner if is_test_project else None,
    )


def _identity(path: str | Path) -> str:
    return Path(os.path.abspath(path)).as_posix()


def _read_properties(tree: ManifestTree) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for group in tree.children_named("PropertyGroup"):
        for child in group.children():
            if child.text is not None:
                properties[child.tag] = child.text.strip()
    return properties


def _read_project_references(tree: ManifestTree) -> List[ProjectReference]:
    references: List[ProjectReference] = []
    for group in tree.children_named("ItemGroup"):
        for element in group.children_named("ProjectReference"):
            include = element.attribute("Include")
            if include:
                references.append(ProjectReference(include=include))
    return references


def _read_package_references(tree: ManifestTree) -> List[PackageReference]:
    packages: List[PackageReference] = []
    for group in tree.children_named("ItemGroup"):
        for element in group.children_named("PackageReference"):
            name = element.attribute("Include") or element.attribute("Update")
            if not name:
                continue
            version = element.attribute("Version")
            if version is None:
                version_node = element.child_named("Version")
                if version_node is not None and version_node.text:
                    version = version_node.text.strip()
            packages.append(PackageReference(name=name, version=version))
    return packages


def _references_test_packages(packages: Sequence[PackageReference]) -> bool:
    for package in packages:
        lower = package.name.lower()
        if lower in _TEST_SDK_PACKAGES:
            return True
        if any(lower.startswith(prefix) for prefix, _ in _TEST_RUNNER_PREFIXES):
            return True
    return False


def _detect_test_runner(packages: Sequence[PackageReference]) -> Optional[str]:
    names = [package.name.lower() for package in packages]
    for prefix, runner in _TEST_RUNNER_PREFIXES:
        if any(name.startswith(prefix) for name in names):
            return runner
    return None


def _resolve_kind(sdk: Optional[str], output_type: Optional[str], is_test: bool) -> str:
    if is_test:
        return KIND_TEST
    if sdk and sdk.strip().lower() in _WEB_SDKS:
        return KIND_WEBAPI
    if output_type and output_type.strip().lower() in _EXECUTABLE_OUTPUT_TYPES:
        return KIND_EXECUTABLE
    return KIND_LIBRARY


def _as_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


__all__ = [
    "MANIFEST_SUFFIXES",
    "is_manifest_file",
    "parse_manifests",
    "project_manifest_from_string",
    "project_manifest_from_tree",
    "read_project_manifest",
]
