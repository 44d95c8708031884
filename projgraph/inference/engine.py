"""Target inference from manifest shape and directory layout."""

from __future__ import annotations

import posixpath
from typing import Dict, Optional

from ..config import InferenceConfig
from ..models import (
    KIND_EXECUTABLE,
    KIND_LIBRARY,
    KIND_TEST,
    KIND_WEBAPI,
    SOURCE_OVERRIDE,
    InferredTargetSet,
    ProjectManifest,
    TargetDefinition,
)
from .overrides import ProjectOverride
from .probe import ProjectProbe

BUILD = "build"
TEST = "test"
LINT = "lint"
SERVE = "serve"
PACKAGE = "package"
SWAGGER = "swagger"

_API_DESCRIPTION_FILES = ("swagger.json", "openapi.json")
_API_DESCRIPTION_PACKAGES = ("swashbuckle", "nswag", "microsoft.aspnetcore.openapi")


class TargetInferenceEngine:
    """Derives the operations available for a project.

    Precedence per operation: an override file definition wins, then the
    manifest-driven defaults. Inference is a pure function of the probe and
    the settings, so unchanged inputs always produce an equal target set.
    """

    def __init__(self, settings: InferenceConfig | None = None) -> None:
        self.settings = settings or InferenceConfig()

    def infer(self, probe: ProjectProbe) -> InferredTargetSet:
        targets: Dict[str, TargetDefinition] = {}

        if probe.override is not None:
            for operation in sorted(probe.override.targets):
                targets[operation] = self._from_override(probe.override, operation)

        if probe.manifest is not None:
            for operation, definition in self._inferred(probe, probe.manifest).items():
                targets.setdefault(operation, definition)

        return InferredTargetSet(targets)

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _from_override(override: ProjectOverride, operation: str) -> TargetDefinition:
        target = override.targets[operation]
        return TargetDefinition(
            executor=target.executor or "",
            options=dict(target.options),
            depends_on=tuple(str(item) for item in target.depends_on),
            outputs=tuple(target.outputs),
            source=SOURCE_OVERRIDE,
            raw=override.raw_target(operation),
        )

    def _inferred(
        self, probe: ProjectProbe, manifest: ProjectManifest
    ) -> Dict[str, TargetDefinition]:
        root = probe.project_root
        targets: Dict[str, TargetDefinition] = {BUILD: self._build(root)}

        if manifest.kind == KIND_TEST:
            targets[TEST] = self._test(root, manifest)

        if self.settings.serve and manifest.kind in {KIND_EXECUTABLE, KIND_WEBAPI}:
            targets[SERVE] = TargetDefinition(
                executor="dotnet:serve",
                options={"project": root, "configuration": "Debug", "watch": True},
                configurations={"production": {"configuration": "Release"}},
            )

        if self.settings.package and _is_packable(manifest):
            output = _join(self.settings.output_dir, root)
            targets[PACKAGE] = TargetDefinition(
                executor="dotnet:pack",
                options={"project": root, "configuration": "Release", "output": output},
                depends_on=(BUILD,),
                outputs=("{options.output}",),
            )

        if _has_api_description_marker(probe, manifest):
            targets[SWAGGER] = TargetDefinition(
                executor="dotnet:swagger",
                options={
                    "project": root,
                    "output": posixpath.join(
                        self.settings.swagger_output_dir,
                        f"{probe.name}-swagger",
                        "swagger.json",
                    ),
                },
                depends_on=(BUILD,),
                outputs=("{options.output}",),
            )

        targets[LINT] = TargetDefinition(
            executor="dotnet:format",
            options={
                "project": root,
                "ruleset": self.settings.lint_ruleset,
                "verifyNoChanges": True,
            },
            failure_mode="report",
        )
        return targets

    def _build(self, root: str) -> TargetDefinition:
        return TargetDefinition(
            executor="dotnet:build",
            options={
                "project": root,
                "configuration": "Debug",
                "output": _join(self.settings.output_dir, root),
                "noDependencies": True,
            },
            outputs=("{options.output}",),
            configurations={"production": {"configuration": "Release"}},
        )

    def _test(self, root: str, manifest: ProjectManifest) -> TargetDefinition:
        runner = manifest.test_runner or self.settings.test_runner
        return TargetDefinition(
            executor="dotnet:test",
            options={"project": root, "runner": runner, "watch": False},
            depends_on=(BUILD,),
        )


def infer_targets(
    probe: ProjectProbe, settings: Optional[InferenceConfig] = None
) -> InferredTargetSet:
    """Convenience wrapper around TargetInferenceEngine."""
    return TargetInferenceEngine(settings).infer(probe)


def _join(base: str, root: str) -> str:
    return posixpath.join(base, root).rstrip("/") if root else base


def _is_packable(manifest: ProjectManifest) -> bool:
    if manifest.kind != KIND_LIBRARY:
        return False
    return manifest.is_packable is not False


def _has_api_description_marker(probe: ProjectProbe, manifest: ProjectManifest) -> bool:
    if manifest.kind == KIND_WEBAPI:
        return True
    if probe.contains(*_API_DESCRIPTION_FILES):
        return True
    return any(
        name.lower().startswith(_API_DESCRIPTION_PACKAGES) for name in manifest.package_names()
    )


__all__ = [
    "BUILD",
    "LINT",
    "PACKAGE",
    "SERVE",
    "SWAGGER",
    "TEST",
    "TargetInferenceEngine",
    "infer_targets",
]
