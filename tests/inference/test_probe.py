"""Tests for reading project probes from disk."""

from __future__ import annotations

from projgraph.inference import infer_targets, probe_project
from tests._fixtures.workspace_builder import WorkspaceBuilder, csproj


def test_probe_reads_manifest_files_and_override(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/api/Api.csproj": csproj(sdk="Microsoft.NET.Sdk.Web"),
            "apps/api/Program.cs": "// entry\n",
            "apps/api/obj/project.assets.json": "{}",
            "apps/api/project.json": '{"name": "api", "targets": {}}',
        }
    )

    probe = probe_project(workspace_builder.path("apps/api"), workspace_builder.path())

    assert probe.project_root == "apps/api"
    assert probe.name == "api"
    assert probe.manifest is not None
    assert probe.manifest_path == "apps/api/Api.csproj"
    assert "Program.cs" in probe.files
    assert not any(path.startswith("obj/") for path in probe.files)
    assert probe.has_override
    assert probe.override_error is None


def test_probe_without_override_infers_from_manifest(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"apps/api/Api.csproj": csproj(sdk="Microsoft.NET.Sdk.Web")})

    probe = probe_project(workspace_builder.path("apps/api"), workspace_builder.path())
    targets = infer_targets(probe)

    assert not probe.has_override
    assert {"build", "lint", "swagger"} <= set(targets)
    assert "test" not in targets


def test_unreadable_override_is_recorded_not_raised(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "libs/core/Core.csproj": csproj(),
            "libs/core/project.json": "{ not json",
        }
    )

    probe = probe_project(workspace_builder.path("libs/core"), workspace_builder.path())

    assert probe.override is None
    assert probe.override_error is not None
    assert "build" in infer_targets(probe)


def test_invalid_override_shape_is_recorded(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "libs/core/Core.csproj": csproj(),
            "libs/core/project.json": '{"targets": {"build": {"options": "oops"}}}',
        }
    )

    probe = probe_project(workspace_builder.path("libs/core"), workspace_builder.path())

    assert probe.override is None
    assert probe.override_error is not None


def test_malformed_manifest_yields_no_targets(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"libs/bad/Bad.csproj": "<Project>"})

    probe = probe_project(workspace_builder.path("libs/bad"), workspace_builder.path())

    assert probe.manifest is None
    assert probe.manifest_error is not None
    assert len(infer_targets(probe)) == 0


def test_override_only_directory(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "libs/generated/api-swagger/project.json": """
            {
              "name": "api-swagger",
              "targets": {"codegen": {"executor": "custom:codegen", "options": {"lang": "ts"}}}
            }
            """,
        }
    )

    probe = probe_project(
        workspace_builder.path("libs/generated/api-swagger"), workspace_builder.path()
    )
    targets = infer_targets(probe)

    assert probe.manifest is None
    assert targets.names() == ["codegen"]
    assert targets["codegen"].to_dict() == {
        "executor": "custom:codegen",
        "options": {"lang": "ts"},
    }


def test_probing_twice_gives_identical_targets(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/api/Api.csproj": csproj(sdk="Microsoft.NET.Sdk.Web"),
            "apps/api/project.json": '{"targets": {"lint": {"executor": "custom:lint"}}}',
        }
    )

    first = infer_targets(probe_project(workspace_builder.path("apps/api"), workspace_builder.path()))
    second = infer_targets(probe_project(workspace_builder.path("apps/api"), workspace_builder.path()))

    assert first.to_json() == second.to_json()
    assert first["lint"].executor == "custom:lint"
