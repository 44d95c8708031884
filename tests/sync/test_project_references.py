"""Tests for adding project references to manifests."""

from __future__ import annotations

import pytest

from projgraph.errors import SyncError
from projgraph.manifest import read_project_manifest
from projgraph.models import MutationResult
from projgraph.sync import ensure_project_reference
from tests._fixtures.workspace_builder import WorkspaceBuilder, csproj


def test_reference_joins_existing_item_group(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/App/App.csproj": csproj(references=["..\\..\\libs\\Core\\Core.csproj"]),
            "libs/Core/Core.csproj": csproj(),
            "libs/Lib/Lib.csproj": csproj(),
        }
    )
    manifest = workspace_builder.path("apps/App/App.csproj")

    result = ensure_project_reference(manifest, workspace_builder.path("libs/Lib/Lib.csproj"))

    assert result.status == MutationResult.APPENDED
    assert result.entry == "..\\..\\libs\\Lib\\Lib.csproj"
    text = manifest.read_text(encoding="utf-8")
    assert text.count("<ItemGroup>") == 1
    assert '    <ProjectReference Include="..\\..\\libs\\Lib\\Lib.csproj" />\n  </ItemGroup>' in text
    includes = [ref.include for ref in read_project_manifest(manifest).references]
    assert includes == ["..\\..\\libs\\Core\\Core.csproj", "..\\..\\libs\\Lib\\Lib.csproj"]


def test_reference_creates_item_group_when_missing(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/App/App.csproj": csproj(packages=["Serilog"]),
            "libs/Lib/Lib.csproj": csproj(),
        }
    )
    manifest = workspace_builder.path("apps/App/App.csproj")
    before = manifest.read_text(encoding="utf-8")

    ensure_project_reference(manifest, workspace_builder.path("libs/Lib/Lib.csproj"))

    text = manifest.read_text(encoding="utf-8")
    assert text.count("<ItemGroup>") == 2
    assert text.startswith(before[: before.index("</Project>")])
    assert text.rstrip().endswith("</Project>")
    parsed = read_project_manifest(manifest)
    assert [ref.normalized for ref in parsed.references] == ["../../libs/Lib/Lib.csproj"]
    assert parsed.package_names() == ["Serilog"]


def test_existing_reference_is_a_noop_regardless_of_separator(
    workspace_builder: WorkspaceBuilder,
) -> None:
    workspace_builder.write(
        {
            "apps/App/App.csproj": csproj(references=["../../libs/Lib/Lib.csproj"]),
            "libs/Lib/Lib.csproj": csproj(),
        }
    )
    manifest = workspace_builder.path("apps/App/App.csproj")
    before = manifest.read_bytes()

    result = ensure_project_reference(manifest, workspace_builder.path("libs/Lib/Lib.csproj"))

    assert result.status == MutationResult.NOOP
    assert manifest.read_bytes() == before


def test_adding_twice_only_writes_once(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/App/App.csproj": csproj(),
            "libs/Lib/Lib.csproj": csproj(),
        }
    )
    manifest = workspace_builder.path("apps/App/App.csproj")
    lib = workspace_builder.path("libs/Lib/Lib.csproj")

    first = ensure_project_reference(manifest, lib)
    second = ensure_project_reference(manifest, lib)

    assert first.changed
    assert not second.changed
    assert len(read_project_manifest(manifest).references) == 1


def test_malformed_manifest_raises_and_is_untouched(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            "apps/App/App.csproj": "<Project><ItemGroup>",
            "libs/Lib/Lib.csproj": csproj(),
        }
    )
    manifest = workspace_builder.path("apps/App/App.csproj")

    with pytest.raises(SyncError):
        ensure_project_reference(manifest, workspace_builder.path("libs/Lib/Lib.csproj"))

    assert manifest.read_text(encoding="utf-8") == "<Project><ItemGroup>"
