"""Tests for the solution file synchronizer."""

from __future__ import annotations

import os
import textwrap
from pathlib import Path

import pytest

from projgraph.errors import MalformedSolutionError, SyncError
from projgraph.models import MutationResult
from projgraph.sync import (
    ensure_member,
    list_members,
    parse_solution,
    read_solution,
    resolve_solution_path,
)

EXISTING = textwrap.dedent(
    """\
    Microsoft Visual Studio Solution File, Format Version 12.00
    # Visual Studio Version 17
    VisualStudioVersion = 17.0.31903.59
    MinimumVisualStudioVersion = 10.0.40219.1
    Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Legacy",   "src\\Legacy\\Legacy.csproj", "{11111111-1111-1111-1111-111111111111}"
    EndProject
    Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "Solution Items", "Solution Items", "{22222222-2222-2222-2222-222222222222}"
    \tProjectSection(SolutionItems) = preProject
    \t\tREADME.md = README.md
    \tEndProjectSection
    EndProject
    Global
    \tGlobalSection(SolutionConfigurationPlatforms) = preSolution
    \t\tDebug|Any CPU = Debug|Any CPU
    \tEndGlobalSection
    \tGlobalSection(ProjectConfigurationPlatforms) = postSolution
    \t\t{11111111-1111-1111-1111-111111111111}.Debug|Any CPU.ActiveCfg = Debug|Any CPU
    \tEndGlobalSection
    EndGlobal
    """
)


def test_missing_solution_is_created_with_one_member(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"

    result = ensure_member(solution, "App/App.proj", "App")

    assert result.status == MutationResult.CREATED
    members = list_members(solution)
    assert [member.name for member in members] == ["App"]
    assert members[0].normalized_path == "App/App.proj"
    text = solution.read_text(encoding="utf-8")
    assert text.startswith("Microsoft Visual Studio Solution File, Format Version 12.00\n")
    assert text.rstrip().endswith("EndGlobal")
    assert "GlobalSection(ProjectConfigurationPlatforms) = postSolution" in text


def test_second_call_is_a_noop(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"
    ensure_member(solution, "apps/App/App.csproj", "App")
    before = solution.read_bytes()

    result = ensure_member(solution, "apps/App/App.csproj", "App")

    assert result.status == MutationResult.NOOP
    assert not result.changed
    assert solution.read_bytes() == before
    assert len(list_members(solution)) == 1


def test_noop_is_separator_agnostic(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"
    solution.write_text(EXISTING, encoding="utf-8")

    result = ensure_member(solution, "src/Legacy/./Legacy.csproj", "Legacy")

    assert result.status == MutationResult.NOOP
    assert solution.read_text(encoding="utf-8") == EXISTING


def test_append_preserves_existing_text(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"
    solution.write_text(EXISTING, encoding="utf-8")

    result = ensure_member(solution, tmp_path / "apps" / "Api" / "Api.csproj", "Api")

    assert result.status == MutationResult.APPENDED
    assert result.entry == "apps\\Api\\Api.csproj"
    updated = solution.read_text(encoding="utf-8")
    original_lines = EXISTING.splitlines()
    updated_lines = updated.splitlines()
    # Every original line survives, in order.
    iterator = iter(updated_lines)
    assert all(any(line == candidate for candidate in iterator) for line in original_lines)

    parsed = read_solution(solution)
    assert [entry.name for entry in parsed.entries] == ["Legacy", "Solution Items", "Api"]
    api = parsed.entries[-1]
    assert api.path == "apps\\Api\\Api.csproj"
    assert f"\t\t{api.guid}.Debug|Any CPU.ActiveCfg = Debug|Any CPU" in updated_lines
    assert updated_lines.index("EndGlobal") == len(updated_lines) - 1


def test_successive_projects_are_appended_in_order(tmp_path: Path) -> None:
    solution = tmp_path / "proj.sln"

    ensure_member(solution, "apps/app1/App1.csproj", "App1")
    ensure_member(solution, "apps/app2/App2.csproj", "App2")
    ensure_member(solution, "apps/app1-test/App1.Test.csproj", "App1.Test")
    ensure_member(solution, "apps/app2/App2.csproj", "App2")

    assert [member.name for member in list_members(solution)] == ["App1", "App2", "App1.Test"]


def test_crlf_line_endings_are_kept(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"
    solution.write_bytes(("\ufeff" + EXISTING.replace("\n", "\r\n")).encode("utf-8"))

    ensure_member(solution, "apps/Api/Api.csproj", "Api")

    raw = solution.read_bytes()
    assert raw.startswith("\ufeff".encode("utf-8"))
    text = raw.decode("utf-8")
    assert "\n" not in text.replace("\r\n", "")


def test_entry_identifiers_are_deterministic(tmp_path: Path) -> None:
    first = tmp_path / "one.sln"
    second = tmp_path / "two.sln"

    ensure_member(first, "apps/App/App.csproj", "App")
    ensure_member(second, "apps/App/App.csproj", "App")

    assert first.read_bytes() == second.read_bytes()


@pytest.mark.parametrize(
    "content",
    [
        "not a solution\n",
        EXISTING.replace("EndProject\nProject", "Project", 1),
        EXISTING.replace("EndGlobal\n", ""),
        EXISTING.replace('Project("{FAE04EC0', 'Project("FAE04EC0'),
    ],
)
def test_malformed_solution_is_left_untouched(tmp_path: Path, content: str) -> None:
    solution = tmp_path / "Broken.sln"
    solution.write_text(content, encoding="utf-8")

    with pytest.raises(MalformedSolutionError) as excinfo:
        ensure_member(solution, "apps/App/App.csproj", "App")

    assert isinstance(excinfo.value, SyncError)
    assert solution.read_text(encoding="utf-8") == content
    assert sorted(path.name for path in tmp_path.iterdir()) == ["Broken.sln"]


def test_parse_solution_reports_members_and_platforms() -> None:
    parsed = parse_solution(EXISTING)

    assert [entry.name for entry in parsed.members()] == ["Legacy"]
    assert parsed.find("src/Legacy/Legacy.csproj") is not None
    assert parsed.platforms() == ["Debug|Any CPU"]
    assert parsed.render() == EXISTING


def test_resolve_solution_path(tmp_path: Path) -> None:
    assert resolve_solution_path(tmp_path, None) is None
    assert resolve_solution_path(tmp_path, False) is None
    assert resolve_solution_path(tmp_path, True, "proj.workspace.sln") == tmp_path / "proj.workspace.sln"
    assert resolve_solution_path(tmp_path, "MyCompany.sln") == tmp_path / "MyCompany.sln"
    assert resolve_solution_path(tmp_path, "MyCompany") == tmp_path / "MyCompany.sln"


def test_created_solution_is_world_readable(tmp_path: Path) -> None:
    solution = tmp_path / "Workspace.sln"
    previous = os.umask(0o022)
    try:
        ensure_member(solution, "App/App.proj", "App")
    finally:
        os.umask(previous)

    assert solution.stat().st_mode & 0o777 == 0o644
