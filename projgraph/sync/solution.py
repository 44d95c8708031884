"""Solution file grammar: parsing, rendering and entry generation."""

from __future__ import annotations

import posixpath
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment

from ..errors import MalformedSolutionError

HEADER_PREFIX = "Microsoft Visual Studio Solution File"
FOLDER_TYPE_GUID = "{2150E333-8FDC-42A3-9474-1A3956D46DE8}"
CSHARP_TYPE_GUID = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"

_TYPE_GUID_BY_SUFFIX = {
    ".csproj": CSHARP_TYPE_GUID,
    ".fsproj": "{F2A71F9B-5D33-465A-A702-920D77279786}",
    ".vbproj": "{F184B08F-C81C-45F6-A57F-5ABD9991F28F}",
}

_DEFAULT_PLATFORMS = ("Debug|Any CPU", "Release|Any CPU")
_ENTRY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "projgraph/solution-entry")

_PROJECT_RE = re.compile(
    r'^Project\("(?P<type>\{[^}]*\})"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*'
    r'"(?P<path>[^"]*)"\s*,\s*"(?P<guid>\{[^}]*\})"\s*$'
)
_SECTION_RE = re.compile(r"^\s*GlobalSection\((?P<name>[^)]+)\)")
_PLATFORM_RE = re.compile(r"^\s*(?P<key>[^=]+?)\s*=\s*(?P<value>.+?)\s*$")

_ENV = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)

_EMPTY_SOLUTION = _ENV.from_string(
    "{{ header }}\n"
    "# Visual Studio Version 17\n"
    "VisualStudioVersion = 17.0.31903.59\n"
    "MinimumVisualStudioVersion = 10.0.40219.1\n"
    "Global\n"
    "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution\n"
    "{% for platform in platforms %}\n"
    "\t\t{{ platform }} = {{ platform }}\n"
    "{% endfor %}\n"
    "\tEndGlobalSection\n"
    "\tGlobalSection(SolutionProperties) = preSolution\n"
    "\t\tHideSolutionNode = FALSE\n"
    "\tEndGlobalSection\n"
    "EndGlobal\n"
)

_ENTRY = _ENV.from_string(
    'Project("{{ type_guid }}") = "{{ name }}", "{{ path }}", "{{ guid }}"\n'
    "EndProject\n"
)

_ENTRY_CONFIGURATIONS = _ENV.from_string(
    "{% for platform in platforms %}\n"
    "\t\t{{ guid }}.{{ platform }}.ActiveCfg = {{ platform }}\n"
    "\t\t{{ guid }}.{{ platform }}.Build.0 = {{ platform }}\n"
    "{% endfor %}\n"
)


def normalize_member_path(path: str) -> str:
    """Separator-agnostic form of a member path for comparisons."""
    cleaned = path.strip().replace("\\", "/")
    return posixpath.normpath(cleaned) if cleaned else cleaned


def entry_guid(relative_path: str) -> str:
    """Deterministic project identifier derived from the member path."""
    value = uuid.uuid5(_ENTRY_NAMESPACE, normalize_member_path(relative_path))
    return "{" + str(value).upper() + "}"


def type_guid_for(manifest_path: str) -> str:
    suffix = posixpath.splitext(manifest_path.replace("\\", "/"))[1].lower()
    return _TYPE_GUID_BY_SUFFIX.get(suffix, CSHARP_TYPE_GUID)


@dataclass(frozen=True)
class SolutionEntry:
    """One `Project(...)` block of a solution file."""

    type_guid: str
    name: str
    path: str
    guid: str
    start: int
    end: int

    @property
    def normalized_path(self) -> str:
        return normalize_member_path(self.path)

    @property
    def is_folder(self) -> bool:
        return self.type_guid.upper() == FOLDER_TYPE_GUID


@dataclass
class SolutionFile:
    """Line-preserving view of a solution file."""

    path: str
    lines: List[str]
    newline: str = "\n"
    entries: List[SolutionEntry] = field(default_factory=list)
    global_start: Optional[int] = None
    global_end: Optional[int] = None

    def find(self, member_path: str) -> Optional[SolutionEntry]:
        target = normalize_member_path(member_path)
        for entry in self.entries:
            if not entry.is_folder and entry.normalized_path == target:
                return entry
        return None

    def members(self) -> List[SolutionEntry]:
        return [entry for entry in self.entries if not entry.is_folder]

    def platforms(self) -> List[str]:
        """Solution configurations declared in SolutionConfigurationPlatforms."""
        section = self._section("SolutionConfigurationPlatforms")
        if section is None:
            return list(_DEFAULT_PLATFORMS)
        start, end = section
        platforms: List[str] = []
        for line in self.lines[start + 1 : end]:
            match = _PLATFORM_RE.match(line.rstrip("\r\n"))
            if match:
                platforms.append(match.group("key"))
        return platforms or list(_DEFAULT_PLATFORMS)

    def with_entry(self, *, name: str, path: str, type_guid: str, guid: str) -> str:
        """Return the file text with one project entry appended.

        Existing lines are copied unchanged; only new lines are inserted.
        """
        lines = list(self.lines)
        insertions: List[tuple[int, List[str]]] = [
            (
                self._entry_insert_index(),
                self._to_lines(
                    _ENTRY.render(type_guid=type_guid, name=name, path=path, guid=guid)
                ),
            )
        ]

        config_index = self._configuration_insert_index()
        if config_index is not None:
            index, wrap = config_index
            config_lines = self._to_lines(
                _ENTRY_CONFIGURATIONS.render(guid=guid, platforms=self.platforms())
            )
            if wrap:
                config_lines = (
                    [f"\tGlobalSection(ProjectConfigurationPlatforms) = postSolution{self.newline}"]
                    + config_lines
                    + [f"\tEndGlobalSection{self.newline}"]
                )
            insertions.append((index, config_lines))

        # Apply from the bottom up so earlier indexes stay valid.
        for index, new_lines in sorted(insertions, key=lambda item: item[0], reverse=True):
            if index >= len(lines) and lines and not lines[-1].endswith(("\n", "\r")):
                lines[-1] += self.newline
            lines[index:index] = new_lines
        return "".join(lines)

    def render(self) -> str:
        return "".join(self.lines)

    # ------------------------------------------------------------------
    # Internals

    def _to_lines(self, rendered: str) -> List[str]:
        return [f"{line}{self.newline}" for line in rendered.splitlines()]

    def _entry_insert_index(self) -> int:
        if self.entries:
            return max(entry.end for entry in self.entries) + 1
        if self.global_start is not None:
            return self.global_start
        return len(self.lines)

    def _configuration_insert_index(self) -> Optional[tuple[int, bool]]:
        if self.global_start is None:
            return None
        existing = self._section("ProjectConfigurationPlatforms")
        if existing is not None:
            return existing[1], False
        platforms = self._section("SolutionConfigurationPlatforms")
        if platforms is not None:
            return platforms[1] + 1, True
        return self.global_start + 1, True

    def _section(self, name: str) -> Optional[tuple[int, int]]:
        if self.global_start is None or self.global_end is None:
            return None
        start: Optional[int] = None
        for index in range(self.global_start + 1, self.global_end):
            stripped = self.lines[index].strip()
            match = _SECTION_RE.match(stripped)
            if match and match.group("name").strip() == name:
                start = index
                continue
            if start is not None and stripped == "EndGlobalSection":
                return start, index
        return None


def parse_solution(text: str, path: str = "<solution>") -> SolutionFile:
    """Parse solution text, raising MalformedSolutionError on grammar violations."""
    lines = text.splitlines(keepends=True)
    newline = "\r\n" if "\r\n" in text else "\n"

    first = next((line for line in lines if line.strip().lstrip("\ufeff")), None)
    if first is None or not first.lstrip("\ufeff").strip().startswith(HEADER_PREFIX):
        raise MalformedSolutionError(path, "missing solution file header")

    entries: List[SolutionEntry] = []
    open_project: Optional[tuple[int, re.Match[str]]] = None
    global_start: Optional[int] = None
    global_end: Optional[int] = None

    for index, raw in enumerate(lines):
        stripped = raw.strip().lstrip("\ufeff")
        if stripped.startswith("Project("):
            if open_project is not None:
                raise MalformedSolutionError(path, f"nested Project block at line {index + 1}")
            match = _PROJECT_RE.match(stripped)
            if match is None:
                raise MalformedSolutionError(path, f"invalid Project line at line {index + 1}")
            open_project = (index, match)
        elif stripped == "EndProject":
            if open_project is None:
                raise MalformedSolutionError(path, f"EndProject without Project at line {index + 1}")
            start, match = open_project
            entries.append(
                SolutionEntry(
                    type_guid=match.group("type"),
                    name=match.group("name"),
                    path=match.group("path"),
                    guid=match.group("guid"),
                    start=start,
                    end=index,
                )
            )
            open_project = None
        elif stripped == "Global":
            if open_project is not None or global_start is not None:
                raise MalformedSolutionError(path, f"unexpected Global at line {index + 1}")
            global_start = index
        elif stripped == "EndGlobal":
            if global_start is None or global_end is not None:
                raise MalformedSolutionError(path, f"unexpected EndGlobal at line {index + 1}")
            global_end = index

    if open_project is not None:
        raise MalformedSolutionError(path, f"unterminated Project at line {open_project[0] + 1}")
    if global_start is not None and global_end is None:
        raise MalformedSolutionError(path, "unterminated Global section")

    return SolutionFile(
        path=path,
        lines=lines,
        newline=newline,
        entries=entries,
        global_start=global_start,
        global_end=global_end,
    )


def read_solution(path: Path) -> SolutionFile:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise MalformedSolutionError(str(path), str(exc)) from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedSolutionError(str(path), "not valid UTF-8") from exc
    return parse_solution(text, path.as_posix())


def empty_solution_text(platforms: Sequence[str] = _DEFAULT_PLATFORMS) -> str:
    """Canonical solution with no members."""
    return _EMPTY_SOLUTION.render(header=f"{HEADER_PREFIX}, Format Version 12.00", platforms=platforms)


__all__ = [
    "CSHARP_TYPE_GUID",
    "FOLDER_TYPE_GUID",
    "SolutionEntry",
    "SolutionFile",
    "empty_solution_text",
    "entry_guid",
    "normalize_member_path",
    "parse_solution",
    "read_solution",
    "type_guid_for",
]
