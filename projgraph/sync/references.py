"""Adds project references to a manifest without reformatting it."""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Optional, Union

from ..atomic import atomic_write
from ..errors import ParseError, SyncError
from ..manifest.project import project_manifest_from_string
from ..models import MutationResult

_ITEM_GROUP_RE = re.compile(r"<ItemGroup(?:\s[^>]*)?(?<!/)>(?P<body>.*?)</ItemGroup>", re.DOTALL)
_PROJECT_REFERENCE_LINE_RE = re.compile(r"^(?P<indent>[ \t]*)<ProjectReference\b", re.MULTILINE)
_PROJECT_CLOSE_RE = re.compile(r"</Project>\s*$")


def reference_include(manifest_path: Path, referenced_path: Path) -> str:
    """Relative include path as the dotnet tooling writes it (`\\` separators)."""
    source_dir = Path(os.path.abspath(manifest_path)).parent.as_posix()
    target = Path(os.path.abspath(referenced_path)).as_posix()
    return posixpath.relpath(target, source_dir).replace("/", "\\")


def ensure_project_reference(
    manifest_path: Union[str, Path],
    referenced_manifest_path: Union[str, Path],
) -> MutationResult:
    """Add a ProjectReference from one manifest to another, once."""
    source = Path(manifest_path)
    target = Path(referenced_manifest_path)
    try:
        text = source.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SyncError(str(source), str(exc)) from exc

    identity = Path(os.path.abspath(source)).as_posix()
    try:
        manifest = project_manifest_from_string(text.lstrip("\ufeff"), identity)
    except ParseError as exc:
        raise SyncError(str(source), f"malformed manifest: {exc.cause}") from exc

    include = reference_include(source, target)
    wanted = posixpath.normpath(Path(os.path.abspath(target)).as_posix())
    source_dir = posixpath.dirname(identity)
    for reference in manifest.references:
        existing = posixpath.normpath(posixpath.join(source_dir, reference.normalized))
        if existing == wanted:
            return MutationResult(status=MutationResult.NOOP, path=str(source), entry=include)

    updated = _insert_reference(text, include)
    if updated is None:
        raise SyncError(str(source), "no closing </Project> element")
    atomic_write(source, updated.encode("utf-8"))
    return MutationResult(status=MutationResult.APPENDED, path=str(source), entry=include)


def _insert_reference(text: str, include: str) -> Optional[str]:
    newline = "\r\n" if "\r\n" in text else "\n"
    element = f'<ProjectReference Include="{include}" />'

    for group in _ITEM_GROUP_RE.finditer(text):
        body = group.group("body")
        line = _PROJECT_REFERENCE_LINE_RE.search(body)
        if line is None:
            continue
        indent = line.group("indent")
        close = group.end("body")
        # Keep the closing tag on its own line with its original indentation.
        line_start = text.rfind("\n", 0, close) + 1
        if text[line_start:close].strip():
            return f"{text[:close]}{newline}{indent}{element}{newline}{text[close:]}"
        return f"{text[:line_start]}{indent}{element}{newline}{text[line_start:]}"

    closing = _PROJECT_CLOSE_RE.search(text)
    if closing is None:
        return None
    position = closing.start()
    line_start = text.rfind("\n", 0, position) + 1
    block = f"  <ItemGroup>{newline}    {element}{newline}  </ItemGroup>{newline}"
    if text[line_start:position].strip():
        return f"{text[:position]}{newline}{block}{text[position:]}"
    return f"{text[:line_start]}{block}{newline}{text[line_start:]}"


__all__ = ["ensure_project_reference", "reference_include"]
