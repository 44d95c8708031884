"""Read-only XML manifest trees."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, List, Optional

from ..errors import ParseError


def _local_name(tag: str) -> str:
    # MSBuild 2003 manifests put every element in a default namespace.
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


class ElementNode:
    """A single element with named child and attribute access."""

    __slots__ = ("_element",)

    def __init__(self, element: ET.Element) -> None:
        self._element = element

    @property
    def tag(self) -> str:
        return _local_name(self._element.tag)

    @property
    def text(self) -> Optional[str]:
        """Raw text content; whitespace is not normalized."""
        return self._element.text

    @property
    def attributes(self) -> dict[str, str]:
        return {_local_name(key): value for key, value in self._element.attrib.items()}

    def attribute(self, name: str) -> Optional[str]:
        if name in self._element.attrib:
            return self._element.attrib[name]
        for key, value in self._element.attrib.items():
            if _local_name(key) == name:
                return value
        return None

    def children(self) -> List["ElementNode"]:
        return [ElementNode(child) for child in self._element]

    def children_named(self, tag: str) -> List["ElementNode"]:
        return [
            ElementNode(child) for child in self._element if _local_name(child.tag) == tag
        ]

    def child_named(self, tag: str) -> Optional["ElementNode"]:
        for child in self._element:
            if _local_name(child.tag) == tag:
                return ElementNode(child)
        return None

    def descendants_named(self, tag: str) -> Iterator["ElementNode"]:
        for element in self._element.iter():
            if element is self._element:
                continue
            if _local_name(element.tag) == tag:
                yield ElementNode(element)

    def __repr__(self) -> str:
        return f"ElementNode({self.tag!r})"


class ManifestTree:
    """Parsed manifest document anchored at its root element."""

    def __init__(self, path: str, root: ElementNode) -> None:
        self.path = path
        self.root = root

    def children_named(self, tag: str) -> List[ElementNode]:
        return self.root.children_named(tag)

    def attribute(self, name: str) -> Optional[str]:
        return self.root.attribute(name)


def parse_string(text: str, path: str = "<string>") -> ManifestTree:
    """Parse manifest markup held in memory."""
    try:
        element = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ParseError(path, exc) from exc
    return ManifestTree(path, ElementNode(element))


def parse(path: str | Path) -> ManifestTree:
    """Parse a manifest file, failing with ParseError on any problem."""
    manifest_path = Path(path)
    try:
        text = manifest_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(str(path), exc) from exc
    return parse_string(text, manifest_path.as_posix())


__all__ = ["ElementNode", "ManifestTree", "parse", "parse_string"]
