"""Per-project override files (project.json)."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class OverrideTarget(BaseModel):
    """One explicitly configured target; unknown keys are allowed."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    executor: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    depends_on: List[Any] = Field(default_factory=list, alias="dependsOn")
    outputs: List[str] = Field(default_factory=list)


class ProjectOverride(BaseModel):
    """Parsed override file for a single project directory."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    targets: Dict[str, OverrideTarget] = Field(default_factory=dict)

    _raw_targets: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_data(cls, data: Any) -> "ProjectOverride":
        """Validate decoded JSON, remembering each target exactly as written."""
        override = cls.model_validate(data)
        override._raw_targets = copy.deepcopy(data.get("targets") or {})
        return override

    def defines(self, operation: str) -> bool:
        return operation in self.targets

    def raw_target(self, operation: str) -> Dict[str, Any]:
        if operation in self._raw_targets:
            return copy.deepcopy(self._raw_targets[operation])
        return self.targets[operation].model_dump(by_alias=True, exclude_unset=True)


def load_override(path: Path) -> ProjectOverride:
    """Read and validate an override file.

    Raises ``ValueError`` (``json.JSONDecodeError`` or pydantic's
    ``ValidationError``) for unreadable content and ``OSError`` when the file
    cannot be opened.
    """
    data = json.loads(path.read_text(encoding="utf-8-sig"))
    return ProjectOverride.from_data(data)


__all__ = ["OverrideTarget", "ProjectOverride", "load_override"]
