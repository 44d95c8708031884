"""Target inference for projects without explicit configuration."""

from .engine import (
    BUILD,
    LINT,
    PACKAGE,
    SERVE,
    SWAGGER,
    TEST,
    TargetInferenceEngine,
    infer_targets,
)
from .overrides import OverrideTarget, ProjectOverride, load_override
from .probe import ProjectProbe, probe_project

__all__ = [
    "BUILD",
    "LINT",
    "OverrideTarget",
    "PACKAGE",
    "ProjectOverride",
    "ProjectProbe",
    "SERVE",
    "SWAGGER",
    "TEST",
    "TargetInferenceEngine",
    "infer_targets",
    "load_override",
    "probe_project",
]
