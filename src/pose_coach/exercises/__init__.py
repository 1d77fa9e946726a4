"""
Exercise Definition Store: schema and YAML-backed registry.
"""

from .schema import (
    DEFAULT_CHECKPOINTS,
    ExerciseDefinition,
    FormCheckpoint,
    IdealAngle,
    Keypoint,
    RepTrigger,
)
from .registry import (
    ExerciseRegistry,
    get_default_registry,
    load_definitions_file,
    parse_definitions,
)

__all__ = [
    "DEFAULT_CHECKPOINTS",
    "ExerciseDefinition",
    "FormCheckpoint",
    "IdealAngle",
    "Keypoint",
    "RepTrigger",
    "ExerciseRegistry",
    "get_default_registry",
    "load_definitions_file",
    "parse_definitions",
]
