"""
pose_coach — real-time pose-based exercise validation.

Feeds per-frame body keypoints through an exercise-specific rule set and
returns joint angles, form errors and repetition events.
"""

from .exceptions import (
    InvalidExerciseDefinition,
    NativeBackendError,
    PoseCoachError,
    UnknownExercise,
    ValidatorUnavailable,
)
from .exercises import ExerciseDefinition, ExerciseRegistry, Keypoint, get_default_registry
from .validation import (
    FormError,
    ValidationResult,
    Validator,
    ValidatorSession,
    angle_at,
    create_session,
    create_validator,
)

__version__ = "1.0.0"

__all__ = [
    "InvalidExerciseDefinition",
    "NativeBackendError",
    "PoseCoachError",
    "UnknownExercise",
    "ValidatorUnavailable",
    "ExerciseDefinition",
    "ExerciseRegistry",
    "Keypoint",
    "get_default_registry",
    "FormError",
    "ValidationResult",
    "Validator",
    "ValidatorSession",
    "angle_at",
    "create_session",
    "create_validator",
]
