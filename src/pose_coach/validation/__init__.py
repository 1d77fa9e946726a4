"""
Real-time pose validation.

Per keypoint frame:
    Angle Engine   — signed joint angles from keypoint triples
    Form Checker   — out-of-band joints as FormErrors
    Rep Detector   — single-threshold latch, one event per rep
behind a stateful session and a native/fallback dispatching factory.
"""

from .angles import AngleMap, angle_at, compute_angle_map
from .dispatch import Validator, create_validator, is_native_supported
from .form import check_form, deviation_from_perfect
from .native import NativeSession, load_native_backend
from .reps import RepDetector
from .session import ValidatorSession, create_session
from .state import FormError, ValidationResult

__all__ = [
    "AngleMap",
    "angle_at",
    "compute_angle_map",
    "Validator",
    "create_validator",
    "is_native_supported",
    "check_form",
    "deviation_from_perfect",
    "NativeSession",
    "load_native_backend",
    "RepDetector",
    "ValidatorSession",
    "create_session",
    "FormError",
    "ValidationResult",
]
