"""
Native validator path.

Computes every joint angle of a frame in one vectorised pass over numpy's
compiled kernels and checks all tolerance bands at once. Presence rules
(which joints are measurable) and the rep latch are shared with the
pure-Python session so both paths produce the same results.
"""

import importlib
import logging
import math
from types import ModuleType
from typing import Any, Mapping, Optional

from .. import config
from ..exceptions import NativeBackendError
from ..exercises.schema import ExerciseDefinition
from .angles import AngleMap, angle_at, frame_points
from .form import format_error_message
from .reps import RepDetector
from .state import FormError, ValidationResult

logger = logging.getLogger(__name__)

# Reference triples and their expected angles for the backend self-check.
_SELF_CHECK_CASES = (
    ((1.0, 0.0), (0.0, 0.0), (0.0, 1.0)),
    ((0.0, 1.0), (0.0, 0.0), (1.0, 0.0)),
    ((3.0, 4.0), (1.0, 1.0), (-2.0, 0.5)),
    ((1.0, 0.0), (0.0, 0.0), (-1.0, 0.0)),
)


def _signed_angles(np: ModuleType, pts):
    """Signed angles for an (N, 3, 2) array of (start, vertex, end) points.

    Returns ``(degrees, valid)`` where ``valid`` is False for rows with a
    zero-length arm or a non-finite result.
    """
    v1 = pts[:, 0] - pts[:, 1]
    v2 = pts[:, 2] - pts[:, 1]
    cross = v1[:, 0] * v2[:, 1] - v1[:, 1] * v2[:, 0]
    dot = np.einsum("ij,ij->i", v1, v2)
    degrees = np.degrees(np.arctan2(cross, dot))
    degrees = np.where(degrees <= -180.0, 180.0, degrees)
    valid = np.any(v1 != 0.0, axis=1) & np.any(v2 != 0.0, axis=1) & np.isfinite(degrees)
    return degrees, valid


def _self_check(np: ModuleType) -> None:
    pts = np.asarray(_SELF_CHECK_CASES, dtype=np.float64)
    degrees, valid = _signed_angles(np, pts)
    for case, got, ok in zip(_SELF_CHECK_CASES, degrees, valid):
        expected = angle_at(*case)
        if not ok or expected is None or not math.isclose(
            float(got), expected, abs_tol=config.NATIVE_SELF_CHECK_TOLERANCE
        ):
            raise NativeBackendError(
                f"Native self-check failed for {case}: got {got}, expected {expected}."
            )


def load_native_backend() -> ModuleType:
    """Import and verify the compiled numeric backend.

    Raises:
        NativeBackendError: If the native path is disabled, cannot be
            imported, or disagrees with the reference angle engine.
    """
    if config.FORCE_FALLBACK:
        raise NativeBackendError("Native validator disabled by POSE_COACH_FORCE_FALLBACK.")
    try:
        np = importlib.import_module("numpy")
    except ImportError as exc:
        raise NativeBackendError(f"numpy could not be imported: {exc}") from exc
    _self_check(np)
    return np


class NativeSession:
    """Vectorised counterpart of :class:`~pose_coach.validation.session.ValidatorSession`."""

    def __init__(
        self,
        definition: ExerciseDefinition,
        backend: ModuleType,
        confidence_threshold: Optional[float] = None,
    ):
        np = backend
        self._np = np
        self.definition = definition
        self.confidence_threshold = (
            config.KEYPOINT_CONFIDENCE_THRESHOLD if confidence_threshold is None
            else float(confidence_threshold)
        )
        self._checkpoints = definition.checkpoints
        self._ideal = definition.ideal_angles
        self._mins = np.array([i.min for i in self._ideal], dtype=np.float64)
        self._maxs = np.array([i.max for i in self._ideal], dtype=np.float64)
        self._rep_detector = RepDetector(definition.rep_trigger)
        self.last_angles: AngleMap = {}

    @property
    def exercise_id(self) -> str:
        return self.definition.id

    @property
    def rep_count(self) -> int:
        return self._rep_detector.rep_count

    @property
    def rep_latched(self) -> bool:
        return self._rep_detector.latched

    def _compute_angles(self, keypoints: Optional[Mapping[str, Any]]) -> AngleMap:
        present = frame_points(keypoints, self._checkpoints, self.confidence_threshold)
        if not present:
            return {}
        pts = self._np.asarray([(a, b, c) for _, a, b, c in present], dtype=self._np.float64)
        degrees, valid = _signed_angles(self._np, pts)
        return {
            joint: float(angle)
            for (joint, _, _, _), angle, ok in zip(present, degrees, valid)
            if ok
        }

    def _check_form(self, angles: AngleMap) -> list[FormError]:
        if not self._ideal:
            return []
        np = self._np
        values = np.array([angles.get(i.joint, np.nan) for i in self._ideal], dtype=np.float64)
        # NaN (absent joint) compares False on both sides and is skipped.
        out_of_band = (values < self._mins) | (values > self._maxs)
        errors = []
        for idx in np.flatnonzero(out_of_band):
            ideal = self._ideal[idx]
            angle = angles[ideal.joint]
            errors.append(
                FormError(
                    joint=ideal.joint,
                    angle=angle,
                    message=format_error_message(ideal.joint, ideal.min, ideal.max, angle),
                )
            )
        return errors

    def validate_pose(self, keypoints: Optional[Mapping[str, Any]]) -> ValidationResult:
        angles = self._compute_angles(keypoints)
        errors = self._check_form(angles)
        rep_detected = self._rep_detector.update(angles)
        self.last_angles = angles
        return ValidationResult(
            angles=dict(angles),
            errors=errors,
            rep_detected=rep_detected,
            rep_count=self._rep_detector.rep_count,
        )

    def reset(self) -> None:
        self._rep_detector.reset()
        self.last_angles = {}
