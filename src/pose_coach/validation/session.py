"""
Validator Facade — pure-Python implementation.

A :class:`ValidatorSession` holds the per-exercise state for one caller
(rep count, latch, last angles) and turns each keypoint frame into a
:class:`ValidationResult`. Sessions are not safe for concurrent writers.
"""

import logging
from typing import Any, Mapping, Optional

from ..config import KEYPOINT_CONFIDENCE_THRESHOLD
from ..exercises.registry import ExerciseRegistry, get_default_registry
from ..exercises.schema import ExerciseDefinition
from .angles import AngleMap, compute_angle_map
from .form import check_form
from .reps import RepDetector
from .state import ValidationResult

logger = logging.getLogger(__name__)


class ValidatorSession:
    """Stateful validator for one exercise screen."""

    def __init__(
        self,
        definition: ExerciseDefinition,
        confidence_threshold: Optional[float] = None,
    ):
        self.definition = definition
        self.confidence_threshold = (
            KEYPOINT_CONFIDENCE_THRESHOLD if confidence_threshold is None
            else float(confidence_threshold)
        )
        self._checkpoints = definition.checkpoints
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

    def validate_pose(self, keypoints: Optional[Mapping[str, Any]]) -> ValidationResult:
        """Angles, form errors and rep event for one keypoint frame."""
        angles = compute_angle_map(keypoints, self._checkpoints, self.confidence_threshold)
        errors = check_form(angles, self.definition.ideal_angles)
        rep_detected = self._rep_detector.update(angles)
        self.last_angles = angles
        return ValidationResult(
            angles=dict(angles),
            errors=errors,
            rep_detected=rep_detected,
            rep_count=self._rep_detector.rep_count,
        )

    def reset(self) -> None:
        """Start a new set: zero the count, release the latch, forget angles."""
        self._rep_detector.reset()
        self.last_angles = {}


def create_session(
    exercise_id: str,
    registry: Optional[ExerciseRegistry] = None,
    confidence_threshold: Optional[float] = None,
) -> ValidatorSession:
    """Build a fresh session for ``exercise_id``.

    Raises:
        UnknownExercise: If the registry has no definition for the id.
    """
    registry = registry if registry is not None else get_default_registry()
    definition = registry.get(exercise_id)
    logger.debug("Created session for '%s'", exercise_id)
    return ValidatorSession(definition, confidence_threshold=confidence_threshold)
