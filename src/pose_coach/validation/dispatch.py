"""
Native/Fallback Dispatch.

``create_validator`` picks the native session when the compiled backend
initialises and the pure-Python session otherwise. The choice is made once
and recorded in :attr:`Validator.kind`; callers see the same
``validate_pose`` contract either way.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional, Union

from ..exceptions import NativeBackendError, ValidatorUnavailable
from ..exercises.registry import ExerciseRegistry, get_default_registry
from .angles import AngleMap
from .native import NativeSession, load_native_backend
from .session import ValidatorSession
from .state import ValidationResult

logger = logging.getLogger(__name__)

ValidatorKind = Literal["native", "fallback"]


@dataclass
class Validator:
    """A validator session tagged with the implementation that backs it."""
    kind: ValidatorKind
    session: Union[NativeSession, ValidatorSession] = field(repr=False)
    performance_ms: Optional[float] = None

    @property
    def exercise_id(self) -> str:
        return self.session.exercise_id

    @property
    def rep_count(self) -> int:
        return self.session.rep_count

    @property
    def last_angles(self) -> AngleMap:
        return self.session.last_angles

    def validate_pose(self, keypoints: Optional[Mapping[str, Any]]) -> ValidationResult:
        t0 = time.perf_counter()
        result = self.session.validate_pose(keypoints)
        self.performance_ms = (time.perf_counter() - t0) * 1000.0
        return result

    def reset(self) -> None:
        self.session.reset()
        self.performance_ms = None


def is_native_supported() -> bool:
    """True if the native backend would initialise in this process."""
    try:
        load_native_backend()
    except NativeBackendError:
        return False
    return True


def create_validator(
    exercise_id: str,
    fallback: bool = True,
    registry: Optional[ExerciseRegistry] = None,
    confidence_threshold: Optional[float] = None,
    force_fallback: bool = False,
) -> Validator:
    """Build a validator for ``exercise_id``, preferring the native path.

    Args:
        exercise_id: Registered exercise id.
        fallback: Use the pure-Python session if the native path fails.
        registry: Definition source (default: the configured registry).
        confidence_threshold: Keypoint score cutoff override.
        force_fallback: Skip the native path for this validator only.

    Returns:
        A :class:`Validator` tagged ``"native"`` or ``"fallback"``.

    Raises:
        UnknownExercise: If the exercise id is not registered.
        ValidatorUnavailable: If no implementation could be initialised.
    """
    registry = registry if registry is not None else get_default_registry()
    definition = registry.get(exercise_id)

    if force_fallback:
        logger.info("Native validator for '%s' skipped on request.", exercise_id)
    else:
        try:
            backend = load_native_backend()
            session = NativeSession(definition, backend, confidence_threshold=confidence_threshold)
        except Exception as exc:
            if not fallback:
                raise ValidatorUnavailable(
                    f"Native validator for '{exercise_id}' failed and fallback is disabled: {exc}"
                ) from exc
            logger.warning(
                "Native validator for '%s' unavailable (%s) — using fallback.", exercise_id, exc,
            )
        else:
            logger.info("Using native validator for '%s'.", exercise_id)
            return Validator(kind="native", session=session)

    try:
        session = ValidatorSession(definition, confidence_threshold=confidence_threshold)
    except Exception as exc:
        logger.exception("Fallback validator for '%s' failed", exercise_id)
        raise ValidatorUnavailable(
            f"No validator could be initialised for '{exercise_id}': {exc}"
        ) from exc

    logger.info("Using fallback validator for '%s'.", exercise_id)
    return Validator(kind="fallback", session=session)
