"""Exception taxonomy for the validator.

Only initialization problems are raised. Per-frame data issues (missing or
low-confidence keypoints, degenerate angles) are absorbed by omission.
"""


class PoseCoachError(Exception):
    """Base class for all pose_coach errors."""


class UnknownExercise(PoseCoachError, KeyError):
    """No ExerciseDefinition is registered for the requested id."""

    def __init__(self, exercise_id: str):
        self.exercise_id = exercise_id
        super().__init__(exercise_id)

    def __str__(self) -> str:
        return f"Unknown exercise '{self.exercise_id}'."


class InvalidExerciseDefinition(PoseCoachError, ValueError):
    """An exercise data file does not match the definition schema."""


class NativeBackendError(PoseCoachError, RuntimeError):
    """The native validator could not be initialised."""


class ValidatorUnavailable(PoseCoachError, RuntimeError):
    """Neither the native nor the fallback validator could be built."""
