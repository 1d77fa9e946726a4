"""
Schema for keypoints and per-exercise definitions.

Definitions are frozen Pydantic models so a single loaded instance can be
shared read-only by every session validating that exercise. Field aliases
follow the camelCase keys used in the exercise data files.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Keypoints
# ============================================================================

class Keypoint(BaseModel):
    """A named 2D body-joint coordinate with a detection confidence."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    x: float
    y: float
    score: float = Field(default=1.0, ge=0.0, le=1.0)


# ============================================================================
# Exercise definition parts
# ============================================================================

class IdealAngle(BaseModel):
    """Acceptable angle band for one joint, in degrees."""
    model_config = ConfigDict(frozen=True)

    joint: str
    min: float
    max: float
    perfect: float

    @model_validator(mode="after")
    def _check_band(self) -> "IdealAngle":
        if self.min > self.max:
            raise ValueError(
                f"idealAngles[{self.joint}]: min ({self.min}) is greater than max ({self.max})."
            )
        return self


class RepTrigger(BaseModel):
    """Threshold rule on one joint that marks a repetition."""
    model_config = ConfigDict(frozen=True)

    joint: str
    direction: Literal["above", "below"]
    threshold: float

    def is_triggered(self, angle: float) -> bool:
        if self.direction == "above":
            return angle > self.threshold
        return angle < self.threshold


class FormCheckpoint(BaseModel):
    """Three keypoint names whose middle point is the measured vertex."""
    model_config = ConfigDict(frozen=True)

    start: str
    vertex: str
    end: str

    def as_tuple(self) -> tuple[str, str, str]:
        return self.start, self.vertex, self.end


# Joint name -> (start, vertex, end) used when a definition does not supply
# its own triple for a measured joint.
DEFAULT_CHECKPOINTS: dict[str, FormCheckpoint] = {
    "left_elbow": FormCheckpoint(start="left_wrist", vertex="left_elbow", end="left_shoulder"),
    "right_elbow": FormCheckpoint(start="right_wrist", vertex="right_elbow", end="right_shoulder"),
    "left_shoulder": FormCheckpoint(start="left_elbow", vertex="left_shoulder", end="left_hip"),
    "right_shoulder": FormCheckpoint(start="right_elbow", vertex="right_shoulder", end="right_hip"),
    "left_hip": FormCheckpoint(start="left_shoulder", vertex="left_hip", end="left_knee"),
    "right_hip": FormCheckpoint(start="right_shoulder", vertex="right_hip", end="right_knee"),
    "left_knee": FormCheckpoint(start="left_hip", vertex="left_knee", end="left_ankle"),
    "right_knee": FormCheckpoint(start="right_hip", vertex="right_knee", end="right_ankle"),
}


# ============================================================================
# Exercise definition
# ============================================================================

class ExerciseDefinition(BaseModel):
    """
    Static configuration for one exercise.

    The measured joints are the ``idealAngles`` joints followed by the
    rep-trigger joint (ordered, without duplicates). Each of them must
    resolve to a keypoint triple, either from ``formCheckpoints`` or from
    :data:`DEFAULT_CHECKPOINTS`.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    ideal_angles: tuple[IdealAngle, ...] = Field(default=(), alias="idealAngles")
    rep_trigger: RepTrigger = Field(alias="repTrigger")
    form_checkpoints: dict[str, FormCheckpoint] = Field(
        default_factory=dict, alias="formCheckpoints"
    )

    @model_validator(mode="after")
    def _check_checkpoints(self) -> "ExerciseDefinition":
        measured = self.measured_joints
        extra = sorted(set(self.form_checkpoints) - set(measured))
        if extra:
            raise ValueError(
                f"formCheckpoints names joints that are never measured: {extra}"
            )
        unresolved = [
            j for j in measured
            if j not in self.form_checkpoints and j not in DEFAULT_CHECKPOINTS
        ]
        if unresolved:
            raise ValueError(
                f"No keypoint triple for joints {unresolved}; "
                "add them to formCheckpoints."
            )
        return self

    @property
    def measured_joints(self) -> tuple[str, ...]:
        joints: list[str] = []
        for ideal in self.ideal_angles:
            if ideal.joint not in joints:
                joints.append(ideal.joint)
        if self.rep_trigger.joint not in joints:
            joints.append(self.rep_trigger.joint)
        return tuple(joints)

    def checkpoint_for(self, joint: str) -> FormCheckpoint:
        return self.form_checkpoints.get(joint) or DEFAULT_CHECKPOINTS[joint]

    @property
    def checkpoints(self) -> tuple[tuple[str, FormCheckpoint], ...]:
        """``(joint, triple)`` pairs for every measured joint, in order."""
        return tuple((j, self.checkpoint_for(j)) for j in self.measured_joints)
