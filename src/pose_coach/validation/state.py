"""
Result models returned by the validators.

Attributes are snake_case; serialisation uses camelCase aliases
(``repDetected``, ``repCount``) so JSON consumers see the wire shape.
"""

from pydantic import BaseModel, ConfigDict, Field


class FormError(BaseModel):
    """A joint angle outside its acceptable band for the current frame."""
    joint: str
    angle: float
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating one keypoint frame."""
    model_config = ConfigDict(populate_by_name=True)

    angles: dict[str, float] = Field(
        default_factory=dict, description="Joint name -> signed angle (degrees)"
    )
    errors: list[FormError] = Field(default_factory=list)
    rep_detected: bool = Field(
        default=False, alias="repDetected",
        description="True only on the frame a rep is counted",
    )
    rep_count: int = Field(default=0, ge=0, alias="repCount")
