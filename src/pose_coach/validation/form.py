"""
Form Checker.

Compares a frame's angle map against the exercise's tolerance bands. Joints
missing from the angle map (occluded or low confidence) are skipped.
"""

from typing import Iterable, List, Mapping

from ..exercises.schema import IdealAngle
from .state import FormError


def format_error_message(joint: str, low: float, high: float, angle: float) -> str:
    return f"{joint} angle should be between {low:g}°-{high:g}° (current: {angle:.1f}°)"


def check_form(angle_map: Mapping[str, float], ideal_angles: Iterable[IdealAngle]) -> List[FormError]:
    """One :class:`FormError` per present joint outside its band, in band order."""
    errors: List[FormError] = []
    for ideal in ideal_angles:
        angle = angle_map.get(ideal.joint)
        if angle is None:
            continue
        if angle < ideal.min or angle > ideal.max:
            errors.append(
                FormError(
                    joint=ideal.joint,
                    angle=angle,
                    message=format_error_message(ideal.joint, ideal.min, ideal.max, angle),
                )
            )
    return errors


def deviation_from_perfect(
    angle_map: Mapping[str, float],
    ideal_angles: Iterable[IdealAngle],
) -> dict[str, float]:
    """Absolute distance (degrees) between each present joint and its perfect angle."""
    return {
        ideal.joint: abs(angle_map[ideal.joint] - ideal.perfect)
        for ideal in ideal_angles
        if ideal.joint in angle_map
    }
