"""
Angle Engine.

Computes the signed angle at a vertex from three 2D points using
``atan2(cross, dot)``, which stays defined where an ``acos`` of the
normalised dot product would drift outside [-1, 1].
"""

import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..config import KEYPOINT_CONFIDENCE_THRESHOLD
from ..exercises.schema import FormCheckpoint

Point = Tuple[float, float]
AngleMap = dict[str, float]

# (joint, start, vertex, end) for one measurable joint in a frame.
JointPoints = Tuple[str, Point, Point, Point]


def angle_at(point_a: Sequence[float], vertex: Sequence[float], point_c: Sequence[float]) -> Optional[float]:
    """Signed angle at ``vertex`` from ``point_a`` to ``point_c``, in degrees.

    The result lies in (-180, 180]. Swapping ``point_a`` and ``point_c``
    flips the sign. Returns ``None`` when either arm has zero length or a
    coordinate is not finite.
    """
    v1x = point_a[0] - vertex[0]
    v1y = point_a[1] - vertex[1]
    v2x = point_c[0] - vertex[0]
    v2y = point_c[1] - vertex[1]

    if (v1x == 0.0 and v1y == 0.0) or (v2x == 0.0 and v2y == 0.0):
        return None

    cross = v1x * v2y - v1y * v2x
    dot = v1x * v2x + v1y * v2y
    angle = math.degrees(math.atan2(cross, dot))
    if not math.isfinite(angle):
        return None
    if angle <= -180.0:
        angle = 180.0
    return angle


def keypoint_xy(keypoint: Any, min_score: float = KEYPOINT_CONFIDENCE_THRESHOLD) -> Optional[Point]:
    """Coordinates of a usable keypoint, or ``None`` if it counts as absent.

    Accepts :class:`~pose_coach.exercises.schema.Keypoint` objects and plain
    mappings with ``x``, ``y`` and optional ``score`` (default 1.0).
    Malformed, non-finite or low-confidence keypoints are absent.
    """
    if keypoint is None:
        return None
    if isinstance(keypoint, Mapping):
        x, y, score = keypoint.get("x"), keypoint.get("y"), keypoint.get("score", 1.0)
    else:
        x = getattr(keypoint, "x", None)
        y = getattr(keypoint, "y", None)
        score = getattr(keypoint, "score", 1.0)
    try:
        x = float(x)
        y = float(y)
        score = 1.0 if score is None else float(score)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(score)):
        return None
    if score < min_score:
        return None
    return x, y


def frame_points(
    keypoints: Optional[Mapping[str, Any]],
    checkpoints: Sequence[Tuple[str, FormCheckpoint]],
    min_score: float = KEYPOINT_CONFIDENCE_THRESHOLD,
) -> List[JointPoints]:
    """Collect the point triples of every joint whose three keypoints are usable."""
    if not keypoints:
        return []
    present: List[JointPoints] = []
    for joint, triple in checkpoints:
        a = keypoint_xy(keypoints.get(triple.start), min_score)
        b = keypoint_xy(keypoints.get(triple.vertex), min_score)
        c = keypoint_xy(keypoints.get(triple.end), min_score)
        if a is not None and b is not None and c is not None:
            present.append((joint, a, b, c))
    return present


def compute_angle_map(
    keypoints: Optional[Mapping[str, Any]],
    checkpoints: Sequence[Tuple[str, FormCheckpoint]],
    min_score: float = KEYPOINT_CONFIDENCE_THRESHOLD,
) -> AngleMap:
    """Angle for each checkpoint joint that is measurable in this frame.

    Args:
        keypoints: Joint name -> keypoint for one frame.
        checkpoints: ``(joint, triple)`` pairs, usually
            ``ExerciseDefinition.checkpoints``.
        min_score: Confidence below which a keypoint is ignored.

    Returns:
        Joint name -> signed degrees. Joints with missing keypoints or an
        undefined angle have no entry.
    """
    angles: AngleMap = {}
    for joint, a, b, c in frame_points(keypoints, checkpoints, min_score):
        angle = angle_at(a, b, c)
        if angle is not None:
            angles[joint] = angle
    return angles
