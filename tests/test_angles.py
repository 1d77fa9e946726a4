"""Tests for the angle engine.

Covers:
  - Signed atan2 angles and their (-180, 180] range
  - Sign flip when the outer points are swapped
  - Degenerate (zero-length arm) inputs
  - Keypoint presence rules: missing, malformed, non-finite, low confidence
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pose_coach.exercises.schema import DEFAULT_CHECKPOINTS, Keypoint
from pose_coach.validation.angles import angle_at, compute_angle_map, keypoint_xy


# ============================================================================
# Fixtures
# ============================================================================

def _points_for_angle(angle_deg: float, origin=(120.0, 80.0), arm: float = 50.0):
    """Return (a, vertex, c) whose signed angle at the vertex is ``angle_deg``."""
    ox, oy = origin
    rad = math.radians(angle_deg)
    a = (ox + arm, oy)
    c = (ox + arm * math.cos(rad), oy + arm * math.sin(rad))
    return a, (ox, oy), c


def _knee_frame(angle_deg: float, score: float = 0.9) -> dict:
    a, b, c = _points_for_angle(angle_deg)
    return {
        "left_hip": {"x": a[0], "y": a[1], "score": score},
        "left_knee": {"x": b[0], "y": b[1], "score": score},
        "left_ankle": {"x": c[0], "y": c[1], "score": score},
    }


KNEE_ONLY = (("left_knee", DEFAULT_CHECKPOINTS["left_knee"]),)


# ============================================================================
# Test: angle_at
# ============================================================================

class TestAngleAt:

    @pytest.mark.parametrize("angle", [10.0, 45.0, 90.0, 135.0, 179.0, -30.0, -90.0, -170.0])
    def test_recovers_constructed_angle(self, angle):
        a, b, c = _points_for_angle(angle)
        np.testing.assert_allclose(angle_at(a, b, c), angle, atol=1e-9)

    def test_right_angle_is_positive_counter_clockwise(self):
        assert angle_at((1.0, 0.0), (0.0, 0.0), (0.0, 1.0)) == pytest.approx(90.0)
        assert angle_at((0.0, 1.0), (0.0, 0.0), (1.0, 0.0)) == pytest.approx(-90.0)

    def test_swap_negates_sign(self):
        rng = np.random.RandomState(7)
        for _ in range(200):
            a, b, c = rng.uniform(-500, 500, size=(3, 2))
            forward = angle_at(a, b, c)
            backward = angle_at(c, b, a)
            assert forward is not None and backward is not None
            if abs(forward) < 180.0:
                np.testing.assert_allclose(backward, -forward, atol=1e-9)

    def test_range_is_half_open(self):
        rng = np.random.RandomState(3)
        for _ in range(500):
            a, b, c = rng.uniform(-1, 1, size=(3, 2))
            angle = angle_at(a, b, c)
            assert -180.0 < angle <= 180.0

    def test_straight_line_is_plus_180(self):
        assert angle_at((1.0, 0.0), (0.0, 0.0), (-1.0, 0.0)) == 180.0
        assert angle_at((-1.0, 0.0), (0.0, 0.0), (1.0, 0.0)) == 180.0

    def test_nearly_collinear_does_not_produce_nan(self):
        angle = angle_at((1e-12, 0.0), (0.0, 0.0), (1e12, 1e-12))
        assert angle is not None and math.isfinite(angle)

    def test_duplicate_point_returns_none(self):
        assert angle_at((5.0, 5.0), (5.0, 5.0), (9.0, 1.0)) is None
        assert angle_at((9.0, 1.0), (5.0, 5.0), (5.0, 5.0)) is None

    def test_non_finite_returns_none(self):
        assert angle_at((math.inf, 0.0), (0.0, 0.0), (0.0, 1.0)) is None


# ============================================================================
# Test: keypoint presence
# ============================================================================

class TestKeypointPresence:

    def test_mapping_and_model_are_equivalent(self):
        assert keypoint_xy({"x": 1, "y": 2, "score": 0.8}) == (1.0, 2.0)
        assert keypoint_xy(Keypoint(name="left_knee", x=1, y=2, score=0.8)) == (1.0, 2.0)

    def test_missing_score_is_confident(self):
        assert keypoint_xy({"x": 3.0, "y": 4.0}) == (3.0, 4.0)

    def test_low_confidence_is_absent(self):
        assert keypoint_xy({"x": 1.0, "y": 1.0, "score": 0.1}, min_score=0.3) is None
        assert keypoint_xy({"x": 1.0, "y": 1.0, "score": 0.3}, min_score=0.3) == (1.0, 1.0)

    @pytest.mark.parametrize("kp", [
        None,
        {"y": 1.0},
        {"x": "left", "y": 1.0},
        {"x": float("nan"), "y": 1.0},
        {"x": 1.0, "y": 1.0, "score": float("nan")},
    ])
    def test_malformed_is_absent(self, kp):
        assert keypoint_xy(kp) is None


# ============================================================================
# Test: compute_angle_map
# ============================================================================

class TestAngleMap:

    def test_measures_present_joint(self):
        angles = compute_angle_map(_knee_frame(95.0), KNEE_ONLY)
        assert set(angles) == {"left_knee"}
        np.testing.assert_allclose(angles["left_knee"], 95.0, atol=1e-9)

    def test_missing_keypoint_omits_joint(self):
        frame = _knee_frame(95.0)
        del frame["left_ankle"]
        assert compute_angle_map(frame, KNEE_ONLY) == {}

    def test_low_confidence_omits_joint(self):
        assert compute_angle_map(_knee_frame(95.0, score=0.2), KNEE_ONLY, min_score=0.3) == {}
        assert "left_knee" in compute_angle_map(_knee_frame(95.0, score=0.2), KNEE_ONLY, min_score=0.0)

    def test_degenerate_omits_joint(self):
        frame = _knee_frame(95.0)
        frame["left_hip"] = dict(frame["left_knee"])
        assert compute_angle_map(frame, KNEE_ONLY) == {}

    def test_empty_frame(self):
        assert compute_angle_map({}, KNEE_ONLY) == {}
        assert compute_angle_map(None, KNEE_ONLY) == {}
