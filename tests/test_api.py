"""Tests for the HTTP service and its expiring session cache."""

import math
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pose_coach.api.cache import SessionCache
from pose_coach.api.main import app


# ============================================================================
# Fixtures
# ============================================================================

class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _knee_keypoints(angle_deg: float, score: float = 0.9) -> dict:
    rad = math.radians(angle_deg)
    return {
        "left_ankle": {"x": 260.0, "y": 300.0, "score": score},
        "left_knee": {"x": 200.0, "y": 300.0, "score": score},
        "left_hip": {"x": 200.0 + 60.0 * math.cos(rad), "y": 300.0 + 60.0 * math.sin(rad), "score": score},
    }


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _start(client, exercise_id: str = "bodyweight-squat") -> str:
    resp = client.post("/api/sessions", json={"exercise_id": exercise_id})
    assert resp.status_code == 201, resp.text
    return resp.json()["session_id"]


# ============================================================================
# Test: endpoints
# ============================================================================

class TestEndpoints:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert isinstance(body["native"], bool)

    def test_list_exercises(self, client):
        ids = {e["id"] for e in client.get("/api/exercises").json()}
        assert {"bodyweight-squat", "push-ups"} <= ids

    def test_create_session(self, client):
        resp = client.post("/api/sessions", json={"exercise_id": "bodyweight-squat"})
        body = resp.json()
        assert resp.status_code == 201
        assert body["exercise_id"] == "bodyweight-squat"
        assert body["kind"] in ("native", "fallback")

    def test_unknown_exercise(self, client):
        resp = client.post("/api/sessions", json={"exercise_id": "moonwalk"})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "UNKNOWN_EXERCISE"

    def test_frames_count_reps(self, client):
        session_id = _start(client)
        results = [
            client.post(f"/api/sessions/{session_id}/frames", json={"keypoints": _knee_keypoints(a)}).json()
            for a in (170.0, 90.0, 90.0, 170.0, 95.0)
        ]
        assert [r["repDetected"] for r in results] == [False, True, False, False, True]
        assert results[-1]["repCount"] == 2
        assert set(results[0]["angles"]) == {"left_knee"}
        assert results[0]["angles"]["left_knee"] == pytest.approx(170.0, abs=1e-6)

    def test_frame_reports_form_errors(self, client):
        session_id = _start(client)
        body = client.post(
            f"/api/sessions/{session_id}/frames", json={"keypoints": _knee_keypoints(40.0)},
        ).json()
        assert [e["joint"] for e in body["errors"]] == ["left_knee"]
        assert "70°-180°" in body["errors"][0]["message"]

    def test_malformed_keypoints_are_ignored(self, client):
        session_id = _start(client)
        keypoints = _knee_keypoints(120.0)
        keypoints["nose"] = {"x": 1.0, "score": 0.1}
        keypoints["right_knee"] = {"x": 5.0, "y": 5.0, "score": 7.5}
        keypoints["right_hip"] = {"x": "left", "y": None}
        keypoints["right_ankle"] = None
        resp = client.post(f"/api/sessions/{session_id}/frames", json={"keypoints": keypoints})
        assert resp.status_code == 200
        body = resp.json()
        assert set(body["angles"]) == {"left_knee"}
        assert body["angles"]["left_knee"] == pytest.approx(120.0, abs=1e-6)

    def test_invalid_body_uses_error_envelope(self, client):
        session_id = _start(client)
        resp = client.post(f"/api/sessions/{session_id}/frames", json={"points": {}})
        assert resp.status_code == 422
        body = resp.json()
        assert body["error_code"] == "INVALID_REQUEST"
        assert "keypoints" in body["message"]

    def test_reset(self, client):
        session_id = _start(client)
        client.post(f"/api/sessions/{session_id}/frames", json={"keypoints": _knee_keypoints(90.0)})
        resp = client.post(f"/api/sessions/{session_id}/reset")
        assert resp.json() == {"session_id": session_id, "repCount": 0}

    def test_delete_and_missing_session(self, client):
        session_id = _start(client)
        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404
        resp = client.post(f"/api/sessions/{session_id}/frames", json={"keypoints": {}})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_expired_session(self, client, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(app.state, "sessions", SessionCache(ttl_seconds=60, clock=clock))
        session_id = _start(client)
        clock.advance(61)
        resp = client.post(f"/api/sessions/{session_id}/frames", json={"keypoints": {}})
        assert resp.status_code == 404


# ============================================================================
# Test: SessionCache
# ============================================================================

class TestSessionCache:

    def test_put_get(self):
        cache = SessionCache(ttl_seconds=10, clock=FakeClock())
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert cache.get("b") is None

    def test_expiry(self):
        clock = FakeClock()
        cache = SessionCache(ttl_seconds=10, clock=clock)
        cache.put("a", 1)
        clock.advance(10)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_get_refreshes_expiry(self):
        clock = FakeClock()
        cache = SessionCache(ttl_seconds=10, clock=clock)
        cache.put("a", 1)
        for _ in range(5):
            clock.advance(8)
            assert cache.get("a") == 1

    def test_purge_expired(self):
        clock = FakeClock()
        cache = SessionCache(ttl_seconds=10, clock=clock)
        cache.put("old", 1)
        clock.advance(5)
        cache.put("new", 2)
        clock.advance(6)
        assert cache.purge_expired() == 1
        assert len(cache) == 1
        assert cache.get("new") == 2

    def test_delete(self):
        cache = SessionCache(ttl_seconds=10, clock=FakeClock())
        cache.put("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            SessionCache(ttl_seconds=0)
