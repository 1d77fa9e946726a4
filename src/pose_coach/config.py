"""
Configuration constants for the pose_coach validator.

Centralizes data paths, keypoint thresholds, dispatch switches and
service settings. Values can be overridden through environment variables
or a ``.env`` file in the project root.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------
PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent.parent
_ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(_ENV_PATH)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Exercise definitions
# ---------------------------------------------------------------------------
DEFAULT_EXERCISES_PATH = PACKAGE_DIR / "exercises" / "data"
EXERCISES_PATH = Path(
    os.environ.get("POSE_COACH_EXERCISES_PATH") or DEFAULT_EXERCISES_PATH
)

# ---------------------------------------------------------------------------
# Keypoint thresholds
# ---------------------------------------------------------------------------
# Keypoints scored below this are treated as absent for the frame.
KEYPOINT_CONFIDENCE_THRESHOLD: float = float(
    os.environ.get("POSE_COACH_CONFIDENCE_THRESHOLD", "0.3")
)

# ---------------------------------------------------------------------------
# Native / fallback dispatch
# ---------------------------------------------------------------------------
FORCE_FALLBACK: bool = _env_bool("POSE_COACH_FORCE_FALLBACK")

# Maximum angle disagreement (degrees) accepted by the native self-check.
NATIVE_SELF_CHECK_TOLERANCE: float = 1e-3

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------
SESSION_TTL_SECONDS: int = int(os.environ.get("POSE_COACH_SESSION_TTL_SECONDS", "1800"))
LOG_LEVEL: str = os.environ.get("POSE_COACH_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = "%(levelname)s | %(name)s | %(message)s"
