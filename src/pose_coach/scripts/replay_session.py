"""
Replay a recorded keypoint sequence through a validator.

Reads a JSON list of frames (joint name -> {x, y, score}), validates each
frame in order and writes a summary: total reps, the frame indices where
reps were counted, and how often each joint was out of band.

Usage:
    pose-coach-replay --exercise bodyweight-squat --frames squat.json --out summary.json
"""

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..config import LOG_FORMAT
from ..exceptions import PoseCoachError
from ..exercises.registry import ExerciseRegistry
from ..validation.dispatch import Validator, create_validator
from ..utils.io_utils import load_frames, save_json

logger = logging.getLogger(__name__)


def replay(validator: Validator, frames: Sequence[Mapping]) -> Dict:
    """Validate ``frames`` in order and summarise the run."""
    rep_frames: List[int] = []
    error_counts: Counter = Counter()
    total_ms = 0.0

    for idx, frame in enumerate(frames):
        result = validator.validate_pose(frame)
        total_ms += validator.performance_ms or 0.0
        if result.rep_detected:
            rep_frames.append(idx)
        error_counts.update(err.joint for err in result.errors)

    n = len(frames)
    return {
        "exercise": validator.exercise_id,
        "kind": validator.kind,
        "frames": n,
        "rep_count": validator.rep_count,
        "rep_frames": rep_frames,
        "error_counts": dict(error_counts),
        "mean_frame_ms": round(total_ms / n, 4) if n else 0.0,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Replay keypoint frames through a validator.")
    ap.add_argument("--exercise", required=True, help="Exercise id")
    ap.add_argument("--frames", required=True, type=Path, help="JSON file of keypoint frames")
    ap.add_argument("--out", default=None, type=Path, help="Write the summary here (default: stdout)")
    ap.add_argument("--exercises", default=None, type=Path,
                    help="Exercise YAML file or directory (default: configured path)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--force-fallback", action="store_true",
                      help="Skip the native validator.")
    mode.add_argument("--no-fallback", action="store_true",
                      help="Fail instead of using the pure-Python validator.")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format=LOG_FORMAT)
    registry = ExerciseRegistry.from_path(args.exercises) if args.exercises else None
    try:
        validator = create_validator(
            args.exercise,
            fallback=not args.no_fallback,
            registry=registry,
            force_fallback=args.force_fallback,
        )
    except PoseCoachError as exc:
        logger.error("%s", exc)
        return 1

    frames = load_frames(args.frames)
    logger.info("Replaying %d frames for '%s' (%s)", len(frames), args.exercise, validator.kind)
    summary = replay(validator, frames)

    if args.out:
        save_json(summary, args.out)
    else:
        print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
