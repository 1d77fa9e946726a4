"""
Rep Detector.

Two-state latch on the exercise's trigger joint. A rep is counted on the
Unlatched -> Latched edge only; the same threshold releases the latch.
"""

import logging
from typing import Mapping

from ..exercises.schema import RepTrigger

logger = logging.getLogger(__name__)


class RepDetector:
    """Counts repetitions from successive angle maps."""

    def __init__(self, trigger: RepTrigger):
        self.trigger = trigger
        self.rep_count = 0
        self.latched = False

    def update(self, angle_map: Mapping[str, float]) -> bool:
        """Advance the latch with one frame; return True if a rep was counted.

        A frame without the trigger joint leaves the latch untouched.
        """
        angle = angle_map.get(self.trigger.joint)
        if angle is None:
            return False

        triggered = self.trigger.is_triggered(angle)
        if triggered and not self.latched:
            self.latched = True
            self.rep_count += 1
            logger.debug(
                "Rep %d detected (%s=%.1f, %s %.1f)",
                self.rep_count, self.trigger.joint, angle,
                self.trigger.direction, self.trigger.threshold,
            )
            return True
        if not triggered and self.latched:
            self.latched = False
        return False

    def reset(self) -> None:
        self.rep_count = 0
        self.latched = False
