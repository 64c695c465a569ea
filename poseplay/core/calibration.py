"""
Calibration Counter
===================
Debounces per-tick raised-hand flags into discrete raise events and tracks
progress toward the calibration threshold.

Each side is a two-state machine:

    Idle --(raised tick)--> Raised --(cooldown elapsed)--> Idle

Entering Raised counts one raise. The return to Idle happens on a timer that
is not extended by continued detection, so holding a hand up counts once per
cooldown window.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from poseplay.core.gesture_classifier import MovementState

logger = logging.getLogger(__name__)

SIDES = ('left', 'right')


@dataclass
class RaiseCounter:
    """Per-side raise count and debounce state."""
    count: int = 0
    is_currently_raised: bool = False
    raised_until: Optional[float] = None  # Pending return-to-Idle deadline

    def reset(self):
        self.count = 0
        self.is_currently_raised = False
        self.raised_until = None


class CalibrationCounter:
    """
    Counts debounced hand raises per side.

    Usage:
        counter = CalibrationCounter(required_raises=3)
        counter.update(movement_state)     # once per detection tick
        if counter.is_calibrated:
            ...
    """

    def __init__(self, required_raises: int = 3, cooldown: float = 1.5,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            required_raises: Raises needed on each side to complete calibration
            cooldown: Seconds a side stays in Raised before it can count again
            clock: Monotonic time source (seconds)
        """
        self.required_raises = required_raises
        self.cooldown = cooldown
        self._clock = clock

        self.left = RaiseCounter()
        self.right = RaiseCounter()
        self._calibrated = False

    def counter(self, side: str) -> RaiseCounter:
        return self.left if side == 'left' else self.right

    @property
    def is_calibrated(self) -> bool:
        return self._calibrated

    @property
    def left_count(self) -> int:
        return self.left.count

    @property
    def right_count(self) -> int:
        return self.right.count

    def progress(self) -> float:
        """Overall progress in [0, 1], counting each side up to the threshold."""
        if self.required_raises <= 0:
            return 1.0
        done = (min(self.left.count, self.required_raises) +
                min(self.right.count, self.required_raises))
        return done / (2 * self.required_raises)

    def poll(self):
        """Return sides whose cooldown has elapsed to Idle."""
        now = self._clock()
        for side in SIDES:
            state = self.counter(side)
            if state.is_currently_raised and state.raised_until is not None and now >= state.raised_until:
                state.is_currently_raised = False
                state.raised_until = None

    def update(self, movement: Optional[MovementState]) -> List[str]:
        """
        Feed one detection tick.

        Args:
            movement: This tick's movement state, or None when no body was seen

        Returns:
            Sides that registered a new raise event on this tick
        """
        self.poll()

        events = []
        if movement is not None:
            now = self._clock()
            for side in SIDES:
                state = self.counter(side)
                if movement.is_raised(side) and not state.is_currently_raised:
                    state.count += 1
                    state.is_currently_raised = True
                    state.raised_until = now + self.cooldown
                    events.append(side)
                    logger.info("%s hand raise counted (%d/%d)",
                                side.capitalize(), state.count, self.required_raises)

        if (not self._calibrated and
                self.left.count >= self.required_raises and
                self.right.count >= self.required_raises):
            self._calibrated = True
            logger.info("Calibration complete")

        return events

    def reset(self):
        """Zero both sides, cancel pending cooldowns and clear completion."""
        self.left.reset()
        self.right.reset()
        self._calibrated = False
        logger.info("Calibration reset")
