"""
Wrist cursors: one smoothed, fading marker per hand.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from poseplay.core.keypoints import Keypoint, WRIST_FOR_SIDE, find_keypoint


@dataclass
class WristCursor:
    """Continuous overlay marker that chases the mapped wrist position."""
    x: float = 0.0
    y: float = 0.0
    target_x: float = 0.0
    target_y: float = 0.0
    alpha: float = 0.0
    visible: bool = False

    SMOOTHING = 0.3
    FADE_IN = 0.1
    FADE_OUT = 0.05

    def update(self, target: Optional[Tuple[float, float]]):
        """
        Advance one tick.

        Args:
            target: Mapped wrist position, or None when the wrist is absent
        """
        if target is not None:
            self.target_x, self.target_y = target
            if not self.visible:
                # Snap on (re)appearance instead of flying in from a stale spot
                self.x, self.y = self.target_x, self.target_y
            self.alpha = min(1.0, self.alpha + self.FADE_IN)
            self.visible = True
        else:
            self.alpha = max(0.0, self.alpha - self.FADE_OUT)
            self.visible = False

        self.x += (self.target_x - self.x) * self.SMOOTHING
        self.y += (self.target_y - self.y) * self.SMOOTHING

    @property
    def drawable(self) -> bool:
        return self.alpha > 0


class CursorOverlay:
    """Left and right wrist cursors plus the user's visibility toggle."""

    MIN_SCORE = 0.25

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.cursors: Dict[str, WristCursor] = {'left': WristCursor(), 'right': WristCursor()}

    @property
    def left(self) -> WristCursor:
        return self.cursors['left']

    @property
    def right(self) -> WristCursor:
        return self.cursors['right']

    def update(self, keypoints: Sequence[Keypoint],
               mapper: Callable[[float, float], Tuple[float, float]]):
        """Feed the latest keypoints; *mapper* turns camera xy into surface xy."""
        for side, cursor in self.cursors.items():
            wrist = find_keypoint(keypoints, WRIST_FOR_SIDE[side])
            if wrist is not None and wrist.score > self.MIN_SCORE:
                cursor.update(mapper(wrist.x, wrist.y))
            else:
                cursor.update(None)

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled
