"""
Animation Engine
================
Glue between detection snapshots and the particle system.

Detection side (once per new snapshot):
- observe(): remembers the snapshot and, while playing, triggers effects

Render side (once per frame):
- tick(): updates the wrist cursors, draws the active theme and advances
  the simulation by one step
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from poseplay.core.calibration import CalibrationCounter
from poseplay.core.coordinates import map_to_surface
from poseplay.core.keypoints import NOSE, LEFT_WRIST, RIGHT_WRIST
from poseplay.core.pose_engine import PoseSnapshot
from poseplay.systems.cursors import CursorOverlay
from poseplay.systems.particles import EffectCooldown, ParticleSystem
from poseplay.systems.themes import Theme, ThemeRenderer, palette_color

logger = logging.getLogger(__name__)


# Effect kinds
LEFT_HAND = "left_hand"
RIGHT_HAND = "right_hand"
BOTH_HANDS = "both_hands"
BODY_MOVEMENT = "body_movement"


@dataclass(frozen=True)
class AnimationStatus:
    """Read-only status for the surrounding UI."""
    particle_count: int
    ripple_count: int
    theme: str
    playing: bool
    cursors_visible: bool
    left_raises: int = 0
    right_raises: int = 0
    is_calibrated: bool = False
    last_movement_time: Optional[float] = None


class AnimationEngine:
    """Owns the simulation, cursors and renderer for one render surface."""

    # Effect tuning
    HAND_BURST = 10
    BOTH_HANDS_BURST = 15
    WRIST_MIN_SCORE = 0.2
    NOSE_MIN_SCORE = 0.3
    BODY_MOVEMENT_THRESHOLD = 0.3
    BODY_MOVEMENT_MAX_BURST = 8

    def __init__(self, width: int, height: int, theme: Theme = Theme.PARTICLES,
                 max_particles: int = 200, max_ripples: int = 10,
                 effect_cooldown: float = 0.15, show_cursors: bool = True,
                 clock: Callable[[], float] = time.monotonic,
                 rng: Optional[random.Random] = None):
        self.width = width
        self.height = height
        self.theme = Theme.from_name(theme)
        self.playing = True
        self._clock = clock

        rng = rng or random.Random()
        self.system = ParticleSystem(max_particles, max_ripples, rng=rng)
        self.cooldowns = EffectCooldown(effect_cooldown, clock=clock)
        self.cursors = CursorOverlay(enabled=show_cursors)
        self.renderer = ThemeRenderer(width, height, rng=rng)

        self.snapshot = PoseSnapshot()
        self.last_movement_time: Optional[float] = None

    # ---------------------
    # Controls
    # ---------------------
    def set_theme(self, theme):
        """Switch draw strategy; clears live entities."""
        new_theme = Theme.from_name(theme)
        logger.info("Theme %s -> %s", self.theme.value, new_theme.value)
        self.theme = new_theme
        self.system.clear()
        self.renderer.clear()

    def toggle_playing(self) -> bool:
        self.playing = not self.playing
        logger.info("Animation %s", "playing" if self.playing else "paused")
        return self.playing

    def toggle_cursors(self) -> bool:
        enabled = self.cursors.toggle()
        logger.info("Wrist cursors %s", "enabled" if enabled else "disabled")
        return enabled

    def resize(self, width: int, height: int):
        """Follow a render-surface resize; simulation state is kept."""
        self.width = width
        self.height = height
        self.renderer.resize(width, height)
        logger.info("Canvas resized to %dx%d", width, height)

    # ---------------------
    # Detection side
    # ---------------------
    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        return map_to_surface(x, y, self.snapshot.camera_width, self.snapshot.camera_height,
                              self.width, self.height)

    def observe(self, snapshot: PoseSnapshot):
        """Take in a new detection snapshot."""
        self.snapshot = snapshot
        movement = snapshot.movement

        if movement.any_hand_raised:
            self.last_movement_time = snapshot.timestamp

        if not self.playing or not snapshot.body_detected:
            return

        if movement.left_hand_raised:
            self.trigger_effect(LEFT_HAND)
        if movement.right_hand_raised:
            self.trigger_effect(RIGHT_HAND)
        if movement.both_hands_up:
            self.trigger_effect(BOTH_HANDS)
        if movement.body_movement > self.BODY_MOVEMENT_THRESHOLD:
            self.trigger_effect(BODY_MOVEMENT, movement.body_movement)

    def _mapped_keypoint(self, name: str, min_score: float) -> Optional[Tuple[float, float]]:
        kp = self.snapshot.keypoint(name)
        if kp is None or kp.score <= min_score:
            return None
        return self.map_point(kp.x, kp.y)

    def trigger_effect(self, kind: str, intensity: float = 1.0) -> bool:
        """
        Spawn the visuals for one effect kind at the current pose.

        Returns:
            True if the effect was accepted (not rate limited, surface present)
        """
        if self.width <= 0 or self.height <= 0:
            return False

        theme = self.theme
        if kind in (LEFT_HAND, RIGHT_HAND):
            index = 0 if kind == LEFT_HAND else 1
            point = self._mapped_keypoint(LEFT_WRIST if kind == LEFT_HAND else RIGHT_WRIST,
                                          self.WRIST_MIN_SCORE)
            if point is None or not self.cooldowns.try_trigger(kind):
                return False
            self.system.spawn_burst(point[0], point[1], palette_color(theme, index), self.HAND_BURST)
            if theme == Theme.RIPPLES:
                self.system.spawn_ripple(point[0], point[1], palette_color(theme, index))

        elif kind == BOTH_HANDS:
            left = self._mapped_keypoint(LEFT_WRIST, self.WRIST_MIN_SCORE)
            right = self._mapped_keypoint(RIGHT_WRIST, self.WRIST_MIN_SCORE)
            if left is None or right is None or not self.cooldowns.try_trigger(kind):
                return False
            center = ((left[0] + right[0]) / 2, (left[1] + right[1]) / 2)
            self.system.spawn_ripple(center[0], center[1], palette_color(theme, 2))
            self.system.spawn_burst(left[0], left[1], palette_color(theme, 0), self.BOTH_HANDS_BURST)
            self.system.spawn_burst(right[0], right[1], palette_color(theme, 1), self.BOTH_HANDS_BURST)

        elif kind == BODY_MOVEMENT:
            nose = self._mapped_keypoint(NOSE, self.NOSE_MIN_SCORE)
            if nose is None or not self.cooldowns.try_trigger(kind):
                return False
            count = int(intensity * self.BODY_MOVEMENT_MAX_BURST)
            self.system.spawn_burst(nose[0], nose[1], palette_color(theme, 3), count)

        else:
            logger.warning("Unknown effect kind: %s", kind)
            return False

        logger.debug("Effect %s -> %d particles, %d ripples",
                     kind, self.system.particle_count, self.system.ripple_count)
        return True

    # ---------------------
    # Render side
    # ---------------------
    def tick(self) -> np.ndarray:
        """Update cursors, draw the frame and advance the simulation."""
        self.cursors.update(self.snapshot.keypoints, self.map_point)
        frame = self.renderer.render(self.theme, self.system.particles,
                                     self.system.ripples, self.cursors)
        self.system.advance()
        return frame

    def status(self, calibration: Optional[CalibrationCounter] = None) -> AnimationStatus:
        return AnimationStatus(
            particle_count=self.system.particle_count,
            ripple_count=self.system.ripple_count,
            theme=self.theme.value,
            playing=self.playing,
            cursors_visible=self.cursors.enabled,
            left_raises=calibration.left_count if calibration else 0,
            right_raises=calibration.right_count if calibration else 0,
            is_calibrated=calibration.is_calibrated if calibration else False,
            last_movement_time=self.last_movement_time,
        )
