"""
Animation Scene
===============
Second page: the live particle animation driven by the player's movements.

Features:
- Effects triggered from each new detection snapshot
- Four themes (1-4 to pick, T to cycle)
- Play/pause, wrist cursors, camera preview and HUD toggles
"""

import logging
import time
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from poseplay.core.calibration import CalibrationCounter
from poseplay.core.display import Keys
from poseplay.core.pose_engine import PoseConfig, PoseSnapshot, render_pip
from poseplay.core.scene_manager import Scene
from poseplay.systems.animation import AnimationEngine
from poseplay.systems.themes import Theme
from poseplay.ui.hud import StatusHUD

logger = logging.getLogger(__name__)

THEME_KEYS = {
    Keys.ONE: Theme.PARTICLES,
    Keys.TWO: Theme.RIPPLES,
    Keys.THREE: Theme.FIREWORKS,
    Keys.FOUR: Theme.FLOWERS,
}


class AnimationScene(Scene):
    """
    Animation studio page.

    Controls:
    - 1-4: choose theme, T: next theme
    - SPACE: play/pause
    - C: wrist cursors, V: camera preview, H: HUD
    - R: reset calibration, B: back to calibration
    """

    detection_interval = PoseConfig.ANIMATION_INTERVAL

    def __init__(self, engine: AnimationEngine,
                 counter: Optional[CalibrationCounter] = None,
                 hud: Optional[StatusHUD] = None,
                 show_preview: bool = False,
                 pip_size: Tuple[int, int] = (240, 180),
                 clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.engine = engine
        self.counter = counter
        self.hud = hud or StatusHUD()
        self.show_preview = show_preview
        self.pip_size = pip_size
        self._clock = clock

        self._last_sequence = 0
        self._frame: Optional[np.ndarray] = None

        # Filled in by the app each frame
        self.fps: Optional[float] = None
        self.skipped_ticks = 0

    def get_indicator_label(self) -> str:
        return "ANIMATION"

    def on_enter(self, from_scene: Optional[str] = None):
        self.hud.log("Animation started", self._clock())

    def on_resize(self, width: int, height: int):
        self.engine.resize(width, height)

    def handle_key(self, key: int) -> Optional[str]:
        now = self._clock()

        if key in THEME_KEYS:
            self.engine.set_theme(THEME_KEYS[key])
            self.hud.log(f"Theme: {self.engine.theme.value}", now)
        elif key == Keys.T:
            self.engine.set_theme(self.engine.theme.next())
            self.hud.log(f"Theme: {self.engine.theme.value}", now)
        elif key == Keys.SPACE:
            playing = self.engine.toggle_playing()
            self.hud.log("Playing" if playing else "Paused", now)
        elif key == Keys.C:
            enabled = self.engine.toggle_cursors()
            self.hud.log(f"Wrist cursors {'on' if enabled else 'off'}", now)
        elif key == Keys.V:
            self.show_preview = not self.show_preview
        elif key == Keys.H:
            self.hud.toggle()
        elif key == Keys.R:
            if self.counter is not None:
                self.counter.reset()
            return "calibration"
        elif key == Keys.B:
            return "calibration"
        return None

    def update(self, snapshot: PoseSnapshot, delta_time: float) -> Optional[str]:
        if snapshot.sequence != self._last_sequence:
            self._last_sequence = snapshot.sequence
            self.engine.observe(snapshot)

        self._frame = self.engine.tick()
        return None

    def render(self, frame: np.ndarray):
        if self._frame is None or self._frame.size == 0:
            frame[:] = self.engine.renderer.BG_COLOR[::-1]
        elif self._frame.shape == frame.shape:
            frame[:] = self._frame
        else:
            # Surface changed size since the last tick
            frame[:] = cv2.resize(self._frame, (frame.shape[1], frame.shape[0]))

        if self.show_preview:
            render_pip(frame, self.engine.snapshot, self.pip_size[0], self.pip_size[1])

        self.hud.render(frame, self.engine.status(self.counter), self._clock(),
                        fps=self.fps, skipped_ticks=self.skipped_ticks)
