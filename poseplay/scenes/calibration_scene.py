"""
Calibration Scene
=================
First page: the player raises each hand above their head until both sides
reach the required count.

Features:
- Mirrored camera view with the detected skeleton
- Per-side raise counts with progress bars
- Reset (R), debug labels (D), start the animation once calibrated (ENTER)
"""

import logging
from typing import Optional

import cv2
import numpy as np

from poseplay.core.calibration import CalibrationCounter
from poseplay.core.display import Keys
from poseplay.core.pose_engine import PoseConfig, PoseSnapshot, draw_skeleton
from poseplay.core.scene_manager import Scene

logger = logging.getLogger(__name__)


class CalibrationScene(Scene):
    """
    Movement test page.

    Controls:
    - Raise left/right hand above the head to count a raise
    - R resets the counts
    - D toggles keypoint labels
    - ENTER continues to the animation once both sides are done
    """

    detection_interval = PoseConfig.CALIBRATION_INTERVAL

    BG_COLOR = (30, 20, 20)
    PANEL_WIDTH = 340

    def __init__(self, counter: CalibrationCounter, debug: bool = False):
        super().__init__()
        self.counter = counter
        self.debug = debug

        self.snapshot = PoseSnapshot()
        self._last_sequence = 0

        # UI state
        self.message = ""
        self.message_time = 0.0
        self.message_duration = 2.0

    def on_enter(self, from_scene: Optional[str] = None):
        if self.counter.is_calibrated:
            self._show_message("Calibrated - press ENTER to start")
        else:
            self._show_message("Raise each hand above your head")

    def _show_message(self, text: str):
        self.message = text
        self.message_time = 0.0

    def get_indicator_label(self) -> str:
        return "CALIBRATION"

    def handle_key(self, key: int) -> Optional[str]:
        if key == Keys.R:
            self.counter.reset()
            self._show_message("Calibration reset")
        elif key == Keys.D:
            self.debug = not self.debug
        elif key == Keys.RETURN:
            if self.counter.is_calibrated:
                return "animation"
            self._show_message("Complete the movement tests first")
        return None

    def update(self, snapshot: PoseSnapshot, delta_time: float) -> Optional[str]:
        if self.message:
            self.message_time += delta_time
            if self.message_time >= self.message_duration:
                self.message = ""

        if snapshot.sequence == self._last_sequence:
            # No new detection; let pending cooldowns expire
            self.counter.poll()
            return None

        self._last_sequence = snapshot.sequence
        self.snapshot = snapshot

        was_calibrated = self.counter.is_calibrated
        movement = snapshot.movement if snapshot.body_detected else None
        for side in self.counter.update(movement):
            self._show_message(f"{side.capitalize()} hand raise detected")

        if self.counter.is_calibrated and not was_calibrated:
            self._show_message("Calibration complete - press ENTER to start")
        return None

    # ---------------------
    # Rendering
    # ---------------------
    def render(self, frame: np.ndarray):
        frame[:] = self.BG_COLOR
        h, w = frame.shape[:2]

        panel_w = min(self.PANEL_WIDTH, w // 2)
        self._render_camera(frame, 0, 0, w - panel_w, h)
        self._render_panel(frame, w - panel_w, panel_w, h)

        if self.message:
            font = cv2.FONT_HERSHEY_SIMPLEX
            (tw, _), _ = cv2.getTextSize(self.message, font, 0.7, 2)
            x = max(10, (w - panel_w - tw) // 2)
            cv2.putText(frame, self.message, (x, 40), font, 0.7, (255, 255, 255), 2)

    def _render_camera(self, frame: np.ndarray, x: int, y: int, area_w: int, area_h: int):
        if area_w <= 0 or area_h <= 0:
            return

        if self.snapshot.frame is None:
            cv2.putText(frame, "Waiting for camera...", (x + 20, y + area_h // 2),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (150, 150, 160), 2)
            return

        cam = self.snapshot.frame.copy()
        draw_skeleton(cam, self.snapshot.keypoints, label=self.debug)
        cam = cv2.flip(cam, 1)

        # Fit preserving aspect ratio
        cam_h, cam_w = cam.shape[:2]
        scale = min(area_w / cam_w, area_h / cam_h)
        out_w, out_h = max(1, int(cam_w * scale)), max(1, int(cam_h * scale))
        cam = cv2.resize(cam, (out_w, out_h))

        ox = x + (area_w - out_w) // 2
        oy = y + (area_h - out_h) // 2
        frame[oy:oy + out_h, ox:ox + out_w] = cam

    def _render_panel(self, frame: np.ndarray, x: int, panel_w: int, h: int):
        if panel_w < 120:
            return

        font = cv2.FONT_HERSHEY_SIMPLEX
        overlay = frame.copy()
        cv2.rectangle(overlay, (x, 0), (x + panel_w, h), (45, 30, 30), -1)
        cv2.addWeighted(overlay, 0.85, frame, 0.15, 0, frame)

        px = x + 20
        y = 40
        cv2.putText(frame, "Camera Calibration", (px, y), font, 0.7, (255, 255, 255), 2)
        y += 40

        # System status
        camera_ready = self.snapshot.frame is not None
        person = self.snapshot.body_detected
        cv2.putText(frame, f"Camera: {'Ready' if camera_ready else 'Loading...'}", (px, y),
                    font, 0.5, (0, 255, 0) if camera_ready else (0, 165, 255), 1)
        y += 25
        cv2.putText(frame, f"Person detected: {'Yes' if person else 'No'}", (px, y),
                    font, 0.5, (0, 255, 0) if person else (150, 150, 160), 1)
        y += 40

        cv2.putText(frame, "Raise each hand above your head:", (px, y), font, 0.45, (200, 200, 200), 1)
        y += 30

        bar_w = panel_w - 40
        required = self.counter.required_raises
        for label, count, raised in (
                ("Left hand", self.counter.left_count, self.counter.left.is_currently_raised),
                ("Right hand", self.counter.right_count, self.counter.right.is_currently_raised)):
            done = count >= required
            color = (0, 255, 0) if done else ((0, 255, 255) if raised else (220, 220, 220))
            cv2.putText(frame, f"{label}: {count}/{required}", (px, y), font, 0.55, color, 1)
            y += 12
            self._draw_bar(frame, px, y, bar_w, 10, min(1.0, count / required) if required > 0 else 1.0, color)
            y += 35

        # Overall progress
        cv2.putText(frame, f"Progress: {int(self.counter.progress() * 100)}%", (px, y),
                    font, 0.5, (200, 200, 200), 1)
        y += 12
        self._draw_bar(frame, px, y, bar_w, 14, self.counter.progress(), (255, 200, 100))
        y += 50

        if self.counter.is_calibrated:
            cv2.putText(frame, "ENTER: Start Animation!", (px, y), font, 0.6, (0, 255, 0), 2)
        else:
            cv2.putText(frame, "Complete tests first", (px, y), font, 0.6, (120, 120, 130), 1)
        y += 30
        cv2.putText(frame, "R: Reset  D: Debug  Q: Quit", (px, y), font, 0.45, (150, 150, 160), 1)

        if self.debug:
            y += 35
            cv2.putText(frame, f"Keypoints: {len(self.snapshot.keypoints)}", (px, y),
                        font, 0.4, (180, 180, 180), 1)
            y += 18
            cv2.putText(frame, f"Tick: #{self.snapshot.sequence}", (px, y), font, 0.4, (180, 180, 180), 1)

    @staticmethod
    def _draw_bar(frame: np.ndarray, x: int, y: int, w: int, h: int, fraction: float, color):
        cv2.rectangle(frame, (x, y), (x + w, y + h), (80, 80, 90), 1)
        fill = int((w - 2) * max(0.0, min(1.0, fraction)))
        if fill > 0:
            cv2.rectangle(frame, (x + 1, y + 1), (x + 1 + fill, y + h - 1), color, -1)
