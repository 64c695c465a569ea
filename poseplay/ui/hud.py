"""
Status HUD
==========
Translucent status panel for the animation page (toggle with H).
"""

from typing import List, Optional, Tuple

import cv2
import numpy as np

from poseplay.systems.animation import AnimationStatus


class StatusHUD:
    """Status overlay with a short event log."""

    MAX_EVENTS = 8

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.events: List[Tuple[float, str]] = []

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled

    def log(self, msg: str, t: float):
        self.events.append((t, msg))
        if len(self.events) > self.MAX_EVENTS:
            self.events.pop(0)

    def render(self, frame: np.ndarray, status: AnimationStatus, now: float,
               fps: Optional[float] = None, skipped_ticks: int = 0):
        if not self.enabled or frame.shape[0] < 240 or frame.shape[1] < 280:
            return

        font = cv2.FONT_HERSHEY_SIMPLEX

        overlay = frame.copy()
        cv2.rectangle(overlay, (10, 10), (270, 230), (20, 20, 20), -1)
        cv2.addWeighted(overlay, 0.7, frame, 0.3, 0, frame)

        y = 30
        cv2.putText(frame, "STATUS [H]", (20, y), font, 0.5, (0, 255, 255), 1)
        y += 25

        play_col = (0, 255, 0) if status.playing else (0, 165, 255)
        cv2.putText(frame, f"Theme: {status.theme}  {'PLAY' if status.playing else 'PAUSED'}",
                    (20, y), font, 0.45, play_col, 1)
        y += 22
        cv2.putText(frame, f"Particles: {status.particle_count}  Ripples: {status.ripple_count}",
                    (20, y), font, 0.4, (180, 180, 180), 1)
        y += 20
        cv2.putText(frame, f"Raises L/R: {status.left_raises}/{status.right_raises}",
                    (20, y), font, 0.4, (180, 180, 180), 1)
        y += 20

        if status.last_movement_time is not None:
            idle = max(0.0, now - status.last_movement_time)
            cv2.putText(frame, f"Last movement: {idle:.1f}s ago", (20, y), font, 0.4, (180, 180, 180), 1)
        else:
            cv2.putText(frame, "Last movement: -", (20, y), font, 0.4, (180, 180, 180), 1)
        y += 20

        if fps is not None:
            cv2.putText(frame, f"FPS: {fps:.0f}  Skipped ticks: {skipped_ticks}",
                        (20, y), font, 0.4, (180, 180, 180), 1)
        y += 25

        for evt_t, evt_msg in reversed(self.events[-4:]):
            age = now - evt_t
            alpha = max(0.3, 1.0 - age / 3.0)
            col = tuple(int(c * alpha) for c in (150, 255, 150))
            cv2.putText(frame, f"  {evt_msg}", (20, y), font, 0.35, col, 1)
            y += 16
