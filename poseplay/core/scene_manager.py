"""
Scene Manager Module
====================
Page flow for the app: a linear list of scenes with slide transitions.

Features:
- Scenes request transitions by returning a scene name from update/handle_key
- Slide animation between pages
- Page indicator dots
- Resize propagation
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import cv2
import numpy as np

from poseplay.core.pose_engine import PoseSnapshot

logger = logging.getLogger(__name__)


@dataclass
class PageSlide:
    """An in-progress slide from one page to the next."""
    from_scene: str
    to_scene: str
    forward: bool
    elapsed: float = 0.0
    duration: float = 0.33  # seconds

    @property
    def done(self) -> bool:
        return self.elapsed >= self.duration


def ease_out(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return 1.0 - (1.0 - t) ** 3


def _paste_shifted(dest: np.ndarray, src: np.ndarray, dx: int):
    """Copy *src* into *dest* moved *dx* pixels right (negative = left), cropping."""
    w = dest.shape[1]
    if abs(dx) >= w:
        return
    if dx >= 0:
        dest[:, dx:] = src[:, :w - dx]
    else:
        dest[:, :w + dx] = src[:, -dx:]


class Scene(ABC):
    """Base class for app pages."""

    # Detection tick period wanted while this scene is active (seconds)
    detection_interval: float = 0.05

    def __init__(self):
        self.manager: Optional['SceneManager'] = None
        self.name: str = ""

    @property
    def width(self) -> int:
        return self.manager.width if self.manager else 0

    @property
    def height(self) -> int:
        return self.manager.height if self.manager else 0

    def on_enter(self, from_scene: Optional[str] = None):
        """Called when entering this scene."""
        pass

    def on_exit(self, to_scene: Optional[str] = None):
        """Called when leaving this scene."""
        pass

    def on_resize(self, width: int, height: int):
        pass

    def handle_key(self, key: int) -> Optional[str]:
        """Handle a key press. Return a scene name to switch to, or None."""
        return None

    @abstractmethod
    def update(self, snapshot: PoseSnapshot, delta_time: float) -> Optional[str]:
        """
        Update scene logic once per frame.

        Returns:
            Scene name to transition to, or None
        """
        pass

    @abstractmethod
    def render(self, frame: np.ndarray):
        """Render the scene to the frame."""
        pass

    def get_indicator_label(self) -> str:
        return self.name.upper()


class SceneManager:
    """Owns the pages, the current one and the slide between them."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

        self.scenes: Dict[str, Scene] = {}
        self.scene_order: List[str] = []
        self.current_scene: Optional[str] = None

        self.slide: Optional[PageSlide] = None
        self.show_indicators = True

    @property
    def scene(self) -> Optional[Scene]:
        return self.scenes.get(self.current_scene) if self.current_scene else None

    @property
    def sliding(self) -> bool:
        return self.slide is not None

    def add_scene(self, name: str, scene: Scene):
        scene.manager = self
        scene.name = name
        self.scenes[name] = scene
        self.scene_order.append(name)

    def _require(self, name: str):
        if name not in self.scenes:
            raise ValueError(f"Unknown scene '{name}'")

    def set_scene(self, name: str):
        """Switch immediately, no slide."""
        self._require(name)
        previous = self.current_scene
        if previous is not None:
            self.scenes[previous].on_exit(name)
        self.current_scene = name
        self.scene.on_enter(previous)
        logger.info("Scene: %s -> %s", previous, name)

    def go_to(self, name: str):
        """Slide over to *name*; ignored while a slide is running."""
        self._require(name)
        if self.sliding or name == self.current_scene:
            return

        previous = self.current_scene
        if previous is not None:
            order = self.scene_order
            self.slide = PageSlide(previous, name, forward=order.index(name) > order.index(previous))
        self.set_scene(name)

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        for scene in self.scenes.values():
            scene.on_resize(width, height)

    def handle_key(self, key: int):
        if self.scene is None:
            return
        target = self.scene.handle_key(key)
        if target:
            self.go_to(target)

    def update(self, snapshot: PoseSnapshot, delta_time: float):
        if self.slide is not None:
            self.slide.elapsed += delta_time
            if self.slide.done:
                self.slide = None

        if self.scene is None:
            return
        target = self.scene.update(snapshot, delta_time)
        if target:
            self.go_to(target)

    def render(self, frame: np.ndarray):
        if self.slide is not None and self.slide.from_scene in self.scenes:
            self._render_slide(frame, self.slide)
        elif self.scene is not None:
            self.scene.render(frame)

        if self.show_indicators:
            self._draw_page_dots(frame)

    def _render_slide(self, frame: np.ndarray, slide: PageSlide):
        outgoing = np.zeros_like(frame)
        incoming = np.zeros_like(frame)
        self.scenes[slide.from_scene].render(outgoing)
        self.scenes[slide.to_scene].render(incoming)

        w = frame.shape[1]
        shift = int(w * ease_out(slide.elapsed / slide.duration))
        direction = -1 if slide.forward else 1

        frame[:] = 0
        _paste_shifted(frame, outgoing, direction * shift)
        _paste_shifted(frame, incoming, direction * (shift - w))

    def _draw_page_dots(self, frame: np.ndarray):
        h, w = frame.shape[:2]
        if self.current_scene is None or h < 60:
            return

        y = h - 25
        spacing = 30
        first_x = (w - (len(self.scene_order) - 1) * spacing) // 2

        label = self.scene.get_indicator_label()
        font = cv2.FONT_HERSHEY_SIMPLEX
        (label_w, _), _ = cv2.getTextSize(label, font, 0.5, 1)
        cv2.putText(frame, label, ((w - label_w) // 2, y - 20), font, 0.5, (160, 150, 150), 1)

        for i, name in enumerate(self.scene_order):
            centre = (first_x + i * spacing, y)
            if name == self.current_scene:
                cv2.circle(frame, centre, 6, (220, 200, 200), -1)
            else:
                cv2.circle(frame, centre, 6, (100, 80, 80), 2)
