"""
Theme Renderer
==============
Draws the shared particle / ripple / cursor state in one of several styles.

Themes only choose how entities are drawn; they never touch simulation
state. Everything is drawn with OpenCV onto a persistent BGR backbuffer that
is faded toward the background each frame, which leaves soft trails.
"""

import math
import random
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import cv2
import numpy as np

from poseplay.systems.cursors import CursorOverlay, WristCursor
from poseplay.systems.particles import Particle, Ripple


class Theme(Enum):
    """Built-in visual themes."""
    PARTICLES = "particles"
    RIPPLES = "ripples"
    FIREWORKS = "fireworks"
    FLOWERS = "flowers"

    @classmethod
    def from_name(cls, name) -> 'Theme':
        """Look up a theme by value, falling back to PARTICLES."""
        if isinstance(name, Theme):
            return name
        for theme in cls:
            if theme.value == name:
                return theme
        return cls.PARTICLES

    def next(self) -> 'Theme':
        members = list(Theme)
        return members[(members.index(self) + 1) % len(members)]


# RGB colour palettes per theme (ripple colours carry an alpha)
PALETTES: Dict[Theme, List[Tuple[int, ...]]] = {
    Theme.PARTICLES: [(255, 100, 150), (100, 200, 255), (150, 255, 100), (255, 200, 50)],
    Theme.RIPPLES: [(100, 200, 255, 100), (255, 100, 150, 100), (150, 255, 100, 100)],
    Theme.FIREWORKS: [(255, 50, 50), (50, 255, 50), (50, 50, 255), (255, 255, 50), (255, 50, 255)],
    Theme.FLOWERS: [(255, 100, 150), (255, 200, 100), (150, 100, 255), (100, 255, 150)],
}


def palette_color(theme: Theme, index: int) -> Tuple[int, ...]:
    colors = PALETTES.get(theme) or PALETTES[Theme.PARTICLES]
    return colors[index % len(colors)]


def _bgr(rgb, alpha: float = 1.0) -> Tuple[int, int, int]:
    """RGB colour scaled by alpha, as an OpenCV BGR tuple."""
    alpha = max(0.0, min(1.0, alpha))
    r, g, b = rgb[:3]
    return int(b * alpha), int(g * alpha), int(r * alpha)


# =====================
# DRAW STRATEGIES
# =====================
def draw_particles(frame: np.ndarray, particles: Iterable[Particle],
                   ripples: Iterable[Ripple], rng: random.Random):
    for p in particles:
        color = _bgr(p.color, p.life)
        radius = max(1, int(p.size / 2))
        cv2.circle(frame, (int(p.x), int(p.y)), radius, color, -1, cv2.LINE_AA)

        if len(p.trail) > 1:
            pts = np.array([(int(tx), int(ty)) for tx, ty in p.trail], dtype=np.int32)
            cv2.polylines(frame, [pts], False, _bgr(p.color, p.life * 0.5), 2, cv2.LINE_AA)


def draw_ripples(frame: np.ndarray, particles: Iterable[Particle],
                 ripples: Iterable[Ripple], rng: random.Random):
    for r in ripples:
        opacity = r.life * (r.color[3] / 255.0 if len(r.color) > 3 else 1.0)
        radius = max(1, int(r.radius))
        cv2.circle(frame, (int(r.x), int(r.y)), radius, _bgr(r.color, opacity), 3, cv2.LINE_AA)


def draw_fireworks(frame: np.ndarray, particles: Iterable[Particle],
                   ripples: Iterable[Ripple], rng: random.Random):
    particles = list(particles)
    draw_particles(frame, particles, ripples, rng)

    # Sparkles around young particles
    for p in particles:
        if p.life > 0.7 and rng.random() < 0.1:
            sx = int(p.x + rng.uniform(-10, 10))
            sy = int(p.y + rng.uniform(-10, 10))
            cv2.circle(frame, (sx, sy), 2, _bgr((255, 255, 255), p.life), -1, cv2.LINE_AA)


def draw_flowers(frame: np.ndarray, particles: Iterable[Particle],
                 ripples: Iterable[Ripple], rng: random.Random):
    petal_count = 6
    for p in particles:
        color = _bgr(p.color, p.life)
        petal_size = p.size * 0.8
        petal_radius = max(1, int(petal_size / 2))

        for i in range(petal_count):
            angle = (i / petal_count) * 2 * math.pi
            px = p.x + math.cos(angle) * petal_size * 0.5
            py = p.y + math.sin(angle) * petal_size * 0.5
            cv2.circle(frame, (int(px), int(py)), petal_radius, color, -1, cv2.LINE_AA)

        center_radius = max(1, int(p.size * 0.2))
        cv2.circle(frame, (int(p.x), int(p.y)), center_radius, _bgr((255, 255, 100), p.life), -1, cv2.LINE_AA)


DRAWERS = {
    Theme.PARTICLES: draw_particles,
    Theme.RIPPLES: draw_ripples,
    Theme.FIREWORKS: draw_fireworks,
    Theme.FLOWERS: draw_flowers,
}


# =====================
# RENDERER
# =====================
class ThemeRenderer:
    """Persistent backbuffer plus theme dispatch."""

    BG_COLOR = (20, 20, 40)         # RGB
    FADE_ALPHA = 20 / 255.0         # Background wash per frame

    # Cursor colours (RGB)
    CURSOR_COLORS = {'left': (255, 100, 150), 'right': (100, 200, 255)}
    CURSOR_RADIUS = 18

    def __init__(self, width: int, height: int, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.width = 0
        self.height = 0
        self.canvas = np.zeros((0, 0, 3), dtype=np.uint8)
        self._background = self.canvas
        self.resize(width, height)

    def resize(self, width: int, height: int):
        """Recreate the backbuffer at the new size."""
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self._background = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self._background[:] = _bgr(self.BG_COLOR)
        self.canvas = self._background.copy()

    def clear(self):
        np.copyto(self.canvas, self._background)

    def render(self, theme: Theme, particles: List[Particle], ripples: List[Ripple],
               cursors: Optional[CursorOverlay] = None) -> np.ndarray:
        """
        Draw one frame.

        Returns:
            A new BGR frame; the backbuffer keeps the faded history
        """
        if self.canvas.size == 0:
            return self.canvas.copy()

        cv2.addWeighted(self.canvas, 1.0 - self.FADE_ALPHA,
                        self._background, self.FADE_ALPHA, 0, dst=self.canvas)

        drawer = DRAWERS.get(Theme.from_name(theme), draw_particles)
        drawer(self.canvas, particles, ripples, self.rng)

        frame = self.canvas.copy()
        if cursors is not None and cursors.enabled:
            for side, cursor in cursors.cursors.items():
                self._draw_cursor(frame, cursor, self.CURSOR_COLORS[side], side[0].upper())
        return frame

    def _draw_cursor(self, frame: np.ndarray, cursor: WristCursor, rgb, label: str):
        if not cursor.drawable:
            return

        cx, cy = int(cursor.x), int(cursor.y)
        overlay = frame.copy()
        cv2.circle(overlay, (cx, cy), self.CURSOR_RADIUS, _bgr(rgb), 3, cv2.LINE_AA)
        cv2.circle(overlay, (cx, cy), self.CURSOR_RADIUS // 3, _bgr(rgb), -1, cv2.LINE_AA)
        cv2.putText(overlay, label, (cx + self.CURSOR_RADIUS + 4, cy + 5),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        cv2.addWeighted(overlay, cursor.alpha, frame, 1.0 - cursor.alpha, 0, dst=frame)
