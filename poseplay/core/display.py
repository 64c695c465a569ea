"""
Display
=======
Pygame window that presents the BGR frames drawn by the scenes.

- Resizable window or desktop-sized fullscreen (F11)
- Size changes are reported so the animation can rebuild its backbuffer
- Frame pacing with pygame.time.Clock
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pygame

logger = logging.getLogger(__name__)


@dataclass
class DisplayEvents:
    """What happened in the window since the last poll."""
    quit: bool = False
    keys: List[int] = field(default_factory=list)
    resized: Optional[Tuple[int, int]] = None


class AnimationDisplay:
    """The app window. Scenes draw at ``size``; ``present`` puts a frame on screen."""

    def __init__(self, size: Tuple[int, int] = (1280, 720), title: str = "Poseplay",
                 fullscreen: bool = False, max_fps: int = 60):
        pygame.init()
        pygame.display.set_caption(title)

        self.windowed_size = tuple(size)
        self.size = self.windowed_size
        self.max_fps = max_fps  # 0 = no cap
        self.fullscreen = False
        self.open = True
        self.clock = pygame.time.Clock()

        self._apply_mode(fullscreen)

    def _apply_mode(self, fullscreen: bool):
        if fullscreen:
            # (0, 0) picks the desktop resolution
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(self.windowed_size, pygame.RESIZABLE)
        self.fullscreen = fullscreen
        self.size = self.screen.get_size()
        logger.info("Window %dx%d (%s)", *self.size, "fullscreen" if fullscreen else "windowed")

    def toggle_fullscreen(self) -> Tuple[int, int]:
        """Switch window mode; returns the new drawing size."""
        self._apply_mode(not self.fullscreen)
        return self.size

    def poll(self) -> DisplayEvents:
        """Drain the pygame event queue. F11 is handled here."""
        events = DisplayEvents()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                events.quit = True
                self.open = False
            elif event.type == pygame.VIDEORESIZE and not self.fullscreen:
                self.windowed_size = (event.w, event.h)
                self.size = self.windowed_size
                events.resized = self.size
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_F11:
                    events.resized = self.toggle_fullscreen()
                else:
                    events.keys.append(event.key)

        return events

    def present(self, frame: np.ndarray):
        """Show a BGR frame, scaled to the window if needed, then wait for the next slot."""
        # BGR -> RGB; surfarray indexes pixels as (x, y)
        surface = pygame.surfarray.make_surface(frame[:, :, ::-1].swapaxes(0, 1))
        if surface.get_size() != self.size:
            surface = pygame.transform.scale(surface, self.size)

        self.screen.blit(surface, (0, 0))
        pygame.display.flip()
        self.clock.tick(self.max_fps)

    @property
    def fps(self) -> float:
        return self.clock.get_fps()

    def close(self):
        self.open = False
        pygame.quit()


class Keys:
    """Pygame key codes the pages respond to."""
    RETURN = pygame.K_RETURN
    SPACE = pygame.K_SPACE

    ONE = pygame.K_1
    TWO = pygame.K_2
    THREE = pygame.K_3
    FOUR = pygame.K_4

    B = pygame.K_b
    C = pygame.K_c
    D = pygame.K_d
    H = pygame.K_h
    Q = pygame.K_q
    R = pygame.K_r
    T = pygame.K_t
    V = pygame.K_v
