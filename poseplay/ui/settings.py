"""
Settings Module
================
App settings and their JSON persistence.

Sections:
- Detection: camera, tick periods, calibration threshold
- Animation: pool caps, effect cooldown, start theme, cursor overlay
- Display: window size, fullscreen, camera preview, FPS cap
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Tuple

logger = logging.getLogger(__name__)


@dataclass
class DetectionSettings:
    """Camera and detection tick settings."""
    camera_index: int = 0
    camera_width: int = 640
    camera_height: int = 480
    animation_interval: float = 0.05      # Detection tick on the animation page (s)
    calibration_interval: float = 0.1     # Detection tick on the calibration page (s)
    required_raises: int = 3              # Raises per side to finish calibration
    raise_cooldown: float = 1.5           # Seconds before the same side can count again


@dataclass
class AnimationSettings:
    """Simulation and theme settings."""
    theme: str = "particles"
    max_particles: int = 200
    max_ripples: int = 10
    effect_cooldown: float = 0.15         # Seconds between bursts of one kind
    show_wrist_cursors: bool = True


@dataclass
class DisplaySettings:
    """Window settings."""
    resolution: Tuple[int, int] = (1280, 720)
    fullscreen: bool = False
    show_camera_preview: bool = False
    pip_size: Tuple[int, int] = (240, 180)
    max_fps: int = 60
    log_level: str = "INFO"


@dataclass
class AppSettings:
    """Complete app settings."""
    detection: DetectionSettings = field(default_factory=DetectionSettings)
    animation: AnimationSettings = field(default_factory=AnimationSettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)

    def save(self, path: str = "settings.json"):
        """Save settings to file."""
        data = {
            'detection': asdict(self.detection),
            'animation': asdict(self.animation),
            'display': {
                **asdict(self.display),
                'resolution': list(self.display.resolution),
                'pip_size': list(self.display.pip_size),
            },
        }
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, path: str = "settings.json") -> 'AppSettings':
        """Load settings from file; missing or unreadable files give defaults."""
        if not os.path.exists(path):
            return cls()

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Error loading settings from %s: %s", path, e)
            return cls()

        settings = cls()
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed settings file %s", path)
            return settings

        for section_name in ('detection', 'animation', 'display'):
            section = getattr(settings, section_name)
            values = data.get(section_name, {})
            if not isinstance(values, dict):
                logger.warning("Ignoring malformed settings section %s", section_name)
                continue

            for key, value in values.items():
                if not hasattr(section, key):
                    logger.debug("Unknown setting %s.%s ignored", section_name, key)
                    continue
                try:
                    if key in ('resolution', 'pip_size'):
                        value = _size(value)
                    setattr(section, key, value)
                except (TypeError, ValueError) as e:
                    logger.warning("Bad setting %s.%s kept at default: %s", section_name, key, e)

        return settings


def _size(value) -> Tuple[int, int]:
    """(width, height) from a JSON pair."""
    width, height = value
    return int(width), int(height)
