"""
App pages for Poseplay.
"""

from .animation_scene import AnimationScene
from .calibration_scene import CalibrationScene

__all__ = [
    'AnimationScene',
    'CalibrationScene',
]
