"""
UI components and settings for Poseplay.
"""

from .hud import StatusHUD
from .settings import AnimationSettings, AppSettings, DetectionSettings, DisplaySettings

__all__ = [
    'AppSettings', 'DetectionSettings', 'AnimationSettings', 'DisplaySettings',
    'StatusHUD',
]
