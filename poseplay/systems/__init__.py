"""
Animation systems for Poseplay.
"""

from .animation import AnimationEngine, AnimationStatus
from .cursors import CursorOverlay, WristCursor
from .particles import EffectCooldown, Particle, ParticleSystem, Ripple
from .themes import Theme, ThemeRenderer

__all__ = [
    # Simulation
    'Particle', 'Ripple', 'ParticleSystem', 'EffectCooldown',
    # Overlay and rendering
    'WristCursor', 'CursorOverlay', 'Theme', 'ThemeRenderer',
    # Engine
    'AnimationEngine', 'AnimationStatus',
]
