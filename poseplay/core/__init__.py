"""
Core engine components for Poseplay.
"""

from .calibration import CalibrationCounter
from .coordinates import map_to_surface
from .gesture_classifier import MovementState, classify_movements
from .keypoints import Keypoint
from .pose_engine import DetectionLoop, PoseSnapshot
from .scene_manager import Scene, SceneManager

__all__ = [
    'CalibrationCounter',
    'DetectionLoop',
    'Keypoint',
    'MovementState',
    'PoseSnapshot',
    'Scene',
    'SceneManager',
    'classify_movements',
    'map_to_surface',
]
