"""
Camera-space to render-surface coordinate mapping.
"""

from typing import Tuple

from poseplay.core.gesture_classifier import DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT


def map_to_surface(x: float, y: float,
                   camera_width: float, camera_height: float,
                   surface_width: float, surface_height: float) -> Tuple[float, float]:
    """
    Project a camera point onto the render surface.

    The horizontal axis is mirrored so a hand on the user's left shows up on
    the left of the animation, like a mirror. Results are clamped to the
    surface, so a 0-sized surface maps everything to 0.

    Args:
        x, y: Camera-space pixel position
        camera_width, camera_height: Camera resolution (non-positive = 320x240)
        surface_width, surface_height: Render surface size in pixels
    """
    if camera_width <= 0 or camera_height <= 0:
        camera_width, camera_height = DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT

    mapped_x = ((camera_width - x) / camera_width) * surface_width
    mapped_y = (y / camera_height) * surface_height

    clamped_x = max(0.0, min(float(surface_width), mapped_x))
    clamped_y = max(0.0, min(float(surface_height), mapped_y))
    return clamped_x, clamped_y
