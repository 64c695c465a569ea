"""
Keypoints
=========
Body landmark records shared by the pose source, the classifier and the
animation engine.

Coordinates are camera pixels with the origin at the top-left corner, so a
smaller y is higher on screen.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence


# COCO / MoveNet body landmark names, in model order
NOSE = "nose"
LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"
LEFT_EAR = "left_ear"
RIGHT_EAR = "right_ear"
LEFT_SHOULDER = "left_shoulder"
RIGHT_SHOULDER = "right_shoulder"
LEFT_ELBOW = "left_elbow"
RIGHT_ELBOW = "right_elbow"
LEFT_WRIST = "left_wrist"
RIGHT_WRIST = "right_wrist"
LEFT_HIP = "left_hip"
RIGHT_HIP = "right_hip"
LEFT_KNEE = "left_knee"
RIGHT_KNEE = "right_knee"
LEFT_ANKLE = "left_ankle"
RIGHT_ANKLE = "right_ankle"

KEYPOINT_NAMES = (
    NOSE, LEFT_EYE, RIGHT_EYE, LEFT_EAR, RIGHT_EAR,
    LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_ELBOW, RIGHT_ELBOW,
    LEFT_WRIST, RIGHT_WRIST, LEFT_HIP, RIGHT_HIP,
    LEFT_KNEE, RIGHT_KNEE, LEFT_ANKLE, RIGHT_ANKLE,
)

WRIST_FOR_SIDE = {'left': LEFT_WRIST, 'right': RIGHT_WRIST}


@dataclass(frozen=True)
class Keypoint:
    """One tracked landmark of a single detection tick."""
    name: str
    x: float
    y: float
    score: float


def find_keypoint(keypoints: Sequence[Keypoint], name: str) -> Optional[Keypoint]:
    """Return the first keypoint called *name*, or None if the body lacks it."""
    for keypoint in keypoints:
        if keypoint.name == name:
            return keypoint
    return None


def distance(a: Keypoint, b: Keypoint) -> float:
    """Euclidean pixel distance between two keypoints."""
    return math.hypot(a.x - b.x, a.y - b.y)
