"""
Gesture Classifier
==================
Turns one frame's body keypoints into a MovementState.

The classifier is a pure function of the current keypoints and a set of
static thresholds. Anything that needs memory across ticks (raise counting,
effect rate limiting) lives elsewhere.

Filtering pipeline, in order:
1. Head reference from the nose, or from both ears
2. Wrist confidence floor
3. Hands-too-close and opposite-extremes filters (keep the surer wrist)
4. Low-confidence wrists hugging a frame edge are dropped
5. Raised test: wrist clearly above the head reference
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from poseplay.core.keypoints import (
    Keypoint, find_keypoint, distance,
    NOSE, LEFT_EAR, RIGHT_EAR, LEFT_SHOULDER, RIGHT_SHOULDER,
    LEFT_WRIST, RIGHT_WRIST,
)

logger = logging.getLogger(__name__)

DEFAULT_FRAME_WIDTH = 320
DEFAULT_FRAME_HEIGHT = 240


@dataclass(frozen=True)
class ClassifierThresholds:
    """Static tuning values for the classifier."""
    head_min_score: float = 0.3         # Nose / ear confidence for head reference
    wrist_min_score: float = 0.25       # Wrists at or below this are discarded
    min_hand_distance: float = 50.0     # Closer than this (px) = one hand seen twice
    extreme_band: float = 0.15          # Top / bottom share of frame height
    edge_margin: float = 10.0           # Pixels from a frame edge
    edge_min_score: float = 0.4         # Edge wrists need at least this confidence
    raise_margin: float = 20.0          # Wrist must be this far above the head
    body_min_score: float = 0.3         # Nose / shoulders for body movement


DEFAULT_THRESHOLDS = ClassifierThresholds()


@dataclass(frozen=True)
class MovementState:
    """
    Movement flags derived from a single detection tick.

    ``*_hand_detected`` means the wrist survived filtering, raised or not.
    It is kept apart from ``*_hand_raised`` so callers can use it as a
    low-confidence demo signal without it counting as a raise.
    """
    left_hand_raised: bool = False
    right_hand_raised: bool = False
    left_hand_detected: bool = False
    right_hand_detected: bool = False
    body_movement: float = 0.0

    @property
    def both_hands_up(self) -> bool:
        return self.left_hand_raised and self.right_hand_raised

    @property
    def any_hand_raised(self) -> bool:
        return self.left_hand_raised or self.right_hand_raised

    def is_raised(self, side: str) -> bool:
        return self.left_hand_raised if side == 'left' else self.right_hand_raised


NO_MOVEMENT = MovementState()


# =====================
# HELPERS
# =====================
def head_reference_y(keypoints: Sequence[Keypoint],
                     thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> Optional[float]:
    """Nose y if confident, else the mean y of both ears, else None."""
    nose = find_keypoint(keypoints, NOSE)
    if nose is not None and nose.score > thresholds.head_min_score:
        return nose.y

    left_ear = find_keypoint(keypoints, LEFT_EAR)
    right_ear = find_keypoint(keypoints, RIGHT_EAR)
    if (left_ear is not None and right_ear is not None
            and left_ear.score > thresholds.head_min_score
            and right_ear.score > thresholds.head_min_score):
        return (left_ear.y + right_ear.y) / 2

    return None


def _keep_surer(left: Keypoint, right: Keypoint) -> Tuple[Optional[Keypoint], Optional[Keypoint]]:
    # Ties go to the left wrist
    if left.score >= right.score:
        return left, None
    return None, right


def _near_edge(wrist: Keypoint, frame_width: float, frame_height: float, margin: float) -> bool:
    return (wrist.x < margin or wrist.x > frame_width - margin or
            wrist.y < margin or wrist.y > frame_height - margin)


def filter_wrists(keypoints: Sequence[Keypoint],
                  frame_width: float = DEFAULT_FRAME_WIDTH,
                  frame_height: float = DEFAULT_FRAME_HEIGHT,
                  thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
                  ) -> Tuple[Optional[Keypoint], Optional[Keypoint]]:
    """
    Apply the anti-false-positive filters to both wrists.

    Returns:
        (left_wrist, right_wrist), each None if it was filtered out
    """
    left = find_keypoint(keypoints, LEFT_WRIST)
    right = find_keypoint(keypoints, RIGHT_WRIST)

    # Confidence floor
    if left is not None and left.score <= thresholds.wrist_min_score:
        left = None
    if right is not None and right.score <= thresholds.wrist_min_score:
        right = None

    if left is not None and right is not None:
        gap = distance(left, right)
        if gap < thresholds.min_hand_distance:
            logger.debug("Hands too close (%.1fpx), keeping the surer wrist", gap)
            left, right = _keep_surer(left, right)
        else:
            top = frame_height * thresholds.extreme_band
            bottom = frame_height * (1.0 - thresholds.extreme_band)
            left_top, left_bottom = left.y < top, left.y > bottom
            right_top, right_bottom = right.y < top, right.y > bottom

            if (left_top and right_bottom) or (right_top and left_bottom):
                logger.debug("Wrists at opposite vertical extremes (L y=%.1f, R y=%.1f)",
                             left.y, right.y)
                left, right = _keep_surer(left, right)

    # Edge artifacts are usually low confidence
    if left is not None and _near_edge(left, frame_width, frame_height, thresholds.edge_margin):
        if left.score < thresholds.edge_min_score:
            logger.debug("Left wrist dropped near edge (score %.3f)", left.score)
            left = None
    if right is not None and _near_edge(right, frame_width, frame_height, thresholds.edge_margin):
        if right.score < thresholds.edge_min_score:
            logger.debug("Right wrist dropped near edge (score %.3f)", right.score)
            right = None

    return left, right


def body_movement(keypoints: Sequence[Keypoint],
                  thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> float:
    """
    Coarse body lean in [0, 1].

    Horizontal offset of the nose from the shoulder midpoint, relative to the
    shoulder width. 0 when the nose or a shoulder is not confidently seen.
    """
    nose = find_keypoint(keypoints, NOSE)
    left_shoulder = find_keypoint(keypoints, LEFT_SHOULDER)
    right_shoulder = find_keypoint(keypoints, RIGHT_SHOULDER)

    for point in (nose, left_shoulder, right_shoulder):
        if point is None or point.score <= thresholds.body_min_score:
            return 0.0

    shoulder_width = abs(left_shoulder.x - right_shoulder.x)
    if shoulder_width <= 0:
        return 0.0

    mid_x = (left_shoulder.x + right_shoulder.x) / 2
    return min(1.0, abs(nose.x - mid_x) / shoulder_width)


# =====================
# CLASSIFIER
# =====================
def classify_movements(keypoints: Sequence[Keypoint],
                       frame_width: float = DEFAULT_FRAME_WIDTH,
                       frame_height: float = DEFAULT_FRAME_HEIGHT,
                       thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> MovementState:
    """
    Classify one body's keypoints into a MovementState.

    Args:
        keypoints: Keypoints of the detected body (empty when nobody was found)
        frame_width: Camera-space width the keypoints were measured in
        frame_height: Camera-space height the keypoints were measured in
        thresholds: Static classifier thresholds

    Returns:
        MovementState; all flags False when no body or no head reference
    """
    if not keypoints:
        return NO_MOVEMENT

    if frame_width <= 0 or frame_height <= 0:
        frame_width, frame_height = DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT

    left, right = filter_wrists(keypoints, frame_width, frame_height, thresholds)
    left_detected = left is not None and left.score > thresholds.wrist_min_score
    right_detected = right is not None and right.score > thresholds.wrist_min_score

    head_y = head_reference_y(keypoints, thresholds)
    if head_y is None:
        left_raised = right_raised = False
    else:
        limit = head_y - thresholds.raise_margin
        left_raised = left_detected and left.y < limit
        right_raised = right_detected and right.y < limit

    state = MovementState(
        left_hand_raised=left_raised,
        right_hand_raised=right_raised,
        left_hand_detected=left_detected,
        right_hand_detected=right_detected,
        body_movement=body_movement(keypoints, thresholds),
    )

    if state.any_hand_raised:
        logger.debug("Raised hands: left=%s right=%s (head y=%.1f)",
                     left_raised, right_raised, head_y)
    return state
