"""
Pose Engine
===========
Camera capture, MediaPipe body-pose detection and the detection tick.

Usage:
    from poseplay.core.pose_engine import CameraSource, MediaPipePoseSource, DetectionLoop

    loop = DetectionLoop(CameraSource(), MediaPipePoseSource(), interval=0.05)
    loop.start()

    while running:
        snapshot = loop.latest()
        if snapshot.sequence != last_seen:
            # New detection tick: feed snapshot.movement / snapshot.keypoints
            ...

    loop.stop()

The detection tick fires on a scheduler thread and hands inference to a
single worker. If the previous inference is still running when the next
tick fires, that tick is skipped. Results reach the render loop only as
immutable PoseSnapshot objects.
"""

import logging
import os
import threading
import time
import urllib.request
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from poseplay.core.gesture_classifier import (
    ClassifierThresholds, MovementState, DEFAULT_THRESHOLDS,
    DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT, NO_MOVEMENT, classify_movements,
)
from poseplay.core.keypoints import Keypoint, find_keypoint

logger = logging.getLogger(__name__)


# =====================
# CONFIG
# =====================
class PoseConfig:
    """Capture and model configuration."""

    # Camera
    CAMERA_INDEX = 0
    CAMERA_WIDTH = 640
    CAMERA_HEIGHT = 480

    # Detection confidence
    MIN_DETECTION_CONFIDENCE = 0.5
    MIN_TRACKING_CONFIDENCE = 0.5

    # Detection tick (seconds)
    ANIMATION_INTERVAL = 0.05
    CALIBRATION_INTERVAL = 0.1

    # Model
    MODEL_PATH = "pose_landmarker_lite.task"
    MODEL_URL = "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/latest/pose_landmarker_lite.task"


# MediaPipe pose landmark index -> COCO keypoint name
MEDIAPIPE_KEYPOINTS = {
    0: "nose",
    2: "left_eye",
    5: "right_eye",
    7: "left_ear",
    8: "right_ear",
    11: "left_shoulder",
    12: "right_shoulder",
    13: "left_elbow",
    14: "right_elbow",
    15: "left_wrist",
    16: "right_wrist",
    23: "left_hip",
    24: "right_hip",
    25: "left_knee",
    26: "right_knee",
    27: "left_ankle",
    28: "right_ankle",
}

BODY_CONNECTIONS = [
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"), ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"), ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"), ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"), ("left_knee", "left_ankle"),
    ("right_hip", "right_knee"), ("right_knee", "right_ankle"),
]


# =====================
# SOURCES
# =====================
class FrameSource(ABC):
    """Something that yields camera frames."""

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """Return the next BGR frame, or None if none is available."""

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Native (width, height) of the frames."""

    def release(self):
        pass


class PoseSource(ABC):
    """Black-box pose estimator for at most one body."""

    @abstractmethod
    def detect(self, frame: np.ndarray) -> List[Keypoint]:
        """
        Detect the keypoints of one body in *frame*.

        Returns an empty list when nobody is found or the model fails;
        implementations must not raise.
        """

    def close(self):
        pass


class CameraSource(FrameSource):
    """OpenCV webcam capture."""

    def __init__(self, index: int = PoseConfig.CAMERA_INDEX,
                 width: int = PoseConfig.CAMERA_WIDTH,
                 height: int = PoseConfig.CAMERA_HEIGHT):
        self.index = index
        self.cap = cv2.VideoCapture(index)
        if not self.cap.isOpened():
            raise RuntimeError(f"Cannot open camera {index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        logger.info("Camera %d opened at %dx%d", index, *self.size())

    def size(self) -> Tuple[int, int]:
        """Reported resolution, falling back to 320x240 when the driver is silent."""
        w = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if w <= 0 or h <= 0:
            return DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT
        return w, h

    def read(self) -> Optional[np.ndarray]:
        ret, frame = self.cap.read()
        if not ret:
            return None
        return frame

    def release(self):
        self.cap.release()


class MediaPipePoseSource(PoseSource):
    """MediaPipe Tasks PoseLandmarker in VIDEO mode, single body."""

    def __init__(self, config: PoseConfig = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or PoseConfig()
        self._clock = clock
        self._last_timestamp_ms = -1

        if not os.path.exists(self.config.MODEL_PATH):
            logger.info("Downloading pose landmarker model...")
            urllib.request.urlretrieve(self.config.MODEL_URL, self.config.MODEL_PATH)
            logger.info("Model saved to %s", self.config.MODEL_PATH)

        self.detector = vision.PoseLandmarker.create_from_options(
            vision.PoseLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=self.config.MODEL_PATH),
                running_mode=vision.RunningMode.VIDEO,
                num_poses=1,
                min_pose_detection_confidence=self.config.MIN_DETECTION_CONFIDENCE,
                min_tracking_confidence=self.config.MIN_TRACKING_CONFIDENCE
            )
        )

    def _next_timestamp_ms(self) -> int:
        # VIDEO mode needs strictly increasing timestamps
        timestamp_ms = max(int(self._clock() * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        return timestamp_ms

    def detect(self, frame: np.ndarray) -> List[Keypoint]:
        try:
            h, w = frame.shape[:2]
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
            results = self.detector.detect_for_video(mp_image, self._next_timestamp_ms())
        except Exception:
            logger.exception("Pose detection failed")
            return []

        if not results.pose_landmarks:
            return []

        landmarks = results.pose_landmarks[0]
        keypoints = []
        for index, name in MEDIAPIPE_KEYPOINTS.items():
            if index >= len(landmarks):
                continue
            lm = landmarks[index]
            score = lm.visibility if lm.visibility is not None else 0.0
            keypoints.append(Keypoint(name, lm.x * w, lm.y * h, float(score)))
        return keypoints

    def close(self):
        self.detector.close()


# =====================
# SNAPSHOT
# =====================
@dataclass(frozen=True, eq=False)
class PoseSnapshot:
    """
    Immutable result of one detection tick.

    ``sequence`` increases by one per completed tick; 0 means no tick has
    completed yet.
    """
    sequence: int = 0
    timestamp: float = 0.0
    keypoints: Tuple[Keypoint, ...] = ()
    movement: MovementState = NO_MOVEMENT
    camera_width: int = DEFAULT_FRAME_WIDTH
    camera_height: int = DEFAULT_FRAME_HEIGHT
    frame: Optional[np.ndarray] = None

    @property
    def body_detected(self) -> bool:
        return len(self.keypoints) > 0

    def keypoint(self, name: str) -> Optional[Keypoint]:
        return find_keypoint(self.keypoints, name)


# =====================
# DETECTION LOOP
# =====================
class DetectionLoop:
    """
    Periodic detection tick with at most one inference in flight.

    The scheduler thread calls tick() every ``interval`` seconds. tick()
    submits one detection to a single-worker executor unless the previous
    one is still running, in which case the tick is skipped.
    """

    def __init__(self, frame_source: FrameSource, pose_source: PoseSource,
                 interval: float = PoseConfig.ANIMATION_INTERVAL,
                 thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
                 clock: Callable[[], float] = time.monotonic):
        self.frame_source = frame_source
        self.pose_source = pose_source
        self.interval = interval
        self.thresholds = thresholds
        self._clock = clock

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pose-detect")
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()
        self._snapshot = PoseSnapshot()
        self._sequence = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

        self.skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def set_interval(self, seconds: float):
        """Change the tick period; applies from the next tick."""
        self.interval = seconds

    def start(self):
        """Start the scheduler thread."""
        if self.running or self._closed:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._schedule_loop, name="detection-tick", daemon=True)
        self._thread.start()
        logger.info("Detection loop started (every %.0f ms)", self.interval * 1000)

    def _schedule_loop(self):
        while not self._stop_event.wait(self.interval):
            self.tick()

    def tick(self) -> bool:
        """
        Run one detection tick.

        Returns:
            True if a detection was submitted, False if it was skipped
        """
        with self._lock:
            if self._closed:
                return False
            if self._pending is not None and not self._pending.done():
                self.skipped_ticks += 1
                logger.debug("Detection tick skipped, inference still running")
                return False
            self._pending = self._executor.submit(self._detect_once)
            return True

    def wait_idle(self, timeout: Optional[float] = None):
        """Block until the in-flight detection (if any) has finished."""
        pending = self._pending
        if pending is not None:
            pending.result(timeout=timeout)

    def _detect_once(self):
        keypoints: List[Keypoint] = []
        frame = None
        width, height = self.frame_source.size()

        try:
            frame = self.frame_source.read()
            if frame is not None:
                height, width = frame.shape[:2]
                keypoints = list(self.pose_source.detect(frame))
        except Exception:
            # Sensor errors count as "no body detected"
            logger.exception("Detection tick failed")
            keypoints = []

        movement = classify_movements(keypoints, width, height, self.thresholds)

        with self._lock:
            if self._closed:
                return
            self._sequence += 1
            self._snapshot = PoseSnapshot(
                sequence=self._sequence,
                timestamp=self._clock(),
                keypoints=tuple(keypoints),
                movement=movement,
                camera_width=width,
                camera_height=height,
                frame=frame,
            )

    def latest(self) -> PoseSnapshot:
        """Most recent snapshot."""
        with self._lock:
            return self._snapshot

    def stop(self):
        """Cancel the tick, drop queued work and release the sources."""
        if self._closed:
            return
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        with self._lock:
            self._closed = True
        # A hung inference must not hold up teardown; its result is discarded
        self._executor.shutdown(wait=False, cancel_futures=True)

        self.pose_source.close()
        self.frame_source.release()
        logger.info("Detection loop stopped (%d ticks skipped)", self.skipped_ticks)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


# =====================
# CAMERA PREVIEW
# =====================
def draw_skeleton(frame: np.ndarray, keypoints, min_score: float = 0.3,
                  color=(0, 255, 0), label: bool = False):
    """Draw body keypoints and limbs onto a camera-space frame."""
    points = {kp.name: kp for kp in keypoints if kp.score > min_score}

    for start, end in BODY_CONNECTIONS:
        if start in points and end in points:
            p1, p2 = points[start], points[end]
            cv2.line(frame, (int(p1.x), int(p1.y)), (int(p2.x), int(p2.y)), color, 2)

    for kp in points.values():
        # Left side red, right side blue (BGR)
        dot = (0, 0, 255) if kp.name.startswith('left') else (255, 0, 0)
        cv2.circle(frame, (int(kp.x), int(kp.y)), 4, dot, -1)
        if label:
            cv2.putText(frame, kp.name, (int(kp.x) + 8, int(kp.y)),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.35, (255, 255, 255), 1)


def render_pip(target: np.ndarray, snapshot: PoseSnapshot,
               pip_width: int = 200, pip_height: int = 150,
               position: str = 'bottom-right', padding: int = 10,
               show_skeleton: bool = True) -> np.ndarray:
    """
    Render the mirrored camera feed as a picture-in-picture overlay.

    Returns the target frame (modified in place).
    """
    if snapshot.frame is None:
        return target

    h, w = target.shape[:2]
    if pip_width + padding > w or pip_height + padding > h:
        return target

    pip_frame = snapshot.frame.copy()
    if show_skeleton and snapshot.keypoints:
        draw_skeleton(pip_frame, snapshot.keypoints)

    # Mirror so the preview matches the animation
    pip_frame = cv2.flip(pip_frame, 1)
    pip_resized = cv2.resize(pip_frame, (pip_width, pip_height))

    if position == 'bottom-right':
        x = w - pip_width - padding
        y = h - pip_height - padding
    elif position == 'bottom-left':
        x = padding
        y = h - pip_height - padding
    elif position == 'top-right':
        x = w - pip_width - padding
        y = padding
    else:  # top-left
        x = padding
        y = padding

    cv2.rectangle(target, (x - 2, y - 2),
                  (x + pip_width + 2, y + pip_height + 2),
                  (80, 80, 80), 2)
    target[y:y + pip_height, x:x + pip_width] = pip_resized
    return target
