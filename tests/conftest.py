"""Shared fakes for the test suite: no camera, model or window needed."""

import random
import threading

import numpy as np
import pytest

from poseplay.core.keypoints import Keypoint
from poseplay.core.pose_engine import FrameSource, PoseSource


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class StaticFrameSource(FrameSource):
    """Always returns the same black frame."""

    def __init__(self, width: int = 320, height: int = 240):
        self.width = width
        self.height = height
        self.released = False

    def read(self):
        return np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def size(self):
        return self.width, self.height

    def release(self):
        self.released = True


class ScriptedPoseSource(PoseSource):
    """Returns a fixed keypoint list, optionally blocking until released."""

    def __init__(self, keypoints=None, block: bool = False, error: Exception = None):
        self.keypoints = list(keypoints or [])
        self.error = error
        self.calls = 0
        self.closed = False
        self.started = threading.Event()
        self.release = threading.Event()
        if not block:
            self.release.set()

    def detect(self, frame):
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5.0)
        if self.error is not None:
            raise self.error
        return list(self.keypoints)

    def close(self):
        self.closed = True


def make_body(nose=(160, 100), left_wrist=None, right_wrist=None,
              shoulders=((120, 140), (200, 140)), score=0.9):
    """Keypoints for one body in a 320x240 frame; wrists are (x, y) or (x, y, score)."""
    keypoints = []
    if nose is not None:
        keypoints.append(Keypoint("nose", nose[0], nose[1], score))
    if shoulders is not None:
        keypoints.append(Keypoint("left_shoulder", shoulders[0][0], shoulders[0][1], score))
        keypoints.append(Keypoint("right_shoulder", shoulders[1][0], shoulders[1][1], score))
    for name, wrist in (("left_wrist", left_wrist), ("right_wrist", right_wrist)):
        if wrist is not None:
            wrist_score = wrist[2] if len(wrist) > 2 else score
            keypoints.append(Keypoint(name, wrist[0], wrist[1], wrist_score))
    return keypoints


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)
