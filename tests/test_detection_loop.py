import time

import numpy as np

from poseplay.core.gesture_classifier import NO_MOVEMENT
from poseplay.core.pose_engine import DetectionLoop, PoseSnapshot, FrameSource, render_pip

from conftest import ScriptedPoseSource, StaticFrameSource, make_body


class EmptyFrameSource(FrameSource):
    def read(self):
        return None

    def size(self):
        return 640, 480


def test_tick_publishes_a_snapshot(clock):
    pose = ScriptedPoseSource(make_body(left_wrist=(60, 40)))
    loop = DetectionLoop(StaticFrameSource(), pose, clock=clock)
    try:
        assert loop.latest().sequence == 0

        assert loop.tick()
        loop.wait_idle(timeout=2.0)

        snapshot = loop.latest()
        assert snapshot.sequence == 1
        assert snapshot.timestamp == clock.now
        assert snapshot.body_detected
        assert snapshot.movement.left_hand_raised
        assert (snapshot.camera_width, snapshot.camera_height) == (320, 240)
        assert snapshot.frame.shape == (240, 320, 3)
    finally:
        loop.stop()


def test_tick_is_skipped_while_inference_is_pending(clock):
    pose = ScriptedPoseSource(make_body(), block=True)
    loop = DetectionLoop(StaticFrameSource(), pose, clock=clock)
    try:
        assert loop.tick()
        assert pose.started.wait(timeout=2.0)

        assert not loop.tick()
        assert not loop.tick()
        assert loop.skipped_ticks == 2

        pose.release.set()
        loop.wait_idle(timeout=2.0)
        assert pose.calls == 1
        assert loop.latest().sequence == 1

        assert loop.tick()
        loop.wait_idle(timeout=2.0)
        assert loop.latest().sequence == 2
    finally:
        pose.release.set()
        loop.stop()


def test_detection_failure_becomes_empty_snapshot(clock):
    pose = ScriptedPoseSource(error=RuntimeError("model crashed"))
    loop = DetectionLoop(StaticFrameSource(), pose, clock=clock)
    try:
        loop.tick()
        loop.wait_idle(timeout=2.0)

        snapshot = loop.latest()
        assert snapshot.sequence == 1
        assert not snapshot.body_detected
        assert snapshot.movement == NO_MOVEMENT
    finally:
        loop.stop()


def test_missing_frame_uses_reported_camera_size(clock):
    pose = ScriptedPoseSource(make_body())
    loop = DetectionLoop(EmptyFrameSource(), pose, clock=clock)
    try:
        loop.tick()
        loop.wait_idle(timeout=2.0)

        snapshot = loop.latest()
        assert pose.calls == 0
        assert not snapshot.body_detected
        assert (snapshot.camera_width, snapshot.camera_height) == (640, 480)
    finally:
        loop.stop()


def test_scheduler_thread_runs_until_stopped():
    frames = StaticFrameSource()
    pose = ScriptedPoseSource(make_body())
    loop = DetectionLoop(frames, pose, interval=0.01)

    loop.start()
    assert loop.running
    deadline = time.monotonic() + 2.0
    while loop.latest().sequence < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    loop.stop()

    assert loop.latest().sequence >= 3
    assert not loop.running
    assert frames.released
    assert pose.closed


def test_stop_is_final(clock):
    loop = DetectionLoop(StaticFrameSource(), ScriptedPoseSource(), clock=clock)
    loop.stop()
    loop.stop()
    assert not loop.tick()
    loop.start()
    assert not loop.running


def test_stop_does_not_wait_for_a_hung_inference(clock):
    frames = StaticFrameSource()
    pose = ScriptedPoseSource(make_body(), block=True)
    loop = DetectionLoop(frames, pose, clock=clock)
    try:
        assert loop.tick()
        assert pose.started.wait(timeout=2.0)

        started = time.monotonic()
        loop.stop()
        assert time.monotonic() - started < 1.0
        assert pose.closed
        assert frames.released
    finally:
        pose.release.set()

    # The late result is dropped
    loop.wait_idle(timeout=2.0)
    assert loop.latest().sequence == 0


def test_set_interval():
    loop = DetectionLoop(StaticFrameSource(), ScriptedPoseSource(), interval=0.05)
    loop.set_interval(0.1)
    assert loop.interval == 0.1
    loop.stop()


def test_picture_in_picture_needs_a_frame():
    target = np.zeros((300, 400, 3), dtype=np.uint8)
    render_pip(target, PoseSnapshot(), 100, 75)
    assert not target.any()

    camera = np.full((240, 320, 3), 200, dtype=np.uint8)
    snapshot = PoseSnapshot(sequence=1, keypoints=tuple(make_body()), frame=camera)
    render_pip(target, snapshot, 100, 75)
    assert target[300 - 10 - 40, 400 - 10 - 50].any()
