import pytest

from poseplay.core.calibration import CalibrationCounter
from poseplay.core.gesture_classifier import classify_movements
from poseplay.core.pose_engine import PoseSnapshot
from poseplay.systems.animation import (
    AnimationEngine, BODY_MOVEMENT, LEFT_HAND,
)
from poseplay.systems.themes import Theme

from conftest import make_body


def snapshot_of(keypoints, sequence=1, timestamp=0.0):
    return PoseSnapshot(
        sequence=sequence,
        timestamp=timestamp,
        keypoints=tuple(keypoints),
        movement=classify_movements(keypoints),
    )


@pytest.fixture
def engine(clock, rng):
    return AnimationEngine(800, 600, clock=clock, rng=rng)


def test_left_raise_bursts_at_mirrored_wrist(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40))))

    assert engine.system.particle_count == AnimationEngine.HAND_BURST
    for p in engine.system.particles:
        assert (p.x, p.y) == pytest.approx((650.0, 100.0))


def test_both_hands_add_ripple_and_bigger_bursts(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40), right_wrist=(260, 40))))

    # Two single-hand bursts plus the two-hand bursts
    assert engine.system.particle_count == 2 * 10 + 2 * 15
    assert engine.system.ripple_count == 1
    ripple = engine.system.ripples[0]
    assert (ripple.x, ripple.y) == pytest.approx((400.0, 100.0))


def test_body_lean_bursts_at_nose(engine):
    # Nose 60px right of the shoulder midpoint, shoulders 80px apart
    engine.observe(snapshot_of(make_body(nose=(220, 100))))
    assert engine.system.particle_count == 6


def test_repeated_snapshots_are_rate_limited(engine, clock):
    body = make_body(left_wrist=(60, 40))
    engine.observe(snapshot_of(body, sequence=1))
    engine.observe(snapshot_of(body, sequence=2))
    assert engine.system.particle_count == 10

    clock.advance(0.2)
    engine.observe(snapshot_of(body, sequence=3))
    assert engine.system.particle_count == 20


def test_paused_engine_spawns_nothing(engine):
    assert engine.toggle_playing() is False
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40), right_wrist=(260, 40))))
    assert engine.system.particle_count == 0
    assert engine.system.ripple_count == 0


def test_missing_wrist_does_not_consume_cooldown(engine):
    assert not engine.trigger_effect(LEFT_HAND)
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40))))
    assert engine.system.particle_count == 10


def test_ripples_theme_adds_ripple_for_single_hand(clock, rng):
    engine = AnimationEngine(800, 600, theme=Theme.RIPPLES, clock=clock, rng=rng)
    engine.observe(snapshot_of(make_body(right_wrist=(260, 40))))
    assert engine.system.particle_count == 10
    assert engine.system.ripple_count == 1


def test_theme_switch_clears_entities(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40), right_wrist=(260, 40))))
    assert engine.system.particle_count > 0

    engine.set_theme("flowers")
    assert engine.theme is Theme.FLOWERS
    assert engine.system.particle_count == 0
    assert engine.system.ripple_count == 0


def test_zero_sized_surface_makes_effects_no_ops(clock, rng):
    engine = AnimationEngine(0, 0, clock=clock, rng=rng)
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40))))
    assert not engine.trigger_effect(BODY_MOVEMENT, 1.0)
    assert engine.system.particle_count == 0
    assert engine.tick().size == 0


def test_resize_keeps_simulation_state(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40))))
    engine.resize(400, 300)

    assert engine.system.particle_count == 10
    assert engine.tick().shape == (300, 400, 3)


def test_tick_advances_and_renders(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40))))
    before = [p.life for p in engine.system.particles]
    frame = engine.tick()

    assert frame.shape == (600, 800, 3)
    assert all(p.life < life for p, life in zip(engine.system.particles, before))
    assert engine.cursors.left.visible


def test_unknown_effect_kind_is_rejected(engine):
    assert not engine.trigger_effect("cartwheel")


def test_status_reports_engine_and_calibration(engine, clock):
    counter = CalibrationCounter(clock=clock)
    snapshot = snapshot_of(make_body(left_wrist=(60, 40)), timestamp=42.0)
    counter.update(snapshot.movement)
    engine.observe(snapshot)

    status = engine.status(counter)
    assert status.particle_count == 10
    assert status.ripple_count == 0
    assert status.theme == "particles"
    assert status.playing
    assert status.cursors_visible
    assert status.left_raises == 1
    assert status.right_raises == 0
    assert not status.is_calibrated
    assert status.last_movement_time == 42.0


def test_last_movement_time_ignores_idle_snapshots(engine):
    engine.observe(snapshot_of(make_body(left_wrist=(60, 40)), timestamp=5.0))
    engine.observe(snapshot_of(make_body(left_wrist=(60, 180)), sequence=2, timestamp=9.0))
    assert engine.status().last_movement_time == 5.0
