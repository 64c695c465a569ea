from collections import deque

from poseplay.systems.particles import EffectCooldown, Particle, ParticleSystem, Ripple


def test_burst_respects_particle_cap(rng):
    system = ParticleSystem(max_particles=25, rng=rng)

    added = [system.spawn_burst(10, 10, (255, 0, 0), 10) for _ in range(5)]

    assert added == [10, 10, 5, 0, 0]
    assert system.particle_count == 25


def test_ripple_cap(rng):
    system = ParticleSystem(max_ripples=3, rng=rng)
    results = [system.spawn_ripple(0, 0, (1, 2, 3)) for _ in range(5)]
    assert results == [True, True, True, False, False]
    assert system.ripple_count == 3


def test_ripple_gets_default_alpha(rng):
    system = ParticleSystem(rng=rng)
    system.spawn_ripple(0, 0, (10, 20, 30))
    system.spawn_ripple(0, 0, (10, 20, 30, 200))
    assert system.ripples[0].color == (10, 20, 30, 100)
    assert system.ripples[1].color == (10, 20, 30, 200)


def test_spawned_particles_are_within_ranges(rng):
    system = ParticleSystem(rng=rng)
    system.spawn_burst(50, 60, (1, 2, 3, 4), 30)
    for p in system.particles:
        assert (p.x, p.y) == (50, 60)
        assert -5 <= p.vx <= 5 and -5 <= p.vy <= 5
        assert 60 <= p.max_life <= 120
        assert 5 <= p.size <= 15
        assert p.life == 1.0
        assert p.color == (1, 2, 3)


def test_particle_dies_within_max_life_ticks():
    system = ParticleSystem()
    system.particles.append(Particle(x=0, y=0, vx=0, vy=0, max_life=4.0, size=5,
                                     color=(255, 255, 255), trail=deque(maxlen=10)))

    for _ in range(3):
        system.advance()
    assert system.particle_count == 1

    system.advance()
    assert system.particle_count == 0


def test_particle_with_62_tick_lifespan_dies_on_time():
    system = ParticleSystem()
    p = Particle(x=0, y=0, vx=0, vy=0, max_life=62.0, size=5,
                 color=(255, 255, 255), trail=deque(maxlen=10))
    system.particles.append(p)

    for _ in range(61):
        system.advance()
    assert system.particle_count == 1
    assert p.life > 0

    system.advance()
    assert p.life == 0.0
    assert system.particle_count == 0


def test_advance_applies_gravity_and_bounds_trail(rng):
    system = ParticleSystem(rng=rng)
    p = Particle(x=0, y=0, vx=1.0, vy=0.0, max_life=1000.0, size=5,
                 color=(255, 255, 255), trail=deque(maxlen=ParticleSystem.TRAIL_LENGTH))
    system.particles.append(p)

    system.advance()
    assert p.x == 1.0
    assert p.y == 0.0
    assert p.vy == 0.1

    for _ in range(30):
        system.advance()
    assert len(p.trail) == ParticleSystem.TRAIL_LENGTH


def test_ripple_grows_fades_and_is_removed():
    system = ParticleSystem()
    ripple = Ripple(x=0, y=0, max_radius=10.0, color=(1, 2, 3, 100))
    system.ripples.append(ripple)

    system.advance()
    assert ripple.radius == 3.0
    assert ripple.life == 1.0 - 0.02

    # Radius 12 passes max_radius on the fourth step
    for _ in range(3):
        system.advance()
    assert system.ripple_count == 0


def test_clear_empties_both_pools(rng):
    system = ParticleSystem(rng=rng)
    system.spawn_burst(0, 0, (1, 2, 3), 5)
    system.spawn_ripple(0, 0, (1, 2, 3))
    system.clear()
    assert system.particle_count == 0
    assert system.ripple_count == 0


def test_cooldown_accepts_one_trigger_per_window(clock):
    cooldown = EffectCooldown(0.25, clock=clock)

    assert cooldown.try_trigger("left_hand")
    clock.advance(0.125)
    assert not cooldown.try_trigger("left_hand")
    # Other kinds are independent
    assert cooldown.try_trigger("right_hand")

    clock.advance(0.125)
    assert cooldown.try_trigger("left_hand")


def test_trigger_exactly_at_window_end_is_accepted(clock):
    cooldown = EffectCooldown(0.5, clock=clock)
    assert cooldown.try_trigger("body_movement")
    clock.advance(0.5)
    assert cooldown.try_trigger("body_movement")
    assert not cooldown.try_trigger("body_movement")


def test_rejected_triggers_do_not_extend_the_window(clock):
    cooldown = EffectCooldown(1.0, clock=clock)
    assert cooldown.try_trigger("both_hands")
    clock.advance(0.5)
    assert not cooldown.try_trigger("both_hands")
    clock.advance(0.5)
    assert cooldown.try_trigger("both_hands")
