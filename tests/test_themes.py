import numpy as np
import pytest

from poseplay.systems.cursors import CursorOverlay
from poseplay.systems.particles import ParticleSystem
from poseplay.systems.themes import PALETTES, Theme, ThemeRenderer, palette_color


@pytest.mark.parametrize("theme", list(Theme))
def test_every_theme_handles_an_empty_pool(theme, rng):
    renderer = ThemeRenderer(160, 120, rng=rng)
    frame = renderer.render(theme, [], [])
    assert frame.shape == (120, 160, 3)
    assert frame.dtype == np.uint8


@pytest.mark.parametrize("theme", list(Theme))
def test_every_theme_draws_live_entities(theme, rng):
    system = ParticleSystem(rng=rng)
    system.spawn_burst(80, 60, palette_color(theme, 0), 10)
    system.spawn_ripple(80, 60, palette_color(theme, 1))

    renderer = ThemeRenderer(160, 120, rng=rng)
    background = renderer.render(theme, [], [])
    frame = renderer.render(theme, system.particles, system.ripples)
    assert not np.array_equal(frame, background)


def test_background_fades_toward_base_colour(rng):
    renderer = ThemeRenderer(40, 30, rng=rng)
    renderer.canvas[:] = 255
    frame = renderer.render(Theme.PARTICLES, [], [])
    # One wash moves every pixel part of the way to (20, 20, 40)
    assert frame.max() < 255
    assert frame.min() > 40


def test_resize_recreates_backbuffer(rng):
    renderer = ThemeRenderer(160, 120, rng=rng)
    renderer.resize(64, 32)
    assert renderer.render(Theme.FLOWERS, [], []).shape == (32, 64, 3)


def test_zero_sized_surface_renders_nothing(rng):
    renderer = ThemeRenderer(0, 0, rng=rng)
    assert renderer.render(Theme.PARTICLES, [], []).size == 0


def test_cursors_are_drawn_only_when_enabled(rng):
    renderer = ThemeRenderer(160, 120, rng=rng)
    cursors = CursorOverlay(enabled=False)
    for _ in range(10):
        cursors.left.update((80.0, 60.0))

    hidden = renderer.render(Theme.PARTICLES, [], [], cursors)
    cursors.toggle()
    shown = renderer.render(Theme.PARTICLES, [], [], cursors)
    assert not np.array_equal(hidden, shown)


def test_theme_lookup_and_cycling():
    assert Theme.from_name("fireworks") is Theme.FIREWORKS
    assert Theme.from_name("unknown") is Theme.PARTICLES
    assert Theme.from_name(Theme.RIPPLES) is Theme.RIPPLES
    assert Theme.FLOWERS.next() is Theme.PARTICLES
    assert Theme.PARTICLES.next() is Theme.RIPPLES


def test_palette_index_wraps():
    colors = PALETTES[Theme.RIPPLES]
    assert palette_color(Theme.RIPPLES, len(colors)) == colors[0]
    assert palette_color(Theme.RIPPLES, 2) == colors[2]
