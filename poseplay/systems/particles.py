"""
Particle System
===============
Bounded pools of particles and ripples advanced once per animation tick.

Features:
- Global caps; spawn requests past a cap are dropped, not queued
- Gravity and short position trails for particles
- Expanding, fading ripples
- Per-effect-kind cooldowns so a held pose cannot flood the pools
"""

import logging
import random
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Color = Tuple[int, ...]


@dataclass
class Particle:
    """Short-lived dot flung out of a burst."""
    x: float
    y: float
    vx: float
    vy: float
    max_life: float
    size: float
    color: Color
    life: float = 1.0
    age: int = 0  # Ticks advanced
    trail: Deque[Tuple[float, float]] = field(default_factory=deque)

    @property
    def alive(self) -> bool:
        return self.life > 0


@dataclass
class Ripple:
    """Expanding ring."""
    x: float
    y: float
    max_radius: float
    color: Color  # (r, g, b, a)
    radius: float = 0.0
    life: float = 1.0
    age: int = 0

    @property
    def alive(self) -> bool:
        return self.life > 0 and self.radius <= self.max_radius


class EffectCooldown:
    """
    Rate limit per effect kind.

    A trigger is accepted only if at least ``cooldown`` seconds have passed
    since the last accepted trigger of the same kind.
    """

    def __init__(self, cooldown: float = 0.15, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self.last_triggered_at: Dict[str, float] = {}

    def try_trigger(self, kind: str) -> bool:
        now = self._clock()
        last = self.last_triggered_at.get(kind)
        if last is not None and now - last < self.cooldown:
            return False
        self.last_triggered_at[kind] = now
        return True

    def reset(self):
        self.last_triggered_at.clear()


class ParticleSystem:
    """Owns the particle and ripple pools."""

    # Spawn ranges
    VELOCITY_RANGE = 5.0
    LIFE_RANGE = (60.0, 120.0)      # Ticks
    SIZE_RANGE = (5.0, 15.0)
    RIPPLE_RADIUS_RANGE = (100.0, 200.0)

    # Per-tick dynamics
    GRAVITY = 0.1
    TRAIL_LENGTH = 10
    RIPPLE_GROWTH = 3.0
    RIPPLE_DECAY = 0.02

    def __init__(self, max_particles: int = 200, max_ripples: int = 10,
                 rng: Optional[random.Random] = None):
        self.max_particles = max_particles
        self.max_ripples = max_ripples
        self.rng = rng or random.Random()

        self.particles: List[Particle] = []
        self.ripples: List[Ripple] = []

    @property
    def particle_count(self) -> int:
        return len(self.particles)

    @property
    def ripple_count(self) -> int:
        return len(self.ripples)

    def spawn_burst(self, x: float, y: float, color: Color, count: int) -> int:
        """
        Fling up to *count* particles out of (x, y).

        Returns:
            Number of particles actually added
        """
        room = max(0, self.max_particles - len(self.particles))
        added = min(max(0, count), room)
        rng = self.rng

        for _ in range(added):
            self.particles.append(Particle(
                x=x,
                y=y,
                vx=rng.uniform(-self.VELOCITY_RANGE, self.VELOCITY_RANGE),
                vy=rng.uniform(-self.VELOCITY_RANGE, self.VELOCITY_RANGE),
                max_life=rng.uniform(*self.LIFE_RANGE),
                size=rng.uniform(*self.SIZE_RANGE),
                color=tuple(color[:3]),
                trail=deque(maxlen=self.TRAIL_LENGTH),
            ))

        if added < count:
            logger.debug("Particle cap reached, dropped %d of %d", count - added, count)
        return added

    def spawn_ripple(self, x: float, y: float, color: Color) -> bool:
        """Start one ripple at (x, y). Returns False if the ripple cap is reached."""
        if len(self.ripples) >= self.max_ripples:
            return False

        rgba = tuple(color) if len(color) == 4 else tuple(color[:3]) + (100,)
        self.ripples.append(Ripple(
            x=x,
            y=y,
            max_radius=self.rng.uniform(*self.RIPPLE_RADIUS_RANGE),
            color=rgba,
        ))
        return True

    def advance(self):
        """Move everything one tick forward and retire the dead."""
        for p in self.particles:
            p.x += p.vx
            p.y += p.vy
            p.vy += self.GRAVITY
            p.trail.append((p.x, p.y))
            # life hits exactly 0 once age reaches max_life
            p.age += 1
            p.life = 1.0 - p.age / p.max_life

        for r in self.ripples:
            r.radius += self.RIPPLE_GROWTH
            r.age += 1
            r.life = 1.0 - r.age * self.RIPPLE_DECAY

        # Compact after the pass so nothing is removed mid-iteration
        self.particles = [p for p in self.particles if p.alive]
        self.ripples = [r for r in self.ripples if r.alive]

    def clear(self):
        self.particles = []
        self.ripples = []
