"""Cosmetic particles emitted by hard drops.

Particles live in pixel space and never touch the board or the score.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .tetromino import CellPosition

CELL_SIZE = 30
PARTICLE_COUNT = 12
PARTICLE_COLOR = "#fff"
# Velocities are in pixels per 1/60 s frame; ``dt`` is in milliseconds.
VELOCITY_SCALE = 0.06
LIFE_DECAY_PER_MS = 0.02
PARTICLE_GRAVITY = 0.018


@dataclass(frozen=True)
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    color: str
    life: float
    size: float

    def advanced(self, dt: float) -> "Particle":
        """Return the particle ``dt`` milliseconds later."""

        return Particle(
            x=self.x + self.vx * dt * VELOCITY_SCALE,
            y=self.y + self.vy * dt * VELOCITY_SCALE,
            vx=self.vx,
            vy=self.vy + PARTICLE_GRAVITY * dt,
            color=self.color,
            life=self.life - dt * LIFE_DECAY_PER_MS,
            size=self.size,
        )


def spawn_particles(
    cells: Iterable[CellPosition],
    rng: Optional[random.Random] = None,
    count: int = PARTICLE_COUNT,
) -> Tuple[Particle, ...]:
    """Create ``count`` particles spread over the given board cells."""

    rng = rng or random.Random()
    positions = sorted(cells, key=lambda cell: (cell[1], cell[0]))
    if not positions:
        return ()
    particles = []
    for i in range(count):
        x, y = positions[i % len(positions)]
        particles.append(
            Particle(
                x=x * CELL_SIZE + CELL_SIZE / 2,
                y=y * CELL_SIZE + CELL_SIZE / 2,
                vx=(rng.random() - 0.5) * 8,
                vy=(rng.random() - 0.5) * 8 - 2,
                color=PARTICLE_COLOR,
                life=1.0,
                size=6 + rng.random() * 6,
            )
        )
    return tuple(particles)


def update_particles(particles: Sequence[Particle], dt: float) -> Tuple[Particle, ...]:
    """Advance every particle by ``dt`` milliseconds and drop the dead ones."""

    moved = (particle.advanced(dt) for particle in particles)
    return tuple(particle for particle in moved if particle.life > 0)
