# particle.py

import logging
from enum import Enum

import numpy as np

from states import SceneState

logger = logging.getLogger("stellar_cycle")


class ParticleMode(Enum):
    AMBIENT = "AMBIENT"
    EXPLOSIVE = "EXPLOSIVE"
    SEEKING = "SEEKING"
    COLLAPSING = "COLLAPSING"


class Particle:
    """
    Represents a single point-mass in the simulation.

    Behavior is selected by `mode`, which is fixed at construction and only
    changed by explicit scene transitions (dust begins accretion, or is
    engulfed by a collapse). Each mode has its own updater.

    Data Contract:
    - Inputs: position/velocity as 2-element sequences, RGB color, the
      simulation config dict for motion constants.
    - Invariants: alpha never increases. The particle never removes itself;
      its owner drops it once alpha <= 0.
    """
    def __init__(self, position, config: dict, mode: ParticleMode = ParticleMode.AMBIENT,
                 velocity=None, size: float = 1.0, alpha: float = 255.0, color=(255, 255, 255),
                 friction: float = None, decay: float = 1.0, phase: float = 0.0, anchor=None):
        self.position = np.array(position, dtype=float)
        self.velocity = np.zeros(2, dtype=float) if velocity is None else np.array(velocity, dtype=float)
        self.acceleration = np.zeros(2, dtype=float)
        self.size = size
        self.alpha = alpha
        self.color = tuple(color)
        self.friction = config['explosion_friction'] if friction is None else friction
        self.decay = decay
        self.mode = mode
        self.config = config

        # Idle drift oscillates around `base`; collapse pulls toward `anchor`.
        self.base = self.position.copy()
        self.phase = phase
        self.anchor = None if anchor is None else np.array(anchor, dtype=float)

    def apply_force(self, force):
        self.acceleration += force

    def update(self, ctx):
        """Advances the particle by exactly one tick according to its mode."""
        _UPDATERS[self.mode](self, ctx)

    def _drift(self, ctx):
        t = ctx.frame * self.config['ambient_drift_speed'] + self.phase
        radius = self.config['ambient_drift_radius']
        self.position[0] = self.base[0] + np.sin(t) * radius
        self.position[1] = self.base[1] + np.cos(t) * radius

    def _update_ambient(self, ctx):
        self._drift(ctx)

    def _update_seeking(self, ctx):
        if ctx.state is not SceneState.STAR_FORMATION or ctx.star_position is None:
            # Dust left over after formation idles where it stopped.
            self._drift(ctx)
            return

        direction = np.asarray(ctx.star_position, dtype=float) - self.position
        distance = np.linalg.norm(direction)
        if distance < self.config['seek_capture_radius']:
            self.alpha -= self.config['absorb_alpha_decay']
            return

        self.apply_force(direction / distance * self.config['seek_force'])
        self.velocity += self.acceleration
        speed = np.linalg.norm(self.velocity)
        max_speed = self.config['seek_max_speed']
        if speed > max_speed:
            self.velocity *= max_speed / speed
        self.position += self.velocity
        self.acceleration[:] = 0.0

        # Re-anchor the idle drift so leaving formation does not snap back.
        t = ctx.frame * self.config['ambient_drift_speed'] + self.phase
        radius = self.config['ambient_drift_radius']
        self.base[0] = self.position[0] - np.sin(t) * radius
        self.base[1] = self.position[1] - np.cos(t) * radius

    def _update_explosive(self, ctx):
        self.velocity *= self.friction
        self.position += self.velocity
        self.alpha -= self.decay

    def _update_collapsing(self, ctx):
        if ctx.state is not SceneState.BLACK_HOLE_SINK or self.anchor is None:
            self._update_explosive(ctx)
            return

        # Instantaneous pull: added straight to position, velocity is bypassed.
        direction = self.anchor - self.position
        distance = np.linalg.norm(direction)
        pull = self.config['collapse_pull_speed']
        if distance <= pull:
            self.position[:] = self.anchor
        else:
            self.position += direction / distance * pull
        self.alpha -= self.config['collapse_alpha_decay']

    def draw(self, canvas):
        if self.alpha <= 0:
            return
        canvas.circle(self.position, self.size / 2, (*self.color, self.alpha))


_UPDATERS = {
    ParticleMode.AMBIENT: Particle._update_ambient,
    ParticleMode.SEEKING: Particle._update_seeking,
    ParticleMode.EXPLOSIVE: Particle._update_explosive,
    ParticleMode.COLLAPSING: Particle._update_collapsing,
}


class Remnant:
    """
    Long-lived debris left where a star died. Drifts slowly and fades in
    proportion to its remaining life; survives into later star generations.
    """
    def __init__(self, position, velocity, size: float, alpha: float, color, life: float):
        self.position = np.array(position, dtype=float)
        self.velocity = np.array(velocity, dtype=float)
        self.size = size
        self.base_alpha = alpha
        self.color = tuple(color)
        self.life = life
        self.max_life = life

    @property
    def alpha(self):
        return self.base_alpha * max(self.life, 0.0) / self.max_life

    @property
    def expired(self):
        return self.life <= 0

    def update(self):
        self.position += self.velocity
        self.life -= 1

    def draw(self, canvas):
        if self.expired:
            return
        canvas.circle(self.position, self.size / 2, (*self.color, self.alpha))
