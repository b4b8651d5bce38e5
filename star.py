# star.py

import logging

import numpy as np

import constants
from mapping import remap, remap_range, lerp_color, interpolate_keyframes
from states import SceneState, DeathBranch

logger = logging.getLogger("stellar_cycle")


def classify_death(mass: float, config: dict) -> DeathBranch:
    """
    Selects the terminal behavior from mass alone.

    mass > black_hole_mass            -> BLACK_HOLE
    supernova_mass < mass <= that     -> SUPERNOVA
    otherwise                         -> NEBULA
    """
    if mass > config['black_hole_mass']:
        return DeathBranch.BLACK_HOLE
    if mass > config['supernova_mass']:
        return DeathBranch.SUPERNOVA
    return DeathBranch.NEBULA


def star_color(mass: float, legacy_color=None, legacy_blend: float = 0.1) -> tuple:
    """
    Derives a star's RGB color from its mass (red dwarf -> white -> blue giant),
    then nudges it toward the previous star's color if one exists.
    """
    color = interpolate_keyframes(constants.STAR_COLOR_KEYFRAMES, mass / 100.0)
    if legacy_color is not None:
        color = lerp_color(color, legacy_color, legacy_blend)
    return color


class Star:
    """
    The evolving star at the center of the scene.

    Grows during STAR_FORMATION, ages during OBSERVATION, and when its life
    runs out resolves exactly one death branch chosen by mass.

    Data Contract:
    - Inputs: position, mass and instability (nominally 0-100; values outside
      extrapolate), the simulation config dict, and the inherited legacy color.
    - Invariants: death_branch changes from NONE exactly once; resolve_death
      has no effect after `exploded` is set.
    """
    def __init__(self, x: float, y: float, mass: float, instability: float, config: dict, legacy_color=None):
        self.position = np.array([x, y], dtype=float)
        self.mass = float(mass)
        self.instability = float(instability)
        self.config = config

        self.size = 0.0
        self.target_size = remap_range(self.mass, 0, 100, config['star_size_range'])
        self.alpha = 0.0
        self.max_alpha = config['star_max_alpha']
        self.life = remap_range(self.mass, 0, 100, config['star_life_range'])

        self.color = star_color(self.mass, legacy_color, config['legacy_blend'])
        self.death_branch = DeathBranch.NONE
        self.exploded = False

        logger.info(
            f"Star created at ({x:.0f}, {y:.0f}): mass={self.mass:.1f}, "
            f"instability={self.instability:.1f}, target_size={self.target_size:.1f}, "
            f"life={self.life:.0f}, color=({self.color[0]:.0f}, {self.color[1]:.0f}, {self.color[2]:.0f})"
        )

    # --- Simulation ---

    def update(self, ctx, universe):
        if ctx.state is SceneState.STAR_FORMATION:
            self.size = min(self.target_size, self.size + self.config['star_size_growth'])
            self.alpha = min(self.max_alpha, self.alpha + self.config['star_alpha_growth'])
        elif ctx.state is SceneState.OBSERVATION:
            self._age(ctx)
        elif ctx.state in (SceneState.END, SceneState.BLACK_HOLE_SINK):
            self.resolve_death(ctx, universe)

    def _age(self, ctx):
        if self.death_branch is not DeathBranch.NONE:
            return
        self.life -= 1
        if self.life > 0:
            return

        self.life = 0
        self.death_branch = classify_death(self.mass, self.config)
        logger.info(f"Star reached end of life. Death branch: {self.death_branch.value}")
        if self.death_branch is DeathBranch.BLACK_HOLE:
            ctx.transition(SceneState.BLACK_HOLE_SINK)
        else:
            ctx.transition(SceneState.END)

    def resolve_death(self, ctx, universe):
        """
        Plays out the death branch. Black holes and supernovae resolve in a
        single call; a nebula fades over many calls and resolves once its
        size reaches zero. No-op once resolved.
        """
        if self.exploded or self.death_branch is DeathBranch.NONE:
            return

        x, y = self.position
        if self.death_branch is DeathBranch.BLACK_HOLE:
            universe.explode(x, y, self.mass, self.color, DeathBranch.BLACK_HOLE, star_size=self.target_size)
            universe.create_remnant(x, y, self.color, self.config['black_hole_remnant_count'],
                                    self.config['black_hole_remnant_spread'])
            universe.inherit_legacy(self.color, self.config['black_hole_brightness_gain'])
            self.exploded = True
        elif self.death_branch is DeathBranch.SUPERNOVA:
            universe.explode(x, y, self.mass, self.color, DeathBranch.SUPERNOVA)
            universe.create_remnant(x, y, self.color, self.config['supernova_remnant_count'],
                                    self.config['supernova_remnant_spread'])
            universe.inherit_legacy(self.color, self.config['supernova_brightness_gain'])
            self.size = 0.0
            self.exploded = True
        else:
            self._fade_to_nebula(ctx, universe)

        if self.exploded:
            logger.info(f"Death branch {self.death_branch.value} resolved at ({x:.0f}, {y:.0f}).")

    def _fade_to_nebula(self, ctx, universe):
        x, y = self.position
        self.size -= self.config['nebula_shrink_rate']
        self.alpha = max(0.0, self.alpha - self.config['nebula_fade_rate'])
        if ctx.frame % self.config['nebula_shed_interval'] == 0:
            universe.explode(x, y, self.mass, self.color, DeathBranch.NEBULA)

        if self.size <= 0:
            self.size = 0.0
            universe.create_remnant(x, y, self.color, self.config['nebula_remnant_count'],
                                    self.config['nebula_remnant_spread'])
            universe.spawn_white_dwarf(x, y)
            universe.inherit_legacy(self.color, self.config['nebula_brightness_gain'])
            self.exploded = True

    # --- Rendering ---

    def pulse(self, ctx) -> float:
        """
        Size offset from pulsation. Both speed and amplitude rise with
        instability; very unstable stars get an irregular, noise-driven phase.
        """
        speed = remap_range(self.instability, 0, 100, self.config['pulse_speed_range'])
        amplitude = remap_range(self.instability, 0, 100, self.config['pulse_amplitude_range'])
        t = ctx.frame * speed
        if self.instability > self.config['irregular_pulse_threshold']:
            t += ctx.field.noise(ctx.frame * self.config['irregular_pulse_noise_scale']) \
                * self.config['irregular_pulse_strength']
        return float(np.sin(t) * amplitude)

    @property
    def is_black_hole(self):
        return self.death_branch is DeathBranch.BLACK_HOLE

    def draw(self, canvas, ctx):
        current_size = self.size + self.pulse(ctx)

        if ctx.state is SceneState.BLACK_HOLE_SINK or (self.is_black_hole and self.exploded):
            self._draw_event_horizon(canvas, current_size)
        elif self.size > 0:
            self._draw_glow(canvas, ctx, current_size)
            self._draw_body(canvas, ctx, current_size)
            if self.mass > self.config['halo_mass']:
                self._draw_halo(canvas, current_size)

    def _draw_glow(self, canvas, ctx, current_size):
        breathing = 1.0
        if self.mass > self.config['glow_pulse_mass']:
            breathing += np.sin(ctx.frame * 0.1) * 0.05
        layers = self.config['glow_layers']
        for i in range(layers, 0, -1):
            diameter = (current_size + i * self.config['glow_spacing']) * breathing
            canvas.circle(self.position, diameter / 2, (*self.color, (self.alpha / 12) / i))

    def _draw_body(self, canvas, ctx, current_size):
        fill = (*self.color, self.alpha)
        threshold = self.config['distortion_threshold']
        if self.instability <= threshold:
            canvas.circle(self.position, current_size / 2, fill)
            return

        max_offset = remap(self.instability, threshold, 100, 0, self.config['distortion_max_offset'])
        z = ctx.frame * self.config['distortion_noise_speed']
        points = []
        for a in np.arange(0, constants.TWO_PI, self.config['distortion_vertex_step']):
            ca, sa = np.cos(a), np.sin(a)
            r = current_size / 2 + ctx.field.noise(ca + 1, sa + 1, z) * max_offset
            points.append((self.position[0] + ca * r, self.position[1] + sa * r))
        canvas.polygon(points, fill)

    def _draw_halo(self, canvas, current_size):
        x, y = self.position
        length = current_size * 2
        color = (*self.color, 50)
        canvas.line((x - length, y), (x + length, y), color)
        canvas.line((x, y - length), (x, y + length), color)

    def _draw_event_horizon(self, canvas, current_size):
        radius = max(current_size, self.target_size) * 0.4
        for i in range(3, 0, -1):
            canvas.circle(self.position, radius * (1.5 + 0.5 * i), (*self.color, 50 / i))
        canvas.circle(self.position, radius, (*constants.EVENT_HORIZON, 255))
        canvas.circle(self.position, radius, constants.HORIZON_RING, width=1)
