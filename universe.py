# universe.py

import logging
from collections import namedtuple

import numpy as np

import constants
from effects import CollapseFlare, WhiteDwarf
from mapping import lerp_color, remap, remap_range
from particle import Particle, ParticleMode, Remnant
from states import DeathBranch, SceneState

logger = logging.getLogger("stellar_cycle")

# A static point in the starfield. Never mutated after initialization.
BackgroundStar = namedtuple('BackgroundStar', ['x', 'y', 'size', 'alpha'])


class Universe:
    """
    Owns every entity in the scene and advances them once per frame.

    Collections:
    - background_stars: static starfield, built once.
    - dust_particles: the accretion field for the current star.
    - effect_particles: bursts from death branches.
    - remnants: long-lived debris, kept across star generations.

    The legacy color/brightness is the only state carried from one star to the
    next. It changes only through inherit_legacy(), which only a star's death
    resolution calls.

    Data Contract:
    - Inputs: config (dict) - the "simulation" section of config.json.
              field (RandomField) - source of all randomness and noise.
              bounds (tuple) - (width, height) of the drawing area.
    - Outputs: None. draw() issues draw calls on the canvas it is given.
    """
    def __init__(self, config: dict, field, bounds: tuple):
        self.config = config
        self.field = field
        self.bounds = bounds

        self.background_stars = []
        self.dust_particles = []
        self.effect_particles = []
        self.remnants = []
        self.star = None

        self.shake_amount = 0.0
        self.noise_offset = 0.0
        self.flash_timer = 0
        self.white_dwarf = None
        self.collapse_flare = None

        self.legacy_color = None
        self.legacy_brightness = 0.0

        self.init_background_stars()
        logger.info(f"Universe created with bounds {bounds} and {len(self.background_stars)} background stars.")

    # --- Population ---

    def init_background_stars(self):
        width, height = self.bounds
        self.background_stars = [
            BackgroundStar(
                x=self.field.uniform(0, width),
                y=self.field.uniform(0, height),
                size=self.field.uniform_range(self.config['background_star_size_range']),
                alpha=self.field.uniform_range(self.config['background_star_alpha_range']),
            )
            for _ in range(self.config['background_star_count'])
        ]

    def init_dust_particles(self):
        """Scatters ambient dust in an annulus around the star."""
        if self.star is None:
            raise RuntimeError("Dust particles need a star to gather around.")

        width, height = self.bounds
        inner = width * self.config['dust_inner_radius_fraction']
        outer = max(width, height)
        center = self.star.position

        self.dust_particles = []
        for _ in range(self.config['dust_particle_count']):
            offset = self.field.polar(self.field.uniform(inner, outer))
            self.dust_particles.append(Particle(
                center + offset,
                self.config,
                mode=ParticleMode.AMBIENT,
                velocity=self.field.vector(-1, 1),
                size=self.field.uniform_range(self.config['particle_size_range']),
                alpha=self.field.uniform_range(self.config['particle_alpha_range']),
                phase=self.field.angle(),
            ))
        logger.debug(f"Populated {len(self.dust_particles)} dust particles.")

    def begin_accretion(self):
        for p in self.dust_particles:
            p.mode = ParticleMode.SEEKING
            # Accretion starts from rest.
            p.velocity[:] = 0.0

    def set_star(self, star):
        self.star = star

    def reset_transient(self):
        """Clears everything belonging to the current star generation."""
        self.star = None
        self.dust_particles = []
        self.effect_particles = []
        self.flash_timer = 0
        self.collapse_flare = None
        self.shake_amount = 0.0

    # --- Death-branch effects ---

    def explode(self, x, y, mass, color, mode: DeathBranch, star_size: float = None):
        """Spawns the burst belonging to a death branch."""
        if mode is DeathBranch.SUPERNOVA:
            self.supernova(x, y, mass, color)
        elif mode is DeathBranch.BLACK_HOLE:
            size = star_size if star_size is not None else remap_range(mass, 0, 100, self.config['star_size_range'])
            self.gravity_collapse(x, y, mass, color, size)
        elif mode is DeathBranch.NEBULA:
            self.nebula_release(x, y, mass, color)
        else:
            raise ValueError(f"No burst defined for death branch {mode}")

    def _burst_count(self, mass, count_range):
        return max(0, int(remap_range(mass, 0, 100, count_range)))

    def supernova(self, x, y, mass, color):
        cfg = self.config
        self.shake(cfg['supernova_shake'])
        self.flash_timer = cfg['supernova_flash_frames']

        palette = list(constants.SUPERNOVA_PALETTE) + [tuple(color)]
        max_speed = remap_range(mass, 0, 100, cfg['supernova_speed_max_range'])
        count = self._burst_count(mass, cfg['supernova_count_range'])
        for _ in range(count):
            self.effect_particles.append(Particle(
                (x, y),
                cfg,
                mode=ParticleMode.EXPLOSIVE,
                velocity=self.field.polar(self.field.uniform(1, max_speed)),
                size=self.field.uniform_range(cfg['particle_size_range']),
                alpha=self.field.uniform_range(cfg['particle_alpha_range']),
                color=self.field.choice(palette),
                decay=self.field.uniform_range(cfg['supernova_alpha_decay_range']),
            ))
        logger.debug(f"Supernova at ({x:.0f}, {y:.0f}) released {count} particles.")

    def gravity_collapse(self, x, y, mass, color, star_size):
        cfg = self.config
        self.shake(cfg['collapse_shake'])
        self.collapse_flare = CollapseFlare(
            (x, y),
            star_size * cfg['collapse_flare_scale'],
            color,
            cfg['collapse_flare_grow_frames'],
            cfg['collapse_flare_fade_frames'],
        )

        anchor = np.array([x, y], dtype=float)
        palette = [tuple(color), constants.COLLAPSE_TINT]
        count = self._burst_count(mass, cfg['collapse_count_range'])
        for _ in range(count):
            radial = self.field.polar(self.field.uniform_range(cfg['collapse_ring_radius_range']))
            # Tangential launch so the debris swirls once the pull releases it.
            tangent = np.array([-radial[1], radial[0]])
            tangent /= max(np.linalg.norm(tangent), 1e-9)
            self.effect_particles.append(Particle(
                anchor + radial,
                cfg,
                mode=ParticleMode.COLLAPSING,
                velocity=tangent * self.field.uniform_range(cfg['collapse_speed_range']),
                size=self.field.uniform_range(cfg['particle_size_range']),
                alpha=self.field.uniform_range(cfg['particle_alpha_range']),
                color=self.field.choice(palette),
                anchor=anchor,
            ))

        # Dust still floating around is swallowed too.
        for p in self.dust_particles:
            p.mode = ParticleMode.COLLAPSING
            p.anchor = anchor.copy()
        logger.debug(f"Gravity collapse at ({x:.0f}, {y:.0f}) pulled in {count} particles.")

    def nebula_release(self, x, y, mass, color):
        cfg = self.config
        spread = cfg['nebula_shed_spread']
        count = self._burst_count(mass, cfg['nebula_shed_count_range'])
        for _ in range(count):
            offset = self.field.vector(-spread, spread)
            self.effect_particles.append(Particle(
                (x + offset[0], y + offset[1]),
                cfg,
                mode=ParticleMode.EXPLOSIVE,
                velocity=self.field.polar(self.field.uniform_range(cfg['nebula_shed_speed_range'])),
                size=self.field.uniform_range(cfg['particle_size_range']),
                alpha=self.field.uniform_range(cfg['particle_alpha_range']),
                color=lerp_color(color, constants.WHITE, self.field.uniform(0, 0.3)),
                decay=1.0,
            ))

    def create_remnant(self, x, y, color, count: int, spread: float):
        cfg = self.config
        drift = cfg['remnant_drift']
        for _ in range(count):
            offset = self.field.polar(self.field.uniform(0, spread))
            self.remnants.append(Remnant(
                (x + offset[0], y + offset[1]),
                self.field.vector(-drift, drift),
                size=self.field.uniform_range(cfg['remnant_size_range']),
                alpha=self.field.uniform_range(cfg['remnant_alpha_range']),
                color=lerp_color(color, constants.WHITE, self.field.uniform(0, 0.4)),
                life=self.field.uniform_range(cfg['remnant_life_range']),
            ))
        logger.debug(f"Deposited {count} remnant points at ({x:.0f}, {y:.0f}); total {len(self.remnants)}.")

    def spawn_white_dwarf(self, x, y):
        self.white_dwarf = WhiteDwarf((x, y), self.config['white_dwarf_size'], self.config['white_dwarf_fade_frames'])

    def inherit_legacy(self, color, gain: float):
        """Records a dying star's color and brightens the ambient light (capped)."""
        self.legacy_color = tuple(float(c) for c in color)
        self.legacy_brightness = min(self.config['legacy_brightness_cap'], self.legacy_brightness + gain)
        logger.info(
            f"Legacy updated: color=({self.legacy_color[0]:.0f}, {self.legacy_color[1]:.0f}, "
            f"{self.legacy_color[2]:.0f}), brightness={self.legacy_brightness:.2f}"
        )

    # --- Screen shake ---

    def shake(self, amount: float):
        self.shake_amount = amount

    def _next_shake_offset(self):
        """Returns this frame's random offset and decays the shake magnitude."""
        if self.shake_amount <= 0:
            return 0.0, 0.0
        s = self.shake_amount
        offset = (self.field.uniform(-s, s), self.field.uniform(-s, s))
        self.shake_amount *= self.config['shake_decay']
        if self.shake_amount < self.config['shake_cutoff']:
            self.shake_amount = 0.0
        return offset

    # --- Frame ---

    def draw(self, canvas, ctx):
        """
        Advances and renders one frame. The order below is the layering order
        and must not change.
        """
        canvas.set_offset(*self._next_shake_offset())

        self._draw_background(canvas)
        self._sweep_remnants(canvas)
        self._draw_ambient_tint(canvas)
        self._draw_background_stars(canvas, ctx)
        self._draw_special_effects(canvas)

        self.dust_particles = self._sweep(self.dust_particles, canvas, ctx)
        self.effect_particles = self._sweep(self.effect_particles, canvas, ctx)

        if self.star is not None:
            self.star.update(ctx, self)
            self.star.draw(canvas, ctx)

        canvas.set_offset(0.0, 0.0)
        self._draw_overlays(canvas, ctx)

    def _draw_background(self, canvas):
        lift = self.legacy_brightness * 10
        canvas.background(tuple(c + lift for c in constants.SPACE_WASH))

    def _sweep_remnants(self, canvas):
        for r in self.remnants:
            r.update()
            r.draw(canvas)
        self.remnants = [r for r in self.remnants if not r.expired]

    def _draw_ambient_tint(self, canvas):
        res = constants.TINT_RESOLUTION
        width, height = self.bounds
        xs = np.arange(0, width + res, res, dtype=float)
        ys = np.arange(0, height + res, res, dtype=float)
        scale = self.config['tint_noise_scale']
        samples = self.field.noise_grid(xs * scale, ys * scale, self.noise_offset)

        tint = constants.WHITE
        if self.legacy_color is not None:
            tint = lerp_color(constants.WHITE, self.legacy_color, 0.5)
        max_alpha = self.config['tint_max_alpha'] * (1 + self.legacy_brightness)
        for i, x in enumerate(xs):
            for j, y in enumerate(ys):
                canvas.rect(x, y, res, res, (*tint, samples[i, j] * max_alpha))
        self.noise_offset += self.config['tint_noise_speed']

    def _draw_background_stars(self, canvas, ctx):
        speed = self.config['twinkle_speed']
        boost = 1 + self.legacy_brightness * 0.5
        for s in self.background_stars:
            twinkle = 0.5 + 0.5 * np.sin(ctx.frame * speed + s.x)
            canvas.circle((s.x, s.y), s.size / 2, (*constants.WHITE, s.alpha * twinkle * boost))

    def _draw_special_effects(self, canvas):
        if self.white_dwarf is not None:
            self.white_dwarf.update()
            self.white_dwarf.draw(canvas)
            if self.white_dwarf.finished:
                self.white_dwarf = None
        if self.collapse_flare is not None:
            self.collapse_flare.update()
            self.collapse_flare.draw(canvas)
            if self.collapse_flare.finished:
                self.collapse_flare = None

    @staticmethod
    def _sweep(particles, canvas, ctx):
        for p in particles:
            p.update(ctx)
            p.draw(canvas)
        return [p for p in particles if p.alpha > 0]

    def _draw_overlays(self, canvas, ctx):
        if ctx.state is SceneState.BIG_BANG:
            flash = min(255.0, remap(ctx.big_bang_timer, 0, self.config['big_bang_frames'], 0, 255))
            canvas.overlay((*constants.WHITE, flash))

        if self.flash_timer > 0:
            flash = remap(self.flash_timer, 0, self.config['supernova_flash_frames'], 0, 255)
            canvas.overlay((*constants.WHITE, flash))
            self.flash_timer -= 1

        if ctx.state is SceneState.BLACK_HOLE_SINK:
            canvas.overlay((*constants.BLACK, ctx.sink_alpha))
