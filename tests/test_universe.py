import pytest

from particle import Particle, ParticleMode, Remnant
from star import Star
from states import DeathBranch, SceneState
from universe import Universe


@pytest.fixture
def universe(fast_config, field):
    return Universe(fast_config, field, (800, 600))


def test_background_stars_are_static_and_in_bounds(universe, fast_config):
    assert len(universe.background_stars) == fast_config['background_star_count']
    for s in universe.background_stars:
        assert 0 <= s.x <= 800 and 0 <= s.y <= 600
        assert 0.5 <= s.size <= 1.5


def test_dust_populates_annulus_around_star(universe, fast_config):
    universe.set_star(Star(400, 300, 50, 10, fast_config))
    universe.init_dust_particles()
    assert len(universe.dust_particles) == fast_config['dust_particle_count']
    for p in universe.dust_particles:
        distance = ((p.position[0] - 400) ** 2 + (p.position[1] - 300) ** 2) ** 0.5
        assert 800 * 0.2 - 1e-6 <= distance <= 800 + 1e-6
        assert p.mode is ParticleMode.AMBIENT

    universe.begin_accretion()
    assert all(p.mode is ParticleMode.SEEKING for p in universe.dust_particles)


def test_dust_without_star_is_an_error(universe):
    with pytest.raises(RuntimeError):
        universe.init_dust_particles()


def test_shake_decays_geometrically_to_exact_zero(universe, fast_config):
    universe.shake(10.0)
    magnitudes = []
    while universe.shake_amount > 0:
        dx, dy = universe._next_shake_offset()
        assert abs(dx) <= 10.0 and abs(dy) <= 10.0
        magnitudes.append(universe.shake_amount)
        assert len(magnitudes) < 200
    assert magnitudes[0] == pytest.approx(10.0 * fast_config['shake_decay'])
    assert magnitudes[1] == pytest.approx(10.0 * fast_config['shake_decay'] ** 2)
    assert universe.shake_amount == 0.0
    assert universe._next_shake_offset() == (0.0, 0.0)


def test_supernova_burst_scales_with_mass(universe):
    universe.supernova(0, 0, 55, (255, 255, 255))
    light = len(universe.effect_particles)
    universe.effect_particles = []
    universe.supernova(0, 0, 90, (255, 255, 255))
    heavy = len(universe.effect_particles)
    assert heavy > light
    assert all(p.mode is ParticleMode.EXPLOSIVE for p in universe.effect_particles)


def test_gravity_collapse_engulfs_dust(universe, fast_config):
    universe.set_star(Star(400, 300, 95, 10, fast_config))
    universe.init_dust_particles()
    universe.explode(400, 300, 95, (100, 180, 255), DeathBranch.BLACK_HOLE, star_size=40)
    assert universe.collapse_flare is not None
    assert universe.shake_amount == fast_config['collapse_shake']
    assert all(p.mode is ParticleMode.COLLAPSING for p in universe.effect_particles)
    assert all(p.mode is ParticleMode.COLLAPSING for p in universe.dust_particles)
    assert all(tuple(p.anchor) == (400, 300) for p in universe.dust_particles)


def test_explode_rejects_unknown_branch(universe):
    with pytest.raises(ValueError):
        universe.explode(0, 0, 50, (1, 2, 3), DeathBranch.NONE)


def test_legacy_brightness_ratchets_up_to_cap(universe, fast_config):
    universe.inherit_legacy((10, 20, 30), 0.6)
    universe.inherit_legacy((40, 50, 60), 0.6)
    universe.inherit_legacy((70, 80, 90), 0.6)
    assert universe.legacy_brightness == fast_config['legacy_brightness_cap']
    assert universe.legacy_color == (70, 80, 90)


def test_remnants_survive_reset(universe, fast_config):
    universe.set_star(Star(400, 300, 50, 10, fast_config))
    universe.create_remnant(10, 10, (200, 200, 200), 5, 20)
    universe.reset_transient()
    assert universe.star is None
    assert len(universe.remnants) == 5


def test_sweep_removes_faded_particles(universe, make_context, canvas):
    ctx = make_context(state=SceneState.OBSERVATION)
    universe.effect_particles = [
        Particle((0, 0), universe.config, mode=ParticleMode.EXPLOSIVE, alpha=0.5, decay=1.0),
        Particle((0, 0), universe.config, mode=ParticleMode.EXPLOSIVE, alpha=100, decay=1.0),
    ]
    universe.draw(canvas, ctx)
    assert len(universe.effect_particles) == 1
    assert universe.effect_particles[0].alpha == 99


def _first(calls, color_prefix):
    for i, call in enumerate(calls):
        if call[0] == "circle" and call[3][:3] == color_prefix:
            return i
    raise AssertionError(f"no circle drawn with color {color_prefix}")


def test_draw_layers_in_fixed_order(universe, fast_config, make_context, canvas):
    star = Star(400, 300, 20, 10, fast_config)
    star.size, star.alpha = 20, 255
    universe.set_star(star)
    universe.remnants = [Remnant((10, 10), (0, 0), 2, 100, (1, 2, 3), 500)]
    universe.dust_particles = [Particle((50, 50), fast_config, color=(4, 5, 6))]
    universe.effect_particles = [Particle((60, 60), fast_config, mode=ParticleMode.EXPLOSIVE, color=(7, 8, 9))]
    universe.spawn_white_dwarf(200, 200)
    universe.shake(5)

    ctx = make_context(state=SceneState.BIG_BANG, star_position=(400.0, 300.0),
                       big_bang_timer=fast_config['big_bang_frames'] / 2)
    universe.draw(canvas, ctx)
    calls = canvas.calls
    kinds = canvas.kinds()

    assert kinds[0] == "set_offset" and calls[0][1] != (0.0, 0.0)
    assert kinds[1] == "background"
    remnant = _first(calls, (1, 2, 3))
    tint = kinds.index("rect")
    background_star = next(i for i, c in enumerate(calls) if c[0] == "circle" and i > tint)
    dwarf = _first(calls, (235, 240, 255))
    dust = _first(calls, (4, 5, 6))
    effect = _first(calls, (7, 8, 9))
    body = _first(calls, tuple(star.color))
    assert 1 < remnant < tint < background_star < dwarf < dust < effect < body
    assert calls[-2] == ("set_offset", (0.0, 0.0))
    assert kinds[-1] == "overlay"
    assert calls[-1][1][3] == pytest.approx(127.5)


def test_big_bang_flash_never_exceeds_opaque(universe, fast_config, make_context, canvas):
    ctx = make_context(state=SceneState.BIG_BANG, big_bang_timer=fast_config['big_bang_frames'] * 3)
    universe.draw(canvas, ctx)
    assert canvas.calls[-1] == ("overlay", (255, 255, 255, 255.0))
