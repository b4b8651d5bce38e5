import pytest

import constants
from scene import SceneController
from star import star_color
from states import DeathBranch, SceneState
from universe import Universe


@pytest.fixture
def universe(fast_config, field):
    return Universe(fast_config, field, (800, 600))


@pytest.fixture
def controller(universe, field, fast_config):
    return SceneController(universe, field, fast_config)


@pytest.fixture
def transitions(controller):
    seen = []
    controller.add_listener(lambda old, new: seen.append(new))
    return seen


def run_until(controller, canvas, state, limit=5000):
    for _ in range(limit):
        if controller.state is state:
            return
        controller.step(canvas)
    raise AssertionError(f"never reached {state}; stuck in {controller.state}")


def test_click_is_ignored_outside_position_selection(controller, canvas):
    controller.click(10, 10)
    assert controller.target_position is None
    controller.confirm(50, 50)
    assert controller.state is SceneState.INIT


def test_click_leads_to_parameters_after_delay(controller, canvas, fast_config):
    controller.start()
    controller.click(100, 100)
    controller.click(300, 300)
    assert controller.target_position == (100.0, 100.0)

    for _ in range(fast_config['select_delay_frames'] - 1):
        controller.step(canvas)
        assert controller.state is SceneState.SELECT_POSITION
    controller.step(canvas)
    assert controller.state is SceneState.SET_PARAMETERS
    assert controller.select_timer is None


def test_restart_cancels_pending_selection(controller, canvas):
    controller.start()
    controller.click(100, 100)
    controller.restart()
    assert controller.state is SceneState.INIT
    assert controller.select_timer is None
    for _ in range(10):
        controller.step(canvas)
    assert controller.state is SceneState.INIT


def test_big_bang_requires_a_star(controller):
    with pytest.raises(RuntimeError):
        controller.change_state(SceneState.BIG_BANG)
    assert controller.state is SceneState.INIT


def test_confirm_builds_star_and_ignites(controller, universe, canvas, fast_config):
    controller.start()
    controller.click(200, 150)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(60, 40)

    assert controller.state is SceneState.BIG_BANG
    assert universe.star.mass == 60
    assert tuple(universe.star.position) == (200, 150)
    assert controller.big_bang_timer == fast_config['big_bang_frames']
    assert len(universe.dust_particles) == fast_config['dust_particle_count']
    assert universe.shake_amount == fast_config['big_bang_shake']


def test_formation_lasts_fixed_frame_count(controller, canvas, fast_config):
    controller.start()
    controller.click(200, 150)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(60, 40)
    run_until(controller, canvas, SceneState.STAR_FORMATION)

    for _ in range(fast_config['formation_frames'] - 1):
        controller.step(canvas)
        assert controller.state is SceneState.STAR_FORMATION
    controller.step(canvas)
    assert controller.state is SceneState.OBSERVATION


def test_black_hole_lifecycle_end_to_end(controller, universe, canvas, transitions):
    legacy_updates = []
    original = universe.inherit_legacy

    def counting_inherit(color, gain):
        legacy_updates.append(color)
        original(color, gain)

    universe.inherit_legacy = counting_inherit

    controller.start()
    controller.click(100, 100)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(95, 80)
    run_until(controller, canvas, SceneState.END)
    for _ in range(20):
        controller.step(canvas)

    assert transitions == [
        SceneState.SELECT_POSITION,
        SceneState.SET_PARAMETERS,
        SceneState.BIG_BANG,
        SceneState.STAR_FORMATION,
        SceneState.OBSERVATION,
        SceneState.BLACK_HOLE_SINK,
        SceneState.END,
    ]
    assert universe.star.death_branch is DeathBranch.BLACK_HOLE
    assert len(legacy_updates) == 1
    assert controller.end_message == constants.END_MESSAGES["BLACK_HOLE"]
    assert controller.end_message_visible


def test_supernova_skips_the_sink(controller, universe, canvas, transitions):
    controller.start()
    controller.click(400, 300)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(70, 20)
    run_until(controller, canvas, SceneState.END)
    controller.step(canvas)

    assert SceneState.BLACK_HOLE_SINK not in transitions
    assert universe.star.exploded
    assert universe.legacy_color == pytest.approx(universe.star.color)
    assert controller.end_message == constants.END_MESSAGES["SUPERNOVA"]
    assert not controller.end_message_visible


def test_restart_carries_legacy_into_next_star(controller, universe, canvas, fast_config):
    controller.start()
    controller.click(400, 300)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(70, 20)
    run_until(controller, canvas, SceneState.END)
    controller.step(canvas)
    legacy = universe.legacy_color
    remnants = len(universe.remnants)

    controller.restart()
    assert universe.star is None
    assert universe.dust_particles == [] and universe.effect_particles == []
    assert len(universe.remnants) == remnants
    assert controller.end_message == ""

    controller.start()
    controller.click(100, 100)
    run_until(controller, canvas, SceneState.SET_PARAMETERS)
    controller.confirm(70, 20)
    assert universe.star.color == pytest.approx(star_color(70, legacy, fast_config["legacy_blend"]))
    assert universe.legacy_color == legacy


def test_each_black_hole_sink_starts_undarkened(controller, canvas):
    sink_started = []
    controller.add_listener(lambda old, new: sink_started.append(new is SceneState.BLACK_HOLE_SINK))

    first_sink_overlays = []
    for x in (100, 500):
        controller.start()
        controller.click(x, 100)
        run_until(controller, canvas, SceneState.SET_PARAMETERS)
        controller.confirm(95, 80)
        while controller.state is not SceneState.END:
            sink_started.clear()
            controller.step(canvas)
            if any(sink_started):
                first_sink_overlays.append(canvas.calls[-1])
        controller.restart()

    assert first_sink_overlays == [("overlay", (0, 0, 0, 0.0))] * 2
