import json
from pathlib import Path

import pytest

from random_field import RandomField
from states import FrameContext, SceneState

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"


class RecordingCanvas:
    """Stands in for the pygame canvas; keeps every draw call in order."""
    def __init__(self):
        self.calls = []

    def set_offset(self, dx, dy):
        self.calls.append(("set_offset", (dx, dy)))

    def background(self, color):
        self.calls.append(("background", tuple(color)))

    def overlay(self, color):
        self.calls.append(("overlay", tuple(color)))

    def circle(self, center, radius, color, width=0):
        self.calls.append(("circle", (float(center[0]), float(center[1])), radius, tuple(color), width))

    def polygon(self, points, color, width=0):
        self.calls.append(("polygon", list(points), tuple(color)))

    def line(self, start, end, color, width=1):
        self.calls.append(("line", tuple(start), tuple(end), tuple(color)))

    def rect(self, x, y, w, h, color):
        self.calls.append(("rect", (x, y, w, h), tuple(color)))

    def kinds(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def full_config():
    with open(CONFIG_PATH, "r") as f:
        return json.load(f)


@pytest.fixture
def sim_config(full_config):
    return dict(full_config["simulation"])


@pytest.fixture
def fast_config(sim_config):
    """Shortened timers and small populations so whole lifecycles run quickly."""
    sim_config.update({
        "background_star_count": 10,
        "dust_particle_count": 20,
        "star_life_range": [40.0, 120.0],
        "big_bang_frames": 10,
        "formation_frames": 30,
        "select_delay_frames": 3,
        "end_reveal_frames": 5,
        "sink_rate": 20.0,
        "supernova_count_range": [20, 60],
        "collapse_count_range": [10, 30],
    })
    return sim_config


@pytest.fixture
def field():
    return RandomField(1234)


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def make_context(field):
    """Builds a FrameContext; transitions requested through it are recorded."""
    def _make(state=SceneState.OBSERVATION, frame=0, star_position=None, **kwargs):
        requested = []
        ctx = FrameContext(
            frame=frame,
            state=state,
            field=field,
            transition=requested.append,
            star_position=star_position,
            **kwargs,
        )
        ctx.requested = requested
        return ctx
    return _make
