# states.py

"""
Scene states, death branches, and the per-frame context handed to every
update call in place of module-level globals.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from random_field import RandomField


class SceneState(Enum):
    INIT = "INIT"
    SELECT_POSITION = "SELECT_POSITION"
    SET_PARAMETERS = "SET_PARAMETERS"
    BIG_BANG = "BIG_BANG"
    STAR_FORMATION = "STAR_FORMATION"
    OBSERVATION = "OBSERVATION"
    BLACK_HOLE_SINK = "BLACK_HOLE_SINK"
    END = "END"


class DeathBranch(Enum):
    NONE = "NONE"
    NEBULA = "NEBULA"
    SUPERNOVA = "SUPERNOVA"
    BLACK_HOLE = "BLACK_HOLE"


# States that can only be entered once a Star exists.
STAR_REQUIRED_STATES = frozenset({
    SceneState.BIG_BANG,
    SceneState.STAR_FORMATION,
    SceneState.OBSERVATION,
    SceneState.BLACK_HOLE_SINK,
    SceneState.END,
})


@dataclass
class FrameContext:
    """
    Snapshot of scene-level values for one frame.

    `transition` is the controller's change_state; components call it to
    request a state change and the change takes effect immediately.
    `big_bang_timer` and `sink_alpha` feed the full-screen overlays.
    """
    frame: int
    state: SceneState
    field: RandomField
    transition: Callable[[SceneState], None]
    star_position: Optional[Tuple[float, float]] = None
    big_bang_timer: float = 0.0
    sink_alpha: float = 0.0
