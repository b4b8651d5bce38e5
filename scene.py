# scene.py

import logging

import numpy as np

import constants
from star import Star
from states import DeathBranch, FrameContext, SceneState, STAR_REQUIRED_STATES

logger = logging.getLogger("stellar_cycle")


class SceneController:
    """
    The top-level state machine.

    Owns the current state, the frame counter and every per-state timer, and
    turns user input into state changes. Each frame, step() builds a
    FrameContext, lets the Universe advance and draw, then ticks the timers.

    Delayed transitions (click -> parameter screen, END message reveal) are
    countdown fields ticked here, so restarting cancels them and repeated
    input cannot stack them.

    Data Contract:
    - Inputs: universe (Universe), field (RandomField), config (dict) - the
      "simulation" section of config.json.
    - Outputs: state-change notifications to listeners registered with
      add_listener(callback(old_state, new_state)).
    - Invariants: no state in STAR_REQUIRED_STATES is entered without a star.
    """
    def __init__(self, universe, field, config: dict):
        self.universe = universe
        self.field = field
        self.config = config

        self.state = SceneState.INIT
        self.frame = 0
        self.target_position = None
        self.listeners = []

        self.select_timer = None
        self.big_bang_timer = 0
        self.formation_timer = 0
        self.sink_alpha = 0.0
        self.end_reveal_timer = None
        self.end_message = ""
        self.end_message_visible = False

        self._context = None

    def add_listener(self, callback):
        self.listeners.append(callback)

    # --- User input ---

    def start(self):
        if self.state is not SceneState.INIT:
            logger.debug(f"start() ignored in state {self.state.value}")
            return
        self.change_state(SceneState.SELECT_POSITION)

    def click(self, x: float, y: float):
        """Captures the star position; the parameter screen follows after a short delay."""
        if self.state is not SceneState.SELECT_POSITION:
            logger.debug(f"Click at ({x:.0f}, {y:.0f}) ignored in state {self.state.value}")
            return
        if self.select_timer is not None:
            logger.debug("Click ignored: position already chosen.")
            return
        self.target_position = (float(x), float(y))
        self.select_timer = self.config['select_delay_frames']
        logger.info(f"Target position selected: ({x:.0f}, {y:.0f})")

    def confirm(self, mass: float, instability: float):
        """Creates the star from the chosen parameters and ignites the big bang."""
        if self.state is not SceneState.SET_PARAMETERS:
            logger.debug(f"confirm() ignored in state {self.state.value}")
            return
        x, y = self.target_position
        star = Star(x, y, mass, instability, self.config, legacy_color=self.universe.legacy_color)
        self.universe.set_star(star)
        self.change_state(SceneState.BIG_BANG)

    def restart(self):
        self.change_state(SceneState.INIT)

    # --- Transitions ---

    def change_state(self, new_state: SceneState):
        """
        Switches to new_state. Entry side effects run before the state takes
        effect for listeners and the rest of the frame.
        """
        if new_state in STAR_REQUIRED_STATES and self.universe.star is None:
            raise RuntimeError(f"Cannot enter {new_state.value} without a star.")

        old_state = self.state
        self._enter(new_state)
        self.state = new_state
        if self._context is not None:
            self._context.state = new_state
            self._context.big_bang_timer = self.big_bang_timer
            self._context.sink_alpha = self.sink_alpha

        logger.info(f"State changed: {old_state.value} -> {new_state.value}")
        for callback in self.listeners:
            callback(old_state, new_state)

    def _enter(self, new_state: SceneState):
        if new_state is SceneState.INIT:
            self.universe.reset_transient()
            self.target_position = None
            self.select_timer = None
            self.big_bang_timer = 0
            self.formation_timer = 0
            self.sink_alpha = 0.0
            self.end_reveal_timer = None
            self.end_message = ""
            self.end_message_visible = False
        elif new_state is SceneState.SELECT_POSITION:
            self.select_timer = None
        elif new_state is SceneState.BIG_BANG:
            self.big_bang_timer = self.config['big_bang_frames']
            self.universe.shake(self.config['big_bang_shake'])
            self.universe.init_dust_particles()
        elif new_state is SceneState.STAR_FORMATION:
            self.formation_timer = self.config['formation_frames']
            self.universe.begin_accretion()
        elif new_state is SceneState.BLACK_HOLE_SINK:
            self.sink_alpha = 0.0
        elif new_state is SceneState.END:
            branch = self.universe.star.death_branch
            if branch is DeathBranch.NONE:
                raise RuntimeError("Cannot enter END before the star has died.")
            self.end_message = constants.END_MESSAGES[branch.value]
            self.end_reveal_timer = self.config['end_reveal_frames']
            self.end_message_visible = False

    # --- Frame ---

    def context(self) -> FrameContext:
        star = self.universe.star
        return FrameContext(
            frame=self.frame,
            state=self.state,
            field=self.field,
            transition=self.change_state,
            star_position=None if star is None else (float(star.position[0]), float(star.position[1])),
            big_bang_timer=self.big_bang_timer,
            sink_alpha=self.sink_alpha,
        )

    def step(self, canvas):
        """Runs one full frame: universe update+draw, crosshair, timers."""
        self._context = self.context()
        try:
            self.universe.draw(canvas, self._context)
            if self.state is SceneState.SELECT_POSITION and self.target_position is not None:
                self._draw_crosshair(canvas)
        finally:
            self._context = None
        self._tick_timers()
        self.frame += 1

    def _draw_crosshair(self, canvas):
        radius = (20 + np.sin(self.frame * 0.1) * 5) / 2
        canvas.circle(self.target_position, radius, (255, 255, 255, 100), width=1)

    def _tick_timers(self):
        if self.state is SceneState.SELECT_POSITION and self.select_timer is not None:
            self.select_timer -= 1
            if self.select_timer <= 0:
                self.select_timer = None
                self.change_state(SceneState.SET_PARAMETERS)
        elif self.state is SceneState.BIG_BANG:
            self.big_bang_timer -= 1
            if self.big_bang_timer <= 0:
                self.change_state(SceneState.STAR_FORMATION)
        elif self.state is SceneState.STAR_FORMATION:
            self.formation_timer -= 1
            if self.formation_timer <= 0:
                self.change_state(SceneState.OBSERVATION)
        elif self.state is SceneState.BLACK_HOLE_SINK:
            self.sink_alpha = min(self.config['sink_max_alpha'], self.sink_alpha + self.config['sink_rate'])
            if self.sink_alpha >= self.config['sink_max_alpha']:
                self.change_state(SceneState.END)
        elif self.state is SceneState.END and self.end_reveal_timer is not None:
            self.end_reveal_timer -= 1
            if self.end_reveal_timer <= 0:
                self.end_reveal_timer = None
                self.end_message_visible = True
                logger.info(f"End message revealed: {self.end_message}")
