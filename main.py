# main.py

import json
import logging

import pygame

import constants
import logger_setup
from canvas import PygameCanvas
from random_field import RandomField
from scene import SceneController
from states import SceneState
from universe import Universe

# Get the application's dedicated logger
logger = logging.getLogger("stellar_cycle")

# On-screen instructions per state panel.
PANEL_TEXT = {
    SceneState.INIT: "Stellar Cycle  -  press SPACE to begin",
    SceneState.SELECT_POSITION: "Click anywhere to choose where the star is born",
    SceneState.SET_PARAMETERS: "UP/DOWN mass   LEFT/RIGHT instability   ENTER observe",
    SceneState.OBSERVATION: "Observing...",
}

PARAMETER_STEP = 5.0


class ParameterPanel:
    """Holds the mass/instability values the player is editing."""
    def __init__(self, mass: float = 50.0, instability: float = 30.0):
        self.mass = mass
        self.instability = instability

    def adjust(self, d_mass: float = 0.0, d_instability: float = 0.0):
        self.mass = min(100.0, max(0.0, self.mass + d_mass))
        self.instability = min(100.0, max(0.0, self.instability + d_instability))


def handle_key(key, controller: SceneController, panel: ParameterPanel):
    """Maps a key press to a controller action. Returns False to quit."""
    if key == pygame.K_ESCAPE:
        return False
    if key == pygame.K_SPACE:
        controller.start()
    elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        controller.confirm(panel.mass, panel.instability)
    elif key == pygame.K_r and controller.state is SceneState.END:
        controller.restart()
    elif controller.state is SceneState.SET_PARAMETERS:
        if key == pygame.K_UP:
            panel.adjust(d_mass=PARAMETER_STEP)
        elif key == pygame.K_DOWN:
            panel.adjust(d_mass=-PARAMETER_STEP)
        elif key == pygame.K_RIGHT:
            panel.adjust(d_instability=PARAMETER_STEP)
        elif key == pygame.K_LEFT:
            panel.adjust(d_instability=-PARAMETER_STEP)
    return True


def draw_hud(screen, font, controller: SceneController, panel: ParameterPanel):
    lines = []
    if controller.state in PANEL_TEXT:
        lines.append((PANEL_TEXT[controller.state], constants.HUD_TEXT))
    if controller.state is SceneState.SET_PARAMETERS:
        lines.append((f"Mass {panel.mass:.0f}    Instability {panel.instability:.0f}", constants.HUD_TEXT))
    if controller.state is SceneState.END and controller.end_message_visible:
        lines.append((controller.end_message, constants.HUD_TEXT))
        lines.append(("Press R to begin again", constants.HUD_DIM))

    y = constants.HEIGHT - 30 * len(lines) - 20
    for text, color in lines:
        rendered = font.render(text, True, color)
        screen.blit(rendered, ((constants.WIDTH - rendered.get_width()) // 2, y))
        y += 30


def run_simulation_loop(controller: SceneController, universe: Universe, screen, clock, font):
    """
    The main frame loop: events, one simulation step, HUD, flip.
    """
    canvas = PygameCanvas(screen)
    panel = ParameterPanel()
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = handle_key(event.key, controller, panel) and running
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                controller.click(*event.pos)

        controller.step(canvas)
        draw_hud(screen, font, controller, panel)

        # --- Logging (throttled) ---
        if controller.frame % 100 == 0:
            logger.debug(
                f"Frame={controller.frame}, "
                f"State={controller.state.value}, "
                f"Dust={len(universe.dust_particles)}, "
                f"Effects={len(universe.effect_particles)}, "
                f"Remnants={len(universe.remnants)}, "
                f"Shake={universe.shake_amount:.2f}, "
                f"FPS={clock.get_fps():.1f}"
            )

        pygame.display.flip()
        clock.tick(constants.FPS)


def main():
    """
    Main function to initialize and run the stellar cycle simulation.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    field = RandomField(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT))
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 28)

    universe = Universe(config=sim_config, field=field, bounds=(constants.WIDTH, constants.HEIGHT))
    controller = SceneController(universe, field, sim_config)

    run_simulation_loop(controller, universe, screen, clock, font)

    logger.info("Application shutting down.")
    pygame.quit()


if __name__ == "__main__":
    main()
