# main.py

import json
import logging

import numpy as np
import pygame

import constants
import logger_setup
import renderer
from controls import ControlPanel
from simulation import GasSimulation

# Get the application's dedicated logger
logger = logging.getLogger("gas_laws")

SELECT_KEYS = {
    pygame.K_p: 'pressure',
    pygame.K_v: 'volume',
    pygame.K_n: 'moles',
    pygame.K_t: 'temperature',
}


def handle_key(event, panel: ControlPanel) -> bool:
    """Applies one key press to the control panel. Returns False to quit."""
    if event.key == pygame.K_ESCAPE:
        return False
    if event.key in SELECT_KEYS:
        panel.select(SELECT_KEYS[event.key])
    elif event.key == pygame.K_TAB:
        panel.cycle_mode()
    elif event.key == pygame.K_s:
        panel.reset_to_stp()
    elif event.key == pygame.K_UP:
        panel.nudge(panel.selected, +1)
    elif event.key == pygame.K_DOWN:
        panel.nudge(panel.selected, -1)
    elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        panel.commit_text(panel.selected)
    elif event.key == pygame.K_BACKSPACE:
        panel.backspace(panel.selected)
    elif event.unicode:
        panel.type_character(panel.selected, event.unicode)
    return True


def run_loop(simulation: GasSimulation, panel: ControlPanel, screen, clock, font):
    """
    Frame loop: input first, so the ticks run in the same frame see the latest
    state, then the fixed-step update, then drawing.
    """
    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = handle_key(event, panel) and running

        delta = clock.tick(constants.FPS) / 1000.0
        simulation.update(delta)

        screen.fill(constants.BACKGROUND)
        renderer.draw_particles(screen, simulation.world.positions, simulation.world.velocities, simulation.world.radius)
        renderer.draw_walls(screen, simulation.half_size)
        renderer.draw_panel(screen, font, panel, simulation.world.particle_count)
        pygame.display.flip()


def main():
    """
    Main function to initialize and run the gas laws demo.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT))
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas", constants.FONT_SIZE)

    simulation = GasSimulation(config=sim_config, rng=rng)
    panel = ControlPanel(simulation.engine)

    run_loop(simulation, panel, screen, clock, font)

    logger.info("Application shutting down.")
    pygame.quit()


if __name__ == "__main__":
    main()
