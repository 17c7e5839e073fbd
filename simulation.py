# simulation.py

"""
Kinetic synchronization loop.

GasSimulation ties the StateEngine to the particle world. Edits reach the
engine synchronously from input handling; the walls follow V as soon as it
changes, and on each fixed tick the Thermostat brings population size and
speed in line with n and T before the world is stepped.
"""

import logging

import numpy as np

import population
from gas_state import ConstraintMode, StateEngine
from physics_world import ParticleWorld
from simulation_clock import SimulationClock
from thermostat import Thermostat

logger = logging.getLogger("gas_laws")


class GasSimulation:
    """
    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
        - engine (StateEngine, optional): Defaults to a new engine at STP in the
          configured initial mode.
        - world (PhysicsWorld, optional): Defaults to a ParticleWorld.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Drives the physics world once per tick.
    - Invariants: Every tick performs exactly one boundary pass, one
      repopulation, one rescale and one world step with the fixed interval.
    """
    def __init__(self, config: dict, rng: np.random.Generator, engine: StateEngine = None, world=None):
        self.config = config
        self.rng = rng
        self.step_time = config['step_time']
        self.velocity_iterations = config.get('velocity_iterations', 3)
        self.position_iterations = config.get('position_iterations', 6)
        self.mole_scale = config.get('mole_scale', population.DEFAULT_MOLE_SCALE)
        self.log_interval = config.get('log_interval', 0)

        if engine is None:
            engine = StateEngine(mode=ConstraintMode.parse(config.get('initial_mode', 'CONST_VOLUME')))
        self.engine = engine

        half_size = population.container_half_size(engine.volume)
        self.world = world if world is not None else ParticleWorld(config, half_size)
        self._half_size = half_size

        self.thermostat = Thermostat(rng, config['wall_thickness'])
        self.clock = SimulationClock(self.step_time, self.tick)
        self.last_report = None

        self.engine.subscribe(self._on_state_changed)

        # Populate immediately so the first frame is not empty.
        self.thermostat.run(self.world, self.target_count, engine.temperature, self._half_size)

        logger.info(
            f"GasSimulation created: {self.world.particle_count} particles, "
            f"half-size {self._half_size:.3f}, mode {engine.mode.name}."
        )

    @property
    def half_size(self) -> float:
        return self._half_size

    @property
    def target_count(self) -> int:
        return population.target_particle_count(self.engine.moles, self.mole_scale)

    def _on_state_changed(self, state):
        half_size = population.container_half_size(state.volume)
        if half_size != self._half_size:
            self._half_size = half_size
            self.world.rebuild_walls(half_size)

    def update(self, delta: float) -> int:
        """Feeds one render frame's elapsed time to the clock. Returns ticks run."""
        return self.clock.advance(delta)

    def tick(self):
        """One fixed step: thermostat pass, then one world step."""
        state = self.engine.state
        report = self.thermostat.run(self.world, self.target_count, state.temperature, self._half_size)
        self.world.step(self.step_time, self.velocity_iterations, self.position_iterations)
        self.last_report = report

        tick = self.clock.tick_count
        if self.log_interval and tick % self.log_interval == 0:
            logger.info(
                f"Tick={tick}, "
                f"Particles={self.world.particle_count}/{self.target_count}, "
                f"MeanSqSpeed={report.mean_squared_speed:.2f} (target {2 * state.temperature:.2f}), "
                f"Removed={report.removed}, Spawned={report.spawned}, Scale={report.scale:.4f}, "
                f"P={state.pressure:.3f}, V={state.volume:.3f}, T={state.temperature:.2f}, n={state.moles:.3f}"
            )
        return report
