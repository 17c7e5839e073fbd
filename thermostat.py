# thermostat.py

"""
Per-tick velocity thermostat.

Collisions between ticks let the ensemble's kinetic energy wander. Once per
fixed tick the Thermostat pulls it back so that the mean squared speed is
exactly 2T, and keeps the population at its target size inside the walls.
The three stages are separate batch operations so their order can be tested
on its own.
"""

import logging
from dataclasses import dataclass

import numpy as np

import population

logger = logging.getLogger("gas_laws")


@dataclass
class ThermostatReport:
    """Outcome of one thermostat pass."""

    removed: int = 0  # Particles found outside the container
    spawned: int = 0
    destroyed: int = 0  # Excess particles culled to reach the target
    scale: float = 1.0  # Uniform velocity scale applied by the rescale stage
    mean_squared_speed: float = 0.0


class Thermostat:
    """
    Data Contract:
    - Inputs:
        - rng (np.random.Generator): Source for spawn positions and directions.
        - wall_thickness (float): Keeps spawned particles clear of the walls.
    - Outputs: ThermostatReport for each pass.
    - Side Effects: Creates, destroys and re-velocitizes bodies in the world.
    - Invariants: After `run`, the world holds exactly the target count, none
      outside the container, with mean squared speed 2T (if non-empty).
    """
    def __init__(self, rng: np.random.Generator, wall_thickness: float):
        self.rng = rng
        self.wall_thickness = wall_thickness

    def run(self, world, target_count: int, temperature: float, half_size: float) -> ThermostatReport:
        """One full pass: boundary enforcement, repopulation, rescaling, in that order."""
        report = ThermostatReport()
        report.removed = self.enforce_boundary(world, half_size)
        report.spawned, report.destroyed = self.repopulate(world, target_count, temperature, half_size)
        report.scale = self.rescale(world, temperature)
        report.mean_squared_speed = _mean_squared_speed(world.velocities)
        return report

    def enforce_boundary(self, world, half_size: float) -> int:
        """Destroys every particle outside the container. Returns how many went missing."""
        if world.particle_count == 0:
            return 0
        outside = np.any(np.abs(world.positions) > half_size, axis=1)
        missing = int(np.count_nonzero(outside))
        if missing:
            world.destroy_particles(outside)
            logger.debug(f"{missing} particle(s) escaped the container and were removed.")
        return missing

    def repopulate(self, world, target_count: int, temperature: float, half_size: float):
        """
        Brings the population to `target_count`. Excess bodies are destroyed
        oldest-first; missing ones spawn at the thermal speed.
        Returns (spawned, destroyed).
        """
        target_count = max(0, int(target_count))
        current = world.particle_count

        if current > target_count:
            excess = current - target_count
            world.destroy_particles(np.arange(excess))
            return 0, excess

        needed = target_count - current
        if needed:
            positions = population.sample_positions(self.rng, needed, half_size, self.wall_thickness)
            velocities = population.sample_velocities(self.rng, needed, temperature)
            world.create_particles(positions, velocities)
        return needed, 0

    def rescale(self, world, temperature: float) -> float:
        """
        Scales every velocity by the same factor so that mean |v|^2 = 2T.
        Returns the factor used.
        """
        if world.particle_count == 0:
            return 1.0

        target = 2.0 * temperature
        mean_sq = _mean_squared_speed(world.velocities)
        if mean_sq == 0.0:
            # Nothing to scale: restart every particle in a random direction.
            world.set_velocities(population.sample_velocities(self.rng, world.particle_count, temperature))
            logger.debug("All particles were at rest; velocities re-drawn at the thermal speed.")
            return 1.0

        scale = float(np.sqrt(target / mean_sq))
        world.set_velocities(world.velocities * scale)
        return scale


def _mean_squared_speed(velocities: np.ndarray) -> float:
    if len(velocities) == 0:
        return 0.0
    return float(np.mean(np.sum(velocities ** 2, axis=1)))
