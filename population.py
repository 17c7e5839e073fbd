# population.py

"""
Mapping from macroscopic state to the particle population.

Pure functions only: nothing here owns state. The mole scale is a
visualization choice, not Avogadro's number.
"""

import math

import numpy as np

import constants

DEFAULT_MOLE_SCALE = 20  # Particles drawn per mole


def target_particle_count(moles: float, mole_scale: float = DEFAULT_MOLE_SCALE) -> int:
    """floor(n * scale), with anything non-positive meaning "no particles"."""
    return max(0, int(math.floor(moles * mole_scale)))


def container_half_size(volume: float) -> float:
    """Half the side of the square container: 5 * sqrt(V)."""
    return constants.CONTAINER_SCALE * math.sqrt(volume)


def thermal_speed(temperature: float) -> float:
    """Speed at which v^2 = 2T, treating T as twice the kinetic energy per unit mass."""
    return math.sqrt(2.0 * temperature)


def spawn_margin(half_size: float, wall_thickness: float) -> float:
    """Half-extent of the region new particles are placed in."""
    return max(0.0, half_size - wall_thickness / 2)


def sample_positions(rng: np.random.Generator, count: int, half_size: float, wall_thickness: float) -> np.ndarray:
    """Uniform positions inside the container margin, shape (count, 2)."""
    margin = spawn_margin(half_size, wall_thickness)
    return rng.uniform(-margin, margin, size=(count, 2))


def sample_directions(rng: np.random.Generator, count: int) -> np.ndarray:
    """Unit vectors with uniformly distributed angles, shape (count, 2)."""
    angles = rng.uniform(0.0, 2.0 * np.pi, size=count)
    return np.column_stack((np.cos(angles), np.sin(angles)))


def sample_velocities(rng: np.random.Generator, count: int, temperature: float) -> np.ndarray:
    """Random directions, every magnitude equal to the thermal speed."""
    return sample_directions(rng, count) * thermal_speed(temperature)
