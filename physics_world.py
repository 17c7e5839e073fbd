# physics_world.py

"""
Gravity-free 2D rigid-disc world holding the particle bodies.

The simulation core only talks to physics through the PhysicsWorld protocol:
create and destroy bodies, overwrite velocities, rebuild the walls and step.
ParticleWorld is the default implementation: elastic, frictionless discs of
equal mass inside four static walls, stored as NumPy arrays and resolved by
Numba-compiled kernels over a uniform spatial grid.
"""

import logging
from typing import Protocol

import numba
import numpy as np

logger = logging.getLogger("gas_laws")

# Caps the spatial grid so very large containers do not allocate huge arrays.
MAX_GRID_CELLS_PER_SIDE = 512


class PhysicsWorld(Protocol):
    """Capabilities the simulation requires from a 2D physics engine."""

    positions: np.ndarray
    velocities: np.ndarray

    @property
    def particle_count(self) -> int:
        ...

    def create_particles(self, positions: np.ndarray, velocities: np.ndarray) -> None:
        ...

    def destroy_particles(self, indices) -> None:
        ...

    def set_velocities(self, velocities: np.ndarray) -> None:
        ...

    def rebuild_walls(self, half_size: float) -> None:
        ...

    def step(self, interval: float, velocity_iterations: int, position_iterations: int) -> None:
        ...


# --- JIT-Compiled Collision Functions ---
# Kept outside the class and restricted to arrays and scalars, as Numba's
# nopython mode requires.

@numba.jit(nopython=True, fastmath=True)
def _handle_collisions_jit(grid_indices, grid_offsets, grid_width, grid_height, positions, velocities, radius, restitution, velocity_threshold, apply_impulse, pos_correct_factor):
    """
    Broad phase over the spatial grid. Each pair in the same or an adjacent
    cell is handed to the narrow phase once. Returns the number of contacts.
    """
    contacts = 0
    num_cells = grid_width * grid_height

    for cell_idx in range(num_cells):
        cell_x = cell_idx % grid_width
        cell_y = cell_idx // grid_width

        start_idx = grid_offsets[cell_idx]
        end_idx = grid_offsets[cell_idx + 1]

        # 1. Pairs within the cell
        for i in range(start_idx, end_idx):
            p1_index = grid_indices[i]
            for j in range(i + 1, end_idx):
                p2_index = grid_indices[j]
                contacts += _resolve_pair_jit(
                    p1_index, p2_index, positions, velocities, radius,
                    restitution, velocity_threshold, apply_impulse, pos_correct_factor
                )

        # 2. Pairs with neighboring cells
        for dy in range(-1, 2):
            for dx in range(-1, 2):
                if dx == 0 and dy == 0:
                    continue

                neighbor_x, neighbor_y = cell_x + dx, cell_y + dy

                if 0 <= neighbor_x < grid_width and 0 <= neighbor_y < grid_height:
                    neighbor_idx = neighbor_y * grid_width + neighbor_x
                    neighbor_start_idx = grid_offsets[neighbor_idx]
                    neighbor_end_idx = grid_offsets[neighbor_idx + 1]

                    # Only pairs with p1_index < p2_index, so each is seen once
                    for p1_idx_ptr in range(start_idx, end_idx):
                        p1_index = grid_indices[p1_idx_ptr]
                        for p2_idx_ptr in range(neighbor_start_idx, neighbor_end_idx):
                            p2_index = grid_indices[p2_idx_ptr]
                            if p1_index < p2_index:
                                contacts += _resolve_pair_jit(
                                    p1_index, p2_index, positions, velocities, radius,
                                    restitution, velocity_threshold, apply_impulse, pos_correct_factor
                                )
    return contacts


@numba.jit(nopython=True)
def _resolve_pair_jit(i, j, positions, velocities, radius, restitution, velocity_threshold, apply_impulse, pos_correct_factor):
    """
    Narrow phase for two equal-mass discs. Applies the normal impulse when
    `apply_impulse` is set and pushes the pair apart by `pos_correct_factor`
    of their overlap. Returns 1 on contact, 0 otherwise.
    """
    dx = positions[j, 0] - positions[i, 0]
    dy = positions[j, 1] - positions[i, 1]
    distance_sq = dx * dx + dy * dy
    min_distance = 2.0 * radius

    if distance_sq >= min_distance * min_distance or distance_sq == 0.0:
        return 0

    distance = np.sqrt(distance_sq)
    nx = dx / distance
    ny = dy / distance

    if apply_impulse:
        v_rel_n = (velocities[j, 0] - velocities[i, 0]) * nx + (velocities[j, 1] - velocities[i, 1]) * ny
        if v_rel_n < 0.0:
            # Slow approaches do not bounce
            e = restitution if -v_rel_n >= velocity_threshold else 0.0
            # Equal masses: each body takes half of the exchanged momentum
            impulse = -(1.0 + e) * v_rel_n * 0.5
            velocities[i, 0] -= impulse * nx
            velocities[i, 1] -= impulse * ny
            velocities[j, 0] += impulse * nx
            velocities[j, 1] += impulse * ny

    if pos_correct_factor > 0.0:
        correction = 0.5 * (min_distance - distance) * pos_correct_factor
        positions[i, 0] -= correction * nx
        positions[i, 1] -= correction * ny
        positions[j, 0] += correction * nx
        positions[j, 1] += correction * ny

    return 1


class ParticleWorld:
    """
    Default PhysicsWorld backed by a structure of NumPy arrays.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - half_size (float): Initial half-size of the square container.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Owns every particle body; index 0 is always the oldest.
    - Invariants: positions and velocities always have shape (particle_count, 2).
      Bodies never sleep: every particle is integrated on every step.
    """
    def __init__(self, config: dict, half_size: float):
        self.radius = config['particle_radius']
        self.density = config.get('particle_density', 1.0)
        self.wall_thickness = config['wall_thickness']
        self.restitution = config.get('restitution', 1.0)
        self.velocity_threshold = config.get('velocity_threshold', 1.0)
        self.position_correction_factor = config.get('position_correction_factor', 0.2)
        self.grid_cell_size_multiplier = config.get('grid_cell_size_multiplier', 1.0)
        if self.grid_cell_size_multiplier < 1.0:
            # Smaller cells would miss contacts between discs in non-adjacent cells.
            raise ValueError(
                f"grid_cell_size_multiplier must be at least 1.0, got {self.grid_cell_size_multiplier}"
            )

        # All bodies share one shape and density.
        self.particle_mass = self.density * np.pi * self.radius ** 2

        self.positions = np.zeros((0, 2), dtype=float)
        self.velocities = np.zeros((0, 2), dtype=float)
        self.last_contact_count = 0

        self.half_size = 0.0
        self.rebuild_walls(half_size)

        logger.info(
            f"ParticleWorld created: radius={self.radius}, mass={self.particle_mass:.4f}, "
            f"restitution={self.restitution}, velocity_threshold={self.velocity_threshold}."
        )

    @property
    def particle_count(self) -> int:
        return self.positions.shape[0]

    # --- Bodies ---

    def create_particles(self, positions: np.ndarray, velocities: np.ndarray) -> None:
        positions = np.asarray(positions, dtype=float).reshape(-1, 2)
        velocities = np.asarray(velocities, dtype=float).reshape(-1, 2)
        if positions.shape != velocities.shape:
            raise ValueError(
                f"positions {positions.shape} and velocities {velocities.shape} must have the same shape"
            )
        self.positions = np.concatenate((self.positions, positions))
        self.velocities = np.concatenate((self.velocities, velocities))

    def destroy_particles(self, indices) -> None:
        """Removes the bodies at `indices` (integer indices or a boolean mask)."""
        keep = np.ones(self.particle_count, dtype=bool)
        keep[indices] = False
        self.positions = self.positions[keep]
        self.velocities = self.velocities[keep]

    def set_velocities(self, velocities: np.ndarray) -> None:
        velocities = np.asarray(velocities, dtype=float)
        if velocities.shape != self.velocities.shape:
            raise ValueError(
                f"expected velocities of shape {self.velocities.shape}, got {velocities.shape}"
            )
        self.velocities = velocities.copy()

    # --- Walls ---

    def rebuild_walls(self, half_size: float) -> None:
        """
        Replaces the four static walls with a square of the given half-size.
        Particles are left where they are, even if now outside.
        """
        if half_size <= 0:
            raise ValueError(f"Container half-size must be positive, got {half_size}")
        self.half_size = float(half_size)
        self._configure_grid()
        logger.debug(f"Walls rebuilt with half-size {self.half_size:.3f}.")

    def _configure_grid(self):
        # Covers the walls as well, so particles stuck just outside still land in edge cells.
        self.grid_extent = self.half_size + self.wall_thickness
        cell_size = 2.0 * self.radius * self.grid_cell_size_multiplier
        cells_per_side = int(np.ceil(2.0 * self.grid_extent / cell_size))
        if cells_per_side > MAX_GRID_CELLS_PER_SIDE:
            cells_per_side = MAX_GRID_CELLS_PER_SIDE
            cell_size = 2.0 * self.grid_extent / cells_per_side
        self.cell_size = cell_size
        self.grid_width = max(1, cells_per_side)
        self.grid_height = self.grid_width
        self.grid_offsets = np.zeros(self.grid_width * self.grid_height + 1, dtype=np.int32)

    # --- Simulation ---

    def step(self, interval: float, velocity_iterations: int, position_iterations: int) -> None:
        """
        Advances the world by `interval`.

        Order: integrate positions, rebuild the spatial grid, resolve contact
        impulses `velocity_iterations` times, correct overlaps
        `position_iterations` times, then reflect off the walls.
        """
        if self.particle_count == 0:
            self.last_contact_count = 0
            return

        # Only bodies that start inside the walls can collide with them.
        inside = np.all(np.abs(self.positions) <= self.half_size, axis=1)

        self.positions += self.velocities * interval

        self._build_spatial_grid()

        contacts = 0
        for _ in range(velocity_iterations):
            contacts = _handle_collisions_jit(
                self.grid_indices,
                self.grid_offsets,
                self.grid_width,
                self.grid_height,
                self.positions,
                self.velocities,
                self.radius,
                self.restitution,
                self.velocity_threshold,
                True,
                0.0
            )
        for _ in range(position_iterations):
            _handle_collisions_jit(
                self.grid_indices,
                self.grid_offsets,
                self.grid_width,
                self.grid_height,
                self.positions,
                self.velocities,
                self.radius,
                self.restitution,
                self.velocity_threshold,
                False,
                self.position_correction_factor
            )
        self.last_contact_count = contacts

        self._check_wall_collisions(inside)

    def _check_wall_collisions(self, inside: np.ndarray):
        """
        Vectorized wall contact for bodies that were inside at the start of
        the step.
        """
        limit = max(self.half_size - self.radius, 0.0)
        for axis in (0, 1):
            low_mask = inside & (self.positions[:, axis] < -limit)
            high_mask = inside & (self.positions[:, axis] > limit)
            self.positions[low_mask, axis] = -limit
            self.positions[high_mask, axis] = limit
            self.velocities[low_mask, axis] = self._bounce(self.velocities[low_mask, axis])
            self.velocities[high_mask, axis] = -self._bounce(self.velocities[high_mask, axis])

    def _bounce(self, normal_velocity: np.ndarray) -> np.ndarray:
        """Outgoing normal speed (non-negative) for bodies hitting a wall."""
        speed = np.abs(normal_velocity)
        e = np.where(speed >= self.velocity_threshold, self.restitution, 0.0)
        return speed * e

    def _build_spatial_grid(self):
        """
        Sorts particle indices by grid cell into the flattened layout the
        collision kernel expects: grid_indices holds indices grouped by cell,
        and cell i spans grid_indices[grid_offsets[i]:grid_offsets[i + 1]].
        """
        num_cells = self.grid_width * self.grid_height
        cell_xs = ((self.positions[:, 0] + self.grid_extent) / self.cell_size).astype(np.int32)
        cell_ys = ((self.positions[:, 1] + self.grid_extent) / self.cell_size).astype(np.int32)
        np.clip(cell_xs, 0, self.grid_width - 1, out=cell_xs)
        np.clip(cell_ys, 0, self.grid_height - 1, out=cell_ys)
        particle_cell_indices = cell_ys * self.grid_width + cell_xs

        counts = np.bincount(particle_cell_indices, minlength=num_cells)
        self.grid_offsets[0] = 0
        self.grid_offsets[1:num_cells + 1] = np.cumsum(counts)
        self.grid_indices = np.argsort(particle_cell_indices, kind='stable').astype(np.int32)

    # --- Diagnostics ---

    def mean_squared_speed(self) -> float:
        if self.particle_count == 0:
            return 0.0
        return float(np.mean(np.sum(self.velocities ** 2, axis=1)))

    def get_total_kinetic_energy(self) -> float:
        """KE = sum(0.5 * m * v^2)"""
        return float(0.5 * self.particle_mass * np.sum(self.velocities ** 2))
