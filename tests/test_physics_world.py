import numpy as np
import pytest

import physics_world
from physics_world import ParticleWorld

STEP = 1.0 / 60.0
HALF_SIZE = 10.0


@pytest.fixture
def world(sim_config):
    return ParticleWorld(sim_config, HALF_SIZE)


def test_head_on_collision_swaps_velocities(world):
    world.create_particles(np.array([[-0.15, 0.0], [0.15, 0.0]]), np.array([[5.0, 0.0], [-5.0, 0.0]]))

    world.step(STEP, 3, 6)

    assert np.allclose(world.velocities, [[-5.0, 0.0], [5.0, 0.0]])
    assert world.last_contact_count == 1


def test_overlap_is_reduced_by_position_iterations(world):
    world.create_particles(np.array([[-0.1, 0.0], [0.1, 0.0]]), np.zeros((2, 2)))

    world.step(STEP, 3, 6)

    gap = world.positions[1, 0] - world.positions[0, 0]
    assert gap > 0.2
    assert gap <= 2 * world.radius + 1e-12


def test_separated_particles_do_not_interact(world):
    world.create_particles(np.array([[-3.0, 0.0], [3.0, 0.0]]), np.array([[1.5, 0.0], [-1.5, 0.0]]))
    world.step(STEP, 3, 6)
    assert np.allclose(world.velocities, [[1.5, 0.0], [-1.5, 0.0]])
    assert np.allclose(world.positions, [[-3.0 + 1.5 * STEP, 0.0], [3.0 - 1.5 * STEP, 0.0]])


def test_wall_reflects_particle(world):
    world.create_particles(np.array([[HALF_SIZE - 0.2, 0.0]]), np.array([[30.0, 2.0]]))

    world.step(STEP, 3, 6)

    assert world.velocities[0, 0] == pytest.approx(-30.0)
    assert world.velocities[0, 1] == pytest.approx(2.0)
    assert world.positions[0, 0] == pytest.approx(HALF_SIZE - world.radius)


def test_slow_wall_hit_does_not_bounce(world):
    world.create_particles(np.array([[-(HALF_SIZE - world.radius) + 0.001, 0.0]]), np.array([[-0.5, 0.0]]))
    world.step(STEP, 3, 6)
    assert world.velocities[0, 0] == 0.0


def test_particle_outside_walls_is_left_alone(world):
    world.create_particles(np.array([[HALF_SIZE + 1.0, 0.0]]), np.array([[10.0, 0.0]]))
    world.step(STEP, 3, 6)
    assert world.velocities[0, 0] == 10.0
    assert world.positions[0, 0] == pytest.approx(HALF_SIZE + 1.0 + 10.0 * STEP)


def test_elastic_gas_conserves_kinetic_energy(sim_config, rng):
    sim_config['velocity_threshold'] = 0.0
    world = ParticleWorld(sim_config, 3.0)
    world.create_particles(rng.uniform(-2.5, 2.5, (60, 2)), rng.normal(0.0, 20.0, (60, 2)))
    energy = world.get_total_kinetic_energy()

    for _ in range(120):
        world.step(STEP, 3, 6)

    assert world.get_total_kinetic_energy() == pytest.approx(energy, rel=1e-9)
    assert np.all(np.abs(world.positions) <= 3.0)


def test_destroy_by_index_and_mask(world):
    world.create_particles(np.arange(10, dtype=float).reshape(5, 2), np.zeros((5, 2)))
    world.destroy_particles([0, 2])
    assert world.particle_count == 3
    assert np.allclose(world.positions[:, 0], [2.0, 6.0, 8.0])

    world.destroy_particles(world.positions[:, 0] > 7.0)
    assert np.allclose(world.positions[:, 0], [2.0, 6.0])


def test_create_rejects_mismatched_shapes(world):
    with pytest.raises(ValueError):
        world.create_particles(np.zeros((3, 2)), np.zeros((2, 2)))


def test_set_velocities_requires_full_population(world):
    world.create_particles(np.zeros((3, 2)), np.zeros((3, 2)))
    with pytest.raises(ValueError):
        world.set_velocities(np.zeros((2, 2)))
    world.set_velocities(np.ones((3, 2)))
    assert np.all(world.velocities == 1.0)


def test_rebuild_walls_keeps_particles(world):
    world.create_particles(np.array([[8.0, 8.0]]), np.array([[1.0, 1.0]]))
    world.rebuild_walls(5.0)
    assert world.half_size == 5.0
    assert np.allclose(world.positions, [[8.0, 8.0]])
    with pytest.raises(ValueError):
        world.rebuild_walls(0.0)


def test_grid_is_capped_for_huge_containers(world):
    world.rebuild_walls(5000.0)
    assert world.grid_width == physics_world.MAX_GRID_CELLS_PER_SIDE
    assert world.cell_size * world.grid_width == pytest.approx(2 * (5000.0 + world.wall_thickness))


def test_step_on_empty_world(world):
    world.step(STEP, 3, 6)
    assert world.particle_count == 0
    assert world.mean_squared_speed() == 0.0


def test_grid_cells_smaller_than_a_disc_are_rejected(sim_config):
    sim_config['grid_cell_size_multiplier'] = 0.5
    with pytest.raises(ValueError):
        ParticleWorld(sim_config, HALF_SIZE)
