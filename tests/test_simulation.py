import math

import numpy as np
import pytest

from gas_state import ConstraintMode, GasStateError, StateEngine
from simulation import GasSimulation


def make_simulation(sim_config, rng, mode=ConstraintMode.CONST_VOLUME):
    return GasSimulation(sim_config, rng, engine=StateEngine(mode=mode))


def test_starts_populated_at_stp(sim_config, rng):
    simulation = make_simulation(sim_config, rng)
    assert simulation.world.particle_count == 20
    assert simulation.half_size == pytest.approx(5 * math.sqrt(simulation.engine.volume))
    assert simulation.world.mean_squared_speed() == pytest.approx(2 * 273.15)


def test_default_engine_uses_configured_mode(sim_config, rng):
    sim_config['initial_mode'] = 'CONST_PRESSURE'
    simulation = GasSimulation(sim_config, rng)
    assert simulation.engine.mode is ConstraintMode.CONST_PRESSURE


def test_heating_scenario_thermostat_follows_temperature(sim_config, rng):
    simulation = make_simulation(sim_config, rng)
    state = simulation.engine.set_temperature(546.3)
    assert state.pressure == pytest.approx(2.0)

    report = simulation.tick()

    assert report.mean_squared_speed == pytest.approx(2 * 546.3, rel=1e-9)
    assert simulation.world.particle_count == 20


def test_adding_moles_grows_population_next_tick(sim_config, rng):
    simulation = make_simulation(sim_config, rng, ConstraintMode.CONST_TEMPERATURE)
    simulation.engine.set_moles(2)

    assert simulation.target_count == 40
    assert simulation.world.particle_count == 20

    simulation.tick()
    assert simulation.world.particle_count == 40


def test_volume_change_rebuilds_walls_immediately(sim_config, rng):
    simulation = make_simulation(sim_config, rng, ConstraintMode.CONST_TEMPERATURE)
    simulation.engine.set_volume(4.0)
    assert simulation.half_size == pytest.approx(10.0)
    assert simulation.world.half_size == pytest.approx(10.0)


def test_overflowing_edit_leaves_world_running(sim_config, rng):
    simulation = make_simulation(sim_config, rng, ConstraintMode.CONST_TEMPERATURE)
    half_size = simulation.half_size
    with pytest.raises(GasStateError):
        simulation.engine.set_pressure(1e-320)
    assert simulation.world.half_size == half_size
    report = simulation.tick()
    assert simulation.world.particle_count == 20
    assert report.mean_squared_speed == pytest.approx(2 * 273.15, rel=1e-9)


def test_shrinking_container_respawns_escaped_particles(sim_config, rng):
    simulation = make_simulation(sim_config, rng, ConstraintMode.CONST_PRESSURE)
    simulation.engine.set_volume(1.0)

    report = simulation.tick()

    assert simulation.world.particle_count == 20
    assert report.removed > 0
    assert report.removed == report.spawned
    # Survivors and newcomers were inside the new walls before the step.
    assert np.all(np.abs(simulation.world.positions) <= simulation.half_size + 1.0)


def test_removing_all_moles_empties_world(sim_config, rng):
    simulation = make_simulation(sim_config, rng)
    simulation.engine.set_moles(0.0)
    simulation.tick()
    assert simulation.world.particle_count == 0


def test_update_runs_fixed_ticks(sim_config, rng):
    simulation = make_simulation(sim_config, rng)
    assert simulation.update(sim_config['step_time'] * 2.5) == 2
    assert simulation.clock.tick_count == 2
    assert simulation.update(sim_config['step_time'] * 0.4) == 0
    assert simulation.update(sim_config['step_time'] * 0.2) == 1


def test_world_step_uses_fixed_interval(sim_config, rng):
    class RecordingWorld:
        def __init__(self):
            self.positions = np.zeros((0, 2))
            self.velocities = np.zeros((0, 2))
            self.steps = []

        @property
        def particle_count(self):
            return len(self.positions)

        def create_particles(self, positions, velocities):
            self.positions = np.concatenate((self.positions, positions))
            self.velocities = np.concatenate((self.velocities, velocities))

        def destroy_particles(self, indices):
            keep = np.ones(self.particle_count, dtype=bool)
            keep[indices] = False
            self.positions = self.positions[keep]
            self.velocities = self.velocities[keep]

        def set_velocities(self, velocities):
            self.velocities = velocities

        def rebuild_walls(self, half_size):
            pass

        def step(self, interval, velocity_iterations, position_iterations):
            self.steps.append((interval, velocity_iterations, position_iterations))

    world = RecordingWorld()
    simulation = GasSimulation(sim_config, rng, world=world)
    simulation.update(sim_config['step_time'] * 3.7)

    assert world.steps == [(sim_config['step_time'], 3, 6)] * 3
    assert world.particle_count == 20
