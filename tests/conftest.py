import numpy as np
import pytest

from gas_state import ConstraintMode, StateEngine


@pytest.fixture
def sim_config():
    return {
        "initial_mode": "CONST_VOLUME",
        "step_time": 1.0 / 60.0,
        "velocity_iterations": 3,
        "position_iterations": 6,
        "mole_scale": 20,
        "particle_radius": 3.0 / 16.0,
        "particle_density": 1.0,
        "wall_thickness": 3.0,
        "restitution": 1.0,
        "velocity_threshold": 1.0,
        "grid_cell_size_multiplier": 1.0,
        "log_interval": 0,
    }


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def stp_engine():
    """Engine at STP in constant-volume mode."""
    return StateEngine(mode=ConstraintMode.CONST_VOLUME)
