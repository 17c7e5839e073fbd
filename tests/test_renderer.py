import numpy as np

import constants
from renderer import interpolate_color, world_to_screen


def test_origin_maps_to_screen_centre():
    assert np.allclose(world_to_screen(np.array([0.0, 0.0]), (800, 600)), [400.0, 300.0])


def test_world_y_points_up():
    points = np.array([[1.0, 2.0], [-1.0, -2.0]])
    screen = world_to_screen(points, (800, 600), pixels_per_unit=10.0)
    assert np.allclose(screen, [[410.0, 280.0], [390.0, 320.0]])
    # Input is not modified
    assert np.allclose(points, [[1.0, 2.0], [-1.0, -2.0]])


def test_color_gradient_endpoints():
    assert interpolate_color(0.0) == constants.COLOR_GRADIENT_KEYFRAMES[0][1]
    assert interpolate_color(1.0) == constants.COLOR_GRADIENT_KEYFRAMES[-1][1]
    assert interpolate_color(2.0) == constants.COLOR_GRADIENT_KEYFRAMES[-1][1]
    assert interpolate_color(-1.0) == constants.COLOR_GRADIENT_KEYFRAMES[0][1]


def test_color_gradient_midpoint():
    assert interpolate_color(0.5) == (128, 128, 128)
