# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework
and the gas-law model. These are not expected to change between simulation runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 1280  # Pixels
HEIGHT = 800  # Pixels

# Framerate
FPS = 60  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
YELLOW = (255, 255, 0)
BACKGROUND = (25, 25, 25)

# Window Title
TITLE = "Gas Laws Demo"

# Gas constant in the units the demo displays.
GAS_CONSTANT = 0.082057  # L atm mol-1 K-1

# Standard temperature and pressure. Volume is solved from the other three.
STP_PRESSURE = 1.0  # atm
STP_TEMPERATURE = 273.15  # K
STP_MOLES = 1.0  # mol

# Container geometry: half-size = CONTAINER_SCALE * sqrt(V)
CONTAINER_SCALE = 5.0

# Slider ranges (min, max) per variable.
SLIDER_RANGES = {
    'moles': (0.0, 10.0),  # mol
    'volume': (1.0, 50.0),  # L
    'temperature': (0.1, 2000.0),  # K
    'pressure': (0.0, 100.0),  # atm
}

# Camera
PIXELS_PER_UNIT = 10.0  # Equivalent to a zoom of 0.1
DRAWN_WALL_THICKNESS = 0.5  # World units
PARTICLE_DRAW_PADDING = 0.1  # World units added to the radius when drawing

# Color Mapping for Visualization
# Particle kinetic energy (v^2) is normalized against the top of the temperature
# slider, so the color scale stays fixed while the user drags T around.
COLOR_MAX_ENERGY = SLIDER_RANGES['temperature'][1]

# Defines the color spectrum as a series of keyframes.
# Each keyframe is a tuple: (normalized_position, (R, G, B) color).
COLOR_GRADIENT_KEYFRAMES = [
    (0.0,   (0, 128, 255)),      # Blue
    (0.5,   (128, 128, 128)),    # Grey
    (1.0,   (255, 128, 0))       # Orange
]

# HUD
FONT_SIZE = 20
PENDING_COLOR = YELLOW  # Text field edited but not yet committed
