# controls.py

"""
Presentation-side adapter between input widgets and the StateEngine.

Sliders and text fields never hold state of their own: they read the
engine's current GasState for display and push edits through its setters.
A rejected edit leaves the engine untouched and the field marked pending.
"""

import logging

import constants
from gas_state import GasStateError, StateEngine

logger = logging.getLogger("gas_laws")

# Display order of the equation: P V = n R T
VARIABLES = ('pressure', 'volume', 'moles', 'temperature')
SYMBOLS = {'pressure': 'P', 'volume': 'V', 'moles': 'n', 'temperature': 'T'}
UNITS = {'pressure': 'atm', 'volume': 'L', 'moles': 'mol', 'temperature': 'K'}

FIELD_CHARACTERS = "1234567890.,"

# Keyboard nudges move a slider by this fraction of its range.
NUDGE_FRACTION = 0.01


def format_value(value: float) -> str:
    """Truncates (not rounds) to two decimals for display."""
    return str(int(value * 100) / 100.0)


def parse_field_text(text: str) -> float:
    """Reads a text field; a comma is accepted as the decimal point."""
    cleaned = text.strip().replace(',', '.')
    if not cleaned:
        raise ValueError("empty field")
    return float(cleaned)


def clamp_to_slider(variable: str, value: float) -> float:
    low, high = constants.SLIDER_RANGES[variable]
    return min(max(value, low), high)


class ControlPanel:
    """
    Holds the transient widget state (focus, typed text, pending marks) and
    routes committed edits to the engine.
    """
    def __init__(self, engine: StateEngine):
        self.engine = engine
        self.selected = 'temperature'
        self.buffers = {name: '' for name in VARIABLES}
        self.pending = set()
        self.last_error = None

    # --- Display ---

    @property
    def mode_label(self) -> str:
        return self.engine.mode.label

    def display_text(self, variable: str) -> str:
        if variable in self.pending:
            return self.buffers[variable]
        return format_value(getattr(self.engine.state, variable))

    def is_editable(self, variable: str) -> bool:
        return self.engine.is_editable(variable)

    def slider_fraction(self, variable: str) -> float:
        """Knob position of the variable's slider in [0, 1]."""
        low, high = constants.SLIDER_RANGES[variable]
        value = clamp_to_slider(variable, getattr(self.engine.state, variable))
        return (value - low) / (high - low)

    # --- Edits ---

    def submit(self, variable: str, value: float):
        """
        Pushes an edit to the engine. Returns the new GasState, or None if the
        edit was refused (disabled widget or rejected by the engine).
        """
        if not self.is_editable(variable):
            logger.debug(f"Ignored edit of disabled control {variable}.")
            return None
        try:
            state = self.engine.set_variable(variable, value)
        except GasStateError as error:
            self.last_error = error
            return None
        self.last_error = None
        self.pending.discard(variable)
        return state

    def slide(self, variable: str, value: float):
        """Slider edits are confined to the slider's range."""
        return self.submit(variable, clamp_to_slider(variable, value))

    def nudge(self, variable: str, direction: int):
        low, high = constants.SLIDER_RANGES[variable]
        step = (high - low) * NUDGE_FRACTION
        current = getattr(self.engine.state, variable)
        return self.slide(variable, current + direction * step)

    # --- Text fields ---

    def select(self, variable: str):
        if variable not in VARIABLES:
            raise KeyError(f"Unknown gas variable: {variable!r}")
        self.selected = variable

    def type_character(self, variable: str, character: str) -> bool:
        """Appends an accepted character and marks the field pending."""
        if character not in FIELD_CHARACTERS or not self.is_editable(variable):
            return False
        if variable not in self.pending:
            self.buffers[variable] = ''
            self.pending.add(variable)
        self.buffers[variable] += character
        return True

    def backspace(self, variable: str):
        if variable in self.pending:
            self.buffers[variable] = self.buffers[variable][:-1]

    def commit_text(self, variable: str):
        """Enter pressed: parse the field and submit it. Unparseable text stays pending."""
        if variable not in self.pending:
            return None
        try:
            value = parse_field_text(self.buffers[variable])
        except ValueError as error:
            self.last_error = error
            logger.debug(f"Could not parse {variable} field: {self.buffers[variable]!r}")
            return None
        return self.submit(variable, value)

    # --- Buttons ---

    def cycle_mode(self):
        self.pending.clear()
        return self.engine.cycle_mode()

    def reset_to_stp(self):
        self.pending.clear()
        return self.engine.reset_to_stp()
