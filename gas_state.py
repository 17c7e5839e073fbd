# gas_state.py

"""
Macroscopic gas state and the constrained-variable solver that keeps it
consistent with the ideal gas law, PV = nRT.

The StateEngine is the single owner of (P, V, T, n). Every edit goes through
one of its setters, which validates the input, recomputes exactly one
dependent variable according to the active ConstraintMode, and publishes the
new immutable GasState to its listeners.
"""

import enum
import logging
import math
from dataclasses import dataclass, replace

import constants

logger = logging.getLogger("gas_laws")


class GasStateError(ValueError):
    """Base class for rejected edits. The engine state is never changed."""


class InvalidInputError(GasStateError):
    """A setter received a non-positive P/V/T, a negative n, or a non-finite value."""


class ArithmeticIndeterminateError(GasStateError, ZeroDivisionError):
    """A recompute would divide by zero, collapse V or T to zero, or overflow."""


class FrozenVariableError(GasStateError):
    """The variable held fixed by the active mode was edited directly."""


class ConstraintMode(enum.Enum):
    """
    Which macroscopic variable is held fixed.

    The value names the frozen variable. Moles are adjustable in every mode.
    """
    CONST_VOLUME = 'volume'
    CONST_TEMPERATURE = 'temperature'
    CONST_PRESSURE = 'pressure'

    @property
    def frozen(self) -> str:
        return self.value

    @property
    def active(self) -> tuple:
        """The two variables the user may adjust, besides moles."""
        return tuple(name for name in ('pressure', 'volume', 'temperature') if name != self.value)

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    def next(self) -> 'ConstraintMode':
        """Cycles V -> T -> P -> V, the order of the mode button."""
        order = list(ConstraintMode)
        return order[(order.index(self) + 1) % len(order)]

    @classmethod
    def parse(cls, value) -> 'ConstraintMode':
        """Accepts a ConstraintMode, a member name, a frozen-variable name, or 'V'/'T'/'P'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key.upper() in cls.__members__:
                return cls[key.upper()]
            for mode in cls:
                if key.lower() == mode.value or key.upper() == mode.value[0].upper():
                    return mode
        raise ValueError(f"Unknown constraint mode: {value!r}")


_MODE_LABELS = {
    ConstraintMode.CONST_VOLUME: "Const. V",
    ConstraintMode.CONST_TEMPERATURE: "Const. Temp.",
    ConstraintMode.CONST_PRESSURE: "Const. P",
}


@dataclass(frozen=True)
class GasState:
    """
    Snapshot of the four macroscopic quantities.

    Parameters
    ----------
    pressure : float
        Pressure [atm].
    volume : float
        Volume [L].
    temperature : float
        Temperature [K]. Also used as twice the kinetic energy per unit mass
        of the particle population.
    moles : float
        Amount of gas [mol].
    """

    pressure: float
    volume: float
    temperature: float
    moles: float

    def residual(self, gas_constant: float = constants.GAS_CONSTANT) -> float:
        """Returns PV - nRT; zero (up to rounding) for a consistent state."""
        return self.pressure * self.volume - self.moles * gas_constant * self.temperature

    def is_consistent(self, gas_constant: float = constants.GAS_CONSTANT, rel_tol: float = 1e-9) -> bool:
        pv = self.pressure * self.volume
        nrt = self.moles * gas_constant * self.temperature
        return math.isclose(pv, nrt, rel_tol=rel_tol, abs_tol=1e-12)


def stp_state(gas_constant: float = constants.GAS_CONSTANT) -> GasState:
    """Standard temperature and pressure for one mole, with V solved from PV = nRT."""
    volume = constants.STP_MOLES * gas_constant * constants.STP_TEMPERATURE / constants.STP_PRESSURE
    return GasState(
        pressure=constants.STP_PRESSURE,
        volume=volume,
        temperature=constants.STP_TEMPERATURE,
        moles=constants.STP_MOLES,
    )


class StateEngine:
    """
    Owns the GasState and enforces PV = nRT under the active ConstraintMode.

    Data Contract:
    - Inputs:
        - state (GasState, optional): Initial state. Defaults to STP.
        - mode (ConstraintMode or str): Initially active constraint.
        - gas_constant (float): R in the state's units.
    - Outputs: GasState snapshots via `state` and to subscribed listeners.
    - Side Effects: Listeners are called after each successful mutation.
    - Invariants: After every completed mutation |PV - nRT| is within
      floating-point tolerance. Rejected edits leave the state untouched.
    """
    def __init__(self, state: GasState = None, mode=ConstraintMode.CONST_VOLUME,
                 gas_constant: float = constants.GAS_CONSTANT):
        self.gas_constant = gas_constant
        self._state = state if state is not None else stp_state(gas_constant)
        self._mode = ConstraintMode.parse(mode)
        self._listeners = []

        if not self._state.is_consistent(gas_constant, rel_tol=1e-6):
            raise InvalidInputError(f"Initial state violates PV = nRT: {self._state}")

    # --- Read access ---

    @property
    def state(self) -> GasState:
        return self._state

    @property
    def mode(self) -> ConstraintMode:
        return self._mode

    @property
    def pressure(self) -> float:
        return self._state.pressure

    @property
    def volume(self) -> float:
        return self._state.volume

    @property
    def temperature(self) -> float:
        return self._state.temperature

    @property
    def moles(self) -> float:
        return self._state.moles

    def is_editable(self, variable: str) -> bool:
        """Moles plus the active pair of the current mode."""
        return variable == 'moles' or variable in self._mode.active

    # --- Observers ---

    def subscribe(self, listener):
        """Registers `listener(state)`, called after each successful mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener):
        self._listeners.remove(listener)

    # --- Mode ---

    def set_mode(self, mode):
        self._mode = ConstraintMode.parse(mode)
        logger.info(f"Constraint mode set to {self._mode.name}.")
        return self._mode

    def cycle_mode(self):
        return self.set_mode(self._mode.next())

    # --- Setters ---

    def set_pressure(self, p: float) -> GasState:
        p = self._check_positive('pressure', p)
        self._check_not_frozen('pressure')
        s = self._state
        R = self.gas_constant
        if self._mode is ConstraintMode.CONST_VOLUME:
            # T = PV/nR
            new = replace(s, pressure=p, temperature=self._divide(p * s.volume, s.moles * R, 'temperature'))
        else:
            # Const T: V = nRT/P
            new = replace(s, pressure=p, volume=self._divide(s.moles * R * s.temperature, p, 'volume'))
        return self._commit(new, 'pressure')

    def set_volume(self, v: float) -> GasState:
        v = self._check_positive('volume', v)
        self._check_not_frozen('volume')
        s = self._state
        R = self.gas_constant
        if self._mode is ConstraintMode.CONST_TEMPERATURE:
            # P = nRT/V
            new = replace(s, volume=v, pressure=self._divide(s.moles * R * s.temperature, v, 'pressure'))
        else:
            # Const P: T = PV/nR
            new = replace(s, volume=v, temperature=self._divide(s.pressure * v, s.moles * R, 'temperature'))
        return self._commit(new, 'volume')

    def set_temperature(self, t: float) -> GasState:
        t = self._check_positive('temperature', t)
        self._check_not_frozen('temperature')
        s = self._state
        R = self.gas_constant
        if self._mode is ConstraintMode.CONST_VOLUME:
            # P = nRT/V
            new = replace(s, temperature=t, pressure=self._divide(s.moles * R * t, s.volume, 'pressure'))
        else:
            # Const P: V = nRT/P
            new = replace(s, temperature=t, volume=self._divide(s.moles * R * t, s.pressure, 'volume'))
        return self._commit(new, 'temperature')

    def set_moles(self, m: float) -> GasState:
        """
        Changes the amount of gas. Volume is never changed here: under
        CONST_PRESSURE the temperature absorbs the change instead.
        """
        m = self._check_finite('moles', m)
        if m < 0:
            self._reject(InvalidInputError(f"moles must be non-negative, got {m}"))
        s = self._state
        R = self.gas_constant
        if self._mode is ConstraintMode.CONST_PRESSURE:
            # T = PV/nR
            new = replace(s, moles=m, temperature=self._divide(s.pressure * s.volume, m * R, 'temperature'))
        else:
            # P = nRT/V
            new = replace(s, moles=m, pressure=self._divide(m * R * s.temperature, s.volume, 'pressure'))
        return self._commit(new, 'moles')

    def set_variable(self, variable: str, value: float) -> GasState:
        """Dispatches to the setter named by `variable`."""
        setters = {
            'pressure': self.set_pressure,
            'volume': self.set_volume,
            'temperature': self.set_temperature,
            'moles': self.set_moles,
        }
        if variable not in setters:
            raise KeyError(f"Unknown gas variable: {variable!r}")
        return setters[variable](value)

    def reset_to_stp(self) -> GasState:
        """Restores STP regardless of the active mode."""
        return self._commit(stp_state(self.gas_constant), 'stp')

    # --- Internals ---

    def _commit(self, new: GasState, edited: str) -> GasState:
        self._check_representable(new)
        self._state = new
        logger.debug(
            f"Set {edited} ({self._mode.name}): "
            f"P={new.pressure:.4f}, V={new.volume:.4f}, T={new.temperature:.4f}, n={new.moles:.4f}"
        )
        for listener in list(self._listeners):
            listener(new)
        return new

    def _check_representable(self, new: GasState):
        # T feeds v^2 = 2T; PV and nRT must both be finite for the residual to be.
        if not math.isfinite(2.0 * new.temperature) or not math.isfinite(new.residual(self.gas_constant)):
            self._reject(ArithmeticIndeterminateError(f"state out of floating-point range: {new}"))

    def _check_not_frozen(self, variable: str):
        if self._mode.frozen == variable:
            self._reject(FrozenVariableError(f"{variable} is held fixed in {self._mode.name}"))

    def _check_finite(self, variable: str, value) -> float:
        try:
            value = float(value)
        except (TypeError, ValueError):
            self._reject(InvalidInputError(f"{variable} must be a number, got {value!r}"))
        if not math.isfinite(value):
            self._reject(InvalidInputError(f"{variable} must be finite, got {value}"))
        return value

    def _check_positive(self, variable: str, value) -> float:
        value = self._check_finite(variable, value)
        if value <= 0:
            self._reject(InvalidInputError(f"{variable} must be positive, got {value}"))
        return value

    def _divide(self, numerator: float, denominator: float, result: str) -> float:
        if denominator == 0:
            self._reject(ArithmeticIndeterminateError(f"cannot solve for {result}: division by zero"))
        value = numerator / denominator
        if not math.isfinite(value):
            self._reject(ArithmeticIndeterminateError(f"{result} would overflow to {value}"))
        # Pressure may reach zero together with moles; V and T may not.
        if result != 'pressure' and value <= 0:
            self._reject(ArithmeticIndeterminateError(f"{result} would collapse to {value}"))
        return value

    def _reject(self, error: GasStateError):
        logger.warning(f"Rejected edit: {error}")
        raise error
