# simulation_clock.py

import logging

logger = logging.getLogger("gas_laws")


class SimulationClock:
    """
    Fixed-timestep accumulator decoupling simulation ticks from render frames.

    Each call to `advance` adds the frame's elapsed time. For every whole
    `interval` accumulated, `on_tick` runs once and the interval is
    subtracted, so the fractional remainder carries into the next frame.
    A frame may therefore run zero, one or several ticks.
    """
    def __init__(self, interval: float, on_tick):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.interval = interval
        self.on_tick = on_tick
        self.accumulator = 0.0
        self.tick_count = 0

    def advance(self, delta: float) -> int:
        """Adds `delta` seconds and runs any due ticks. Returns how many ran."""
        if delta < 0:
            raise ValueError(f"Frame delta must be non-negative, got {delta}")
        self.accumulator += delta
        ticks = 0
        while self.accumulator >= self.interval:
            self.tick_count += 1
            self.on_tick()
            self.accumulator -= self.interval
            ticks += 1
        return ticks
