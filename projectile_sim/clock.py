"""
Fixed-Timestep Clock
====================
Turns variable-rate animation ticks into a deterministic sequence of
fixed physics steps.

Each tick adds the wall time elapsed since the previous tick to an
accumulator and consumes it in whole steps of dt. Leftover time carries
over to the next tick. Two limits keep a slow frame from snowballing:
  - elapsed time per tick is clamped to MAX_FRAME_TIME
  - at most MAX_STEPS_PER_TICK steps run per tick; the rest waits

The clock never talks to a GUI toolkit directly. It is given a
request_tick(callback) function and calls it to ask for the next tick,
so tests can drive it with synthetic timestamps.
"""

import logging
from typing import Callable, List, Optional


MAX_FRAME_TIME = 0.25       # s
MAX_STEPS_PER_TICK = 25

TickCallback = Callable[[float], None]
Scheduler = Callable[[TickCallback], None]

logger = logging.getLogger(__name__)


class ManualScheduler:
    """
    Scheduler that only queues callbacks.

    fire(ts) runs everything queued so far with timestamp ts (seconds).
    """

    def __init__(self):
        self.pending: List[TickCallback] = []

    def __call__(self, callback: TickCallback) -> None:
        self.pending.append(callback)

    def fire(self, ts: float) -> int:
        callbacks, self.pending = self.pending, []
        for cb in callbacks:
            cb(ts)
        return len(callbacks)

    def run(self, start: float, frame_time: float, max_ticks: int = 100000) -> int:
        """Fire ticks every frame_time seconds until nothing is pending."""
        ticks = 0
        ts = start
        while self.pending and ticks < max_ticks:
            self.fire(ts)
            ts += frame_time
            ticks += 1
        return ticks


class SimulationClock:
    """
    Drives a Simulation from animation ticks.

    simulation must provide .state, .read_params() and .step(dt, params).
    on_frame is called after every tick that ran while playing.
    """

    def __init__(self, simulation, request_tick: Scheduler,
                 on_frame: Optional[Callable[[], None]] = None):
        self.simulation = simulation
        self.request_tick = request_tick
        self.on_frame = on_frame
        self.steps_last_tick = 0
        self._tick_pending = False

    def start(self) -> None:
        """Forget the reference timestamp and ask for the first tick."""
        self.simulation.state.last_tick_timestamp = None
        self._schedule()

    def _schedule(self) -> None:
        # a tick requested before a pause may still be queued
        if not self._tick_pending:
            self._tick_pending = True
            self.request_tick(self.tick)

    def tick(self, ts: float) -> int:
        """
        Advance by the wall time since the previous tick.

        ts is a timestamp in seconds. Returns the number of physics
        steps taken.
        """
        self._tick_pending = False
        sim = self.simulation
        state = sim.state
        if not state.is_playing:
            return 0

        steps = 0
        if state.last_tick_timestamp is None:
            state.last_tick_timestamp = ts
            state.accumulated_time = 0.0
        else:
            params = sim.read_params()
            dt = params.dt

            elapsed = ts - state.last_tick_timestamp
            state.last_tick_timestamp = ts
            state.accumulated_time += min(max(elapsed, 0.0), MAX_FRAME_TIME)

            while (state.is_playing and state.accumulated_time >= dt
                   and steps < MAX_STEPS_PER_TICK):
                sim.step(dt, params)
                state.accumulated_time -= dt
                steps += 1

            if state.is_playing and state.accumulated_time >= dt:
                logger.debug("Step cap reached, %.4f s deferred",
                             state.accumulated_time)

        self.steps_last_tick = steps
        if self.on_frame is not None:
            self.on_frame()
        if state.is_playing:
            self._schedule()
        return steps
