"""
Simulation Context
==================
Owns the single live SimState, the Target and the hit latch, and exposes
the operations the UI needs: reset, play, pause, step, move the target.

One Simulation is live at a time and only its clock (or a test) mutates
its state.
"""

import logging
from typing import Callable, Optional

from .clock import ManualScheduler, Scheduler, SimulationClock
from .collision import Target, is_hit
from .integrator import SimState, step_semi_implicit_euler
from .params import ParameterError, SimParams

logger = logging.getLogger(__name__)


class Simulation:
    """
    Explicitly owned simulation context.

    Parameters
    ----------
    params_source : callable returning SimParams, read on every tick
    target : Target (a fresh default one if omitted)
    request_tick : scheduler for the clock (ManualScheduler if omitted)
    on_frame : called after every tick, typically a redraw
    """

    def __init__(self, params_source: Optional[Callable[[], SimParams]] = None,
                 target: Optional[Target] = None,
                 request_tick: Optional[Scheduler] = None,
                 on_frame: Optional[Callable[[], None]] = None):
        self.params_source = params_source or SimParams
        self.target = target if target is not None else Target()
        self.hit = False
        self.finished = False
        self.state = SimState.from_params(self.read_params())
        self.clock = SimulationClock(self, request_tick or ManualScheduler(),
                                     on_frame)

    # ── Parameters ────────────────────────────────────────────────────────

    def read_params(self) -> SimParams:
        """Current parameters, validated."""
        return self.params_source().validate()

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Back to the launch point, paused, trail and latch cleared."""
        params = self.read_params()
        state = self.state
        state.t = 0.0
        state.pos = params.initial_position()
        state.vel = params.initial_velocity()
        state.trail.clear()
        state.trail.record(0.0, state.pos)
        state.is_playing = False
        state.last_tick_timestamp = None
        state.accumulated_time = 0.0
        self.hit = False
        self.finished = False
        logger.debug("Reset: v0=%.2f ang=%.1f y0=%.2f g=%.2f dt=%.4f",
                     params.v0, params.ang_deg, params.y0, params.g, params.dt)

    def play(self) -> None:
        """
        Start or resume playback from the current state.

        Only reset() restarts a run or clears the hit latch. After a
        target hit the flight continues toward the ground.
        """
        if self.state.is_playing:
            return
        self.state.is_playing = True
        logger.debug("Play at t=%.3f", self.state.t)
        self.clock.start()

    def pause(self) -> None:
        if self.state.is_playing:
            self.state.is_playing = False
            logger.debug("Pause at t=%.3f", self.state.t)

    def toggle(self) -> None:
        if self.state.is_playing:
            self.pause()
        else:
            self.play()

    def on_params_changed(self) -> None:
        """Parameters edited: restart while paused, keep flying otherwise."""
        if not self.state.is_playing:
            self.reset()

    # ── Physics ───────────────────────────────────────────────────────────

    def step(self, dt: float, params: Optional[SimParams] = None) -> None:
        """
        One fixed step plus trail, ground and target handling.

        Invalid parameters raise ParameterError before the state is
        touched.
        """
        params = self.read_params() if params is None else params.validate()
        if not dt > 0:
            raise ParameterError(f"dt must be > 0, got {dt}")

        state = self.state
        step_semi_implicit_euler(state, params, dt)
        state.trail.record(state.t, state.pos)

        if state.pos[1] <= 0:
            state.pos[1] = 0.0
            self._stop()
            logger.debug("Ground contact at t=%.3f x=%.3f", state.t, state.pos[0])

        if not self.hit and is_hit(state.pos, self.target):
            self.hit = True
            self._stop()
            logger.debug("Target hit at t=%.3f (%.3f, %.3f)",
                         state.t, state.pos[0], state.pos[1])

    def _stop(self) -> None:
        self.state.is_playing = False
        self.finished = True

    # ── Target ────────────────────────────────────────────────────────────

    def relocate_target(self, x: float, y: float) -> None:
        """Move the target. An existing hit latch is kept."""
        self.target.move_to(max(0.0, x), max(0.0, y))

    @property
    def hit_now(self) -> bool:
        """Latched hit or a live overlap with the target."""
        return self.hit or is_hit(self.state.pos, self.target)
