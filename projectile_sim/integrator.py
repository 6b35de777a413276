"""
Numerical Integration Engine
=============================
Advances the projectile by one fixed timestep under constant gravity.

1. **Semi-implicit (symplectic) Euler** — velocity first, then position
   with the already-updated velocity. Used by the live simulation.
2. **Explicit Euler** — position first with the old velocity. Kept only
   to show how much worse its energy behaviour is.

Both integrate:
    dx/dt = v
    dv/dt = (0, −g)

simulate_fixed() runs a complete offline flight with the same ground rule
as the live loop and returns a TrajectoryResult with full state history.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .params import SimParams
from .trail import Trail


@dataclass
class SimState:
    """Mutable state of the live simulation."""
    t: float = 0.0
    pos: np.ndarray = field(default_factory=lambda: np.zeros(2))   # [x, y] m
    vel: np.ndarray = field(default_factory=lambda: np.zeros(2))   # [vx, vy] m/s
    trail: Trail = field(default_factory=Trail)
    is_playing: bool = False
    last_tick_timestamp: Optional[float] = None
    accumulated_time: float = 0.0

    @classmethod
    def from_params(cls, params: SimParams) -> 'SimState':
        """Fresh state at the launch point, trail seeded with it."""
        state = cls(pos=params.initial_position(),
                    vel=params.initial_velocity())
        state.trail.record(0.0, state.pos)
        return state

    def snapshot(self):
        """(t, pos, vel) copies, for comparisons."""
        return self.t, self.pos.copy(), self.vel.copy()


def step_semi_implicit_euler(state: SimState, params: SimParams, dt: float):
    """
    Semi-implicit Euler, in place.

    v_{n+1} = v_n + a·dt
    x_{n+1} = x_n + v_{n+1}·dt

    No ground or target checks here; the caller does those.
    """
    state.vel[1] += -params.g * dt
    state.pos[0] += state.vel[0] * dt
    state.pos[1] += state.vel[1] * dt
    state.t += dt


def step_explicit_euler(state: SimState, params: SimParams, dt: float):
    """
    Forward Euler, in place.

    x_{n+1} = x_n + v_n·dt
    v_{n+1} = v_n + a·dt
    """
    state.pos[0] += state.vel[0] * dt
    state.pos[1] += state.vel[1] * dt
    state.vel[1] += -params.g * dt
    state.t += dt


STEPPERS: Dict[str, Callable[[SimState, SimParams, float], None]] = {
    'semi_implicit': step_semi_implicit_euler,
    'explicit': step_explicit_euler,
}


@dataclass
class TrajectoryResult:
    """Complete offline trajectory."""
    params: SimParams
    method: str           # 'semi_implicit' or 'explicit'
    dt: float

    # Arrays — each has shape (N,)
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray

    @property
    def range_total(self) -> float:
        """Horizontal distance at ground contact (m)."""
        return float(self.x[-1])

    @property
    def max_altitude(self) -> float:
        return float(np.max(self.y))

    @property
    def flight_time(self) -> float:
        return float(self.time[-1])

    def summary(self) -> str:
        """Human-readable summary string."""
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  SIMULATED FLIGHT — {self.method.upper():<32s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Launch vel   : {self.params.v0:>10.2f} m/s{'':<22s} ║",
            f"║  Elevation    : {self.params.ang_deg:>10.1f} °{'':<24s} ║",
            f"║  Height       : {self.params.y0:>10.2f} m{'':<24s} ║",
            f"║  Timestep     : {self.dt:>10.4f} s{'':<24s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Range        : {self.range_total:>10.2f} m{'':<24s} ║",
            f"║  Max altitude : {self.max_altitude:>10.2f} m{'':<24s} ║",
            f"║  Flight time  : {self.flight_time:>10.3f} s{'':<24s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def simulate_fixed(params: SimParams, method: str = 'semi_implicit',
                   dt: Optional[float] = None,
                   max_time: float = 300.0) -> TrajectoryResult:
    """
    Integrate a whole flight with a fixed step until ground contact.

    dt defaults to params.dt. The last sample is clamped to y = 0,
    exactly as the live loop does.
    """
    if method not in STEPPERS:
        raise ValueError(
            f"Unknown method '{method}'. Available: {list(STEPPERS.keys())}"
        )
    params.validate()
    dt = params.dt if dt is None else dt
    if not dt > 0:
        raise ValueError(f"dt must be > 0, got {dt}")
    stepper = STEPPERS[method]

    state = SimState(pos=params.initial_position(),
                     vel=params.initial_velocity())
    history = [(state.t, *state.pos, *state.vel)]

    while state.t < max_time:
        stepper(state, params, dt)
        if state.pos[1] <= 0:
            state.pos[1] = 0.0
            history.append((state.t, *state.pos, *state.vel))
            break
        history.append((state.t, *state.pos, *state.vel))

    t, x, y, vx, vy = (np.array(col) for col in zip(*history))
    return TrajectoryResult(params=params, method=method, dt=dt,
                            time=t, x=x, y=y, vx=vx, vy=vy)
