"""
Validation Against the Closed-Form Solution
============================================
Compares the fixed-step integrator with the analytic trajectory.

For constant gravity both Euler variants have an exact error law:

    semi-implicit:  y_n = y(t_n) − ½·g·dt·t_n
    explicit:       y_n = y(t_n) + ½·g·dt·t_n

so the position error is first order in dt, and halving dt halves it.
The simulated path is resampled onto a common time grid with a linear
interpolant before comparing, so runs with different dt line up.
"""

import numpy as np
from dataclasses import dataclass
from scipy.interpolate import interp1d
from typing import List, Optional, Sequence

from .analytic import compute_analytic
from .integrator import TrajectoryResult, simulate_fixed
from .params import SimParams


@dataclass
class ComparisonResult:
    """Simulated-vs-analytic errors for one run."""
    method: str
    dt: float
    max_position_error: float   # m, over the common time grid
    flight_time_error: float    # s  (simulated − analytic)
    range_error: float          # m  (simulated − analytic)
    apex_error: float           # m  (simulated − analytic)
    trajectory: TrajectoryResult


def position_error(result: TrajectoryResult, samples: int = 200) -> np.ndarray:
    """
    Distance between simulated and exact positions on a uniform grid
    covering the time both trajectories are airborne.

    The grid stops at the last sample before ground contact; the clamped
    contact sample is not an integration result.
    """
    a = compute_analytic(result.params)
    t_end = min(a.T, result.time[-2])
    t = np.linspace(0.0, t_end, samples)

    x_sim = interp1d(result.time, result.x, assume_sorted=True)(t)
    y_sim = interp1d(result.time, result.y, assume_sorted=True)(t)

    x_ex = a.v0x * t
    y_ex = np.clip(a.y0 + a.v0y * t - 0.5 * a.g * t ** 2, 0.0, None)
    return np.hypot(x_sim - x_ex, y_sim - y_ex)


def compare_with_analytic(params: SimParams, method: str = 'semi_implicit',
                          dt: Optional[float] = None) -> ComparisonResult:
    """Run one offline flight and measure it against the closed form."""
    result = simulate_fixed(params, method=method, dt=dt)
    a = compute_analytic(params)
    return ComparisonResult(
        method=method,
        dt=result.dt,
        max_position_error=float(np.max(position_error(result))),
        flight_time_error=result.flight_time - a.T,
        range_error=result.range_total - a.R,
        apex_error=result.max_altitude - a.H,
        trajectory=result,
    )


def energy_drift(result: TrajectoryResult) -> np.ndarray:
    """
    Specific mechanical energy change E_n − E_0 (J/kg) along the run.

    The final, ground-clamped sample is left out since clamping is not
    part of the integration.
    """
    g = result.params.g
    energy = 0.5 * (result.vx ** 2 + result.vy ** 2) + g * result.y
    return (energy - energy[0])[:-1]


def observed_order(results: Sequence[ComparisonResult]) -> float:
    """Slope of log(error) against log(dt)."""
    dts = np.array([r.dt for r in results])
    errs = np.array([r.max_position_error for r in results])
    slope, _ = np.polyfit(np.log(dts), np.log(errs), 1)
    return float(slope)


def convergence_study(params: SimParams,
                      dts: Sequence[float] = (0.04, 0.02, 0.01, 0.005, 0.0025),
                      method: str = 'semi_implicit',
                      verbose: bool = False) -> List[ComparisonResult]:
    """
    Repeat compare_with_analytic for several step sizes.

    Returns the results ordered as dts.
    """
    results = [compare_with_analytic(params, method=method, dt=dt) for dt in dts]

    if verbose:
        a = compute_analytic(params)
        print(f"\n{'='*64}")
        print(f"  CONVERGENCE: {method} | v0={params.v0} m/s, "
              f"θ={params.ang_deg}°, y0={params.y0} m, g={params.g} m/s²")
        print(f"  Analytic — T={a.T:.4f} s  R={a.R:.4f} m  H={a.H:.4f} m")
        print(f"{'='*64}")
        print(f"{'dt (s)':>8} {'max |Δp| (m)':>14} {'ΔT (s)':>10} "
              f"{'ΔR (m)':>10} {'ΔH (m)':>10}")
        print("-" * 64)
        for r in results:
            print(f"{r.dt:>8.4f} {r.max_position_error:>14.5f} "
                  f"{r.flight_time_error:>+10.4f} {r.range_error:>+10.4f} "
                  f"{r.apex_error:>+10.4f}")
        print("-" * 64)
        if len(results) > 1:
            print(f"  Observed order: {observed_order(results):.2f} (expected 1)")
        print(f"{'='*64}\n")

    return results
