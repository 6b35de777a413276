"""
Analytic Model
==============
Closed-form solution of ideal projectile motion (no air resistance):

    x(t) = v0x·t
    y(t) = y0 + v0y·t − ½·g·t²

Flight time is the positive root of y(t) = 0:

    T = (v0y + sqrt(v0y² + 2·g·y0)) / g

Range R = v0x·T, apex height H = y0 + v0y²/(2g).

Used as ground truth for the numerical integrator and to size the view.
"""

import math
import numpy as np
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from .params import SimParams


@dataclass(frozen=True)
class AnalyticResult:
    """Closed-form flight metrics for one set of launch parameters."""
    v0x: float   # m/s
    v0y: float   # m/s
    T: float     # flight time (s)
    R: float     # range (m)
    H: float     # apex height (m)
    y0: float
    g: float

    def position(self, t: float) -> Tuple[float, float]:
        """Exact (x, y) at time t (y may be negative past T)."""
        return self.v0x * t, self.y0 + self.v0y * t - 0.5 * self.g * t * t


@lru_cache(maxsize=128)
def _solve(v0: float, ang_deg: float, y0: float, g: float) -> AnalyticResult:
    th = math.radians(ang_deg)
    v0x = v0 * math.cos(th)
    v0y = v0 * math.sin(th)

    # Discriminant can dip just below zero from rounding when it is ~0
    disc = v0y * v0y + 2.0 * g * y0
    T = (v0y + math.sqrt(max(0.0, disc))) / g
    R = v0x * T
    H = y0 + (v0y * v0y) / (2.0 * g)
    return AnalyticResult(v0x=v0x, v0y=v0y, T=T, R=R, H=H, y0=y0, g=g)


def compute_analytic(params: SimParams) -> AnalyticResult:
    """
    Solve the launch in closed form.

    Raises ParameterError for non-finite input or g <= 0 instead of
    handing NaN to the caller. Results are memoized per distinct
    (v0, ang_deg, y0, g), dt does not affect them.
    """
    params.validate()
    return _solve(float(params.v0), float(params.ang_deg),
                  float(params.y0), float(params.g))


def analytic_curve(params: SimParams,
                   samples: int = 200) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the exact trajectory on [0, T].

    Returns (x, y) arrays of length samples + 1, y clamped to the ground.
    """
    a = compute_analytic(params)
    t = np.linspace(0.0, a.T, samples + 1)
    x = a.v0x * t
    y = a.y0 + a.v0y * t - 0.5 * a.g * t ** 2
    return x, np.clip(y, 0.0, None)
