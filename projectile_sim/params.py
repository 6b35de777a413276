"""
Launch Parameters
=================
Defines the SimParams dataclass read from the parameter source on every
animation tick:
  - v0      initial speed (m/s)
  - ang_deg launch angle above horizontal (degrees)
  - y0      launch height (m)
  - g       gravitational acceleration (m/s²)
  - dt      fixed integration step (s)

Coordinate system:
  x = horizontal distance from the launch point
  y = height above ground (up positive)
"""

import math
import numpy as np
from dataclasses import dataclass, fields
from typing import Dict, Tuple


# ── Slider ranges (min, max, step) ────────────────────────────────────────
PARAM_RANGES: Dict[str, Tuple[float, float, float]] = {
    'v0':      (1.0, 60.0, 0.5),
    'ang_deg': (0.0, 90.0, 1.0),
    'y0':      (0.0, 50.0, 0.5),
    'g':       (1.0, 25.0, 0.1),
    'dt':      (0.001, 0.05, 0.001),
}


class ParameterError(ValueError):
    """Raised when launch parameters would make the physics meaningless."""


@dataclass(frozen=True)
class SimParams:
    """
    Complete specification of one launch.
    """
    v0: float = 20.0          # m/s
    ang_deg: float = 45.0     # degrees above horizontal
    y0: float = 0.0           # m above ground
    g: float = 9.81           # m/s²
    dt: float = 0.01          # s  fixed physics step

    @property
    def theta(self) -> float:
        """Launch angle in radians."""
        return math.radians(self.ang_deg)

    def validate(self) -> 'SimParams':
        """
        Refuse non-finite or non-physical values.

        Returns self so calls can be chained.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ParameterError(f"{f.name} must be finite, got {value!r}")
        if self.v0 <= 0:
            raise ParameterError(f"v0 must be > 0, got {self.v0}")
        if self.g <= 0:
            raise ParameterError(f"g must be > 0, got {self.g}")
        if self.dt <= 0:
            raise ParameterError(f"dt must be > 0, got {self.dt}")
        if self.y0 < 0:
            raise ParameterError(f"y0 must be >= 0, got {self.y0}")
        return self

    def initial_velocity(self) -> np.ndarray:
        """Convert launch speed + angle to [vx, vy]."""
        th = self.theta
        return np.array([self.v0 * math.cos(th), self.v0 * math.sin(th)])

    def initial_position(self) -> np.ndarray:
        """Starting position [x, y]."""
        return np.array([0.0, float(self.y0)])
