"""
Trail Recorder
==============
Time-decimated history of simulated positions for display.

A sample is kept whenever the trail is empty or at least TRAIL_INTERVAL
of simulated time has passed since the previous sample, so memory grows
with flight time rather than with the number of integration steps.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Tuple


TRAIL_INTERVAL = 0.02   # s  simulated time between samples


@dataclass
class Trail:
    """Recorded trajectory samples plus the time of the newest one."""
    samples: List[Tuple[float, float]] = field(default_factory=list)
    last_recorded_time: float = 0.0
    interval: float = TRAIL_INTERVAL

    def __len__(self) -> int:
        return len(self.samples)

    def record(self, t: float, pos) -> bool:
        """
        Append pos if the decimation interval has elapsed.

        Returns True when a sample was stored.
        """
        if self.samples and t - self.last_recorded_time < self.interval:
            return False
        self.samples.append((float(pos[0]), max(0.0, float(pos[1]))))
        self.last_recorded_time = t
        return True

    def clear(self):
        self.samples.clear()
        self.last_recorded_time = 0.0

    def as_array(self) -> np.ndarray:
        """Samples as an (N, 2) array."""
        if not self.samples:
            return np.empty((0, 2))
        return np.array(self.samples)
