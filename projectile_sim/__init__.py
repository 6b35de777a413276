"""
Interactive Projectile Motion Simulator
=======================================
Ideal 2D projectile under constant gravity (no air resistance):
  - Closed-form flight time, range and apex height
  - Semi-implicit Euler integration on a fixed timestep
  - Fixed-timestep clock decoupling animation frames from physics steps
  - World ↔ screen mapping with click-to-move target
  - Circular target hit detection with a latched hit flag

The simulated trajectory is drawn next to the analytic one so the
integration error can be seen while the projectile flies.
"""

from .params import SimParams, ParameterError, PARAM_RANGES
from .analytic import AnalyticResult, compute_analytic, analytic_curve
from .integrator import (
    SimState, TrajectoryResult, simulate_fixed,
    step_semi_implicit_euler, step_explicit_euler,
)
from .trail import Trail, TRAIL_INTERVAL
from .collision import Target, is_hit
from .mapping import (
    CoordinateMapper, CoordinateMapping, Insets, MappingUnavailable,
    WorldBounds, build_mapping, world_bounds,
)
from .clock import (
    SimulationClock, ManualScheduler, MAX_FRAME_TIME, MAX_STEPS_PER_TICK,
)
from .simulation import Simulation
from .validation import (
    compare_with_analytic, convergence_study, energy_drift, observed_order,
)

__version__ = "1.0.0"
__all__ = [
    'SimParams', 'ParameterError', 'PARAM_RANGES',
    'AnalyticResult', 'compute_analytic', 'analytic_curve',
    'SimState', 'TrajectoryResult', 'simulate_fixed',
    'step_semi_implicit_euler', 'step_explicit_euler',
    'Trail', 'TRAIL_INTERVAL',
    'Target', 'is_hit',
    'CoordinateMapper', 'CoordinateMapping', 'Insets', 'MappingUnavailable',
    'WorldBounds', 'build_mapping', 'world_bounds',
    'SimulationClock', 'ManualScheduler', 'MAX_FRAME_TIME', 'MAX_STEPS_PER_TICK',
    'Simulation',
    'compare_with_analytic', 'convergence_study', 'energy_drift', 'observed_order',
]
