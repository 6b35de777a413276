"""
Unit Tests for the Physics Core
================================
Analytic model, integrators, trail recording, hit testing and the
comparison against the closed form.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from projectile_sim.params import SimParams, ParameterError
from projectile_sim.analytic import compute_analytic, analytic_curve
from projectile_sim.integrator import (
    SimState, simulate_fixed, step_semi_implicit_euler, step_explicit_euler,
)
from projectile_sim.trail import Trail, TRAIL_INTERVAL
from projectile_sim.collision import Target, is_hit
from projectile_sim.validation import (
    compare_with_analytic, convergence_study, energy_drift, observed_order,
)


REFERENCE = SimParams(v0=20.0, ang_deg=45.0, y0=0.0, g=9.8, dt=0.01)


class TestParams:
    """Parameter validation and initial conditions."""

    def test_defaults_are_valid(self):
        assert SimParams().validate() == SimParams()

    @pytest.mark.parametrize("kwargs", [
        {'g': 0.0}, {'g': -9.8}, {'dt': 0.0}, {'v0': 0.0},
        {'y0': -1.0}, {'v0': float('nan')}, {'ang_deg': float('inf')},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ParameterError):
            SimParams(**kwargs).validate()

    def test_initial_velocity_vector(self):
        v = REFERENCE.initial_velocity()
        assert abs(np.linalg.norm(v) - 20.0) < 1e-12
        assert abs(v[1] - 20 * math.sin(math.radians(45))) < 1e-12

    def test_initial_position(self):
        p = SimParams(y0=7.5).initial_position()
        assert np.allclose(p, [0.0, 7.5])


class TestAnalytic:
    """Closed-form flight metrics."""

    def test_reference_scenario(self):
        a = compute_analytic(REFERENCE)
        assert abs(a.T - 2.887) < 0.01
        assert abs(a.R - 40.8) < 0.05
        assert abs(a.H - 10.2) < 0.01

    def test_range_matches_textbook_formula(self):
        a = compute_analytic(REFERENCE)
        th = math.radians(45.0)
        assert a.R == pytest.approx(20.0 ** 2 * math.sin(2 * th) / 9.8, rel=1e-12)

    @pytest.mark.parametrize("v0,ang,y0,g", [
        (1.0, 0.0, 0.0, 9.81), (35.0, 10.0, 3.0, 9.81),
        (12.0, 89.0, 50.0, 1.62), (60.0, 60.0, 0.0, 24.8),
        (5.0, 0.0, 20.0, 9.81),
    ])
    def test_flight_time_positive_and_range_consistent(self, v0, ang, y0, g):
        params = SimParams(v0=v0, ang_deg=ang, y0=y0, g=g)
        a = compute_analytic(params)
        th = math.radians(ang)
        assert a.T >= 0
        if y0 > 0 or ang > 0:
            assert a.T > 0
        assert a.R == pytest.approx(v0 * math.cos(th) * a.T, rel=1e-12, abs=1e-12)

    def test_lands_at_ground(self):
        a = compute_analytic(SimParams(v0=15.0, ang_deg=30.0, y0=12.0, g=9.81))
        x, y = a.position(a.T)
        assert abs(y) < 1e-9
        assert x == pytest.approx(a.R)

    def test_apex_height(self):
        a = compute_analytic(SimParams(v0=10.0, ang_deg=90.0, y0=2.0, g=10.0))
        assert a.H == pytest.approx(2.0 + 100.0 / 20.0)

    def test_zero_gravity_rejected(self):
        with pytest.raises(ParameterError):
            compute_analytic(SimParams(g=0.0))

    def test_dt_does_not_change_result(self):
        a1 = compute_analytic(SimParams(dt=0.01))
        a2 = compute_analytic(SimParams(dt=0.04))
        assert a1 == a2

    def test_curve_samples(self):
        x, y = analytic_curve(REFERENCE, samples=200)
        assert len(x) == len(y) == 201
        assert x[0] == 0.0
        assert x[-1] == pytest.approx(compute_analytic(REFERENCE).R)
        assert np.all(y >= 0)


class TestIntegrators:
    """Fixed-step integration."""

    def test_semi_implicit_updates_velocity_first(self):
        state = SimState(pos=np.array([0.0, 10.0]), vel=np.array([2.0, 0.0]))
        step_semi_implicit_euler(state, REFERENCE, 0.1)
        assert state.vel[1] == pytest.approx(-0.98)
        # position moved with the new velocity
        assert state.pos[1] == pytest.approx(10.0 - 0.098)
        assert state.pos[0] == pytest.approx(0.2)
        assert state.t == pytest.approx(0.1)

    def test_explicit_updates_position_first(self):
        state = SimState(pos=np.array([0.0, 10.0]), vel=np.array([2.0, 0.0]))
        step_explicit_euler(state, REFERENCE, 0.1)
        assert state.pos[1] == 10.0
        assert state.vel[1] == pytest.approx(-0.98)

    def test_deterministic(self):
        results = []
        for _ in range(3):
            state = SimState.from_params(REFERENCE)
            for _ in range(137):
                step_semi_implicit_euler(state, REFERENCE, REFERENCE.dt)
            results.append(state.snapshot())
        for t, pos, vel in results[1:]:
            assert t == results[0][0]
            assert np.array_equal(pos, results[0][1])
            assert np.array_equal(vel, results[0][2])

    def test_no_ground_check_inside_step(self):
        state = SimState(pos=np.array([0.0, 0.0]), vel=np.array([1.0, -5.0]))
        step_semi_implicit_euler(state, REFERENCE, 0.1)
        assert state.pos[1] < 0

    def test_semi_implicit_error_law(self):
        """y_n = y(t_n) − ½·g·dt·t_n for constant gravity."""
        dt = 0.01
        state = SimState.from_params(REFERENCE)
        for _ in range(100):
            step_semi_implicit_euler(state, REFERENCE, dt)
        a = compute_analytic(REFERENCE)
        _, y_exact = a.position(state.t)
        assert state.pos[1] == pytest.approx(y_exact - 0.5 * 9.8 * dt * state.t, abs=1e-9)

    def test_simulate_fixed_ends_on_ground(self):
        res = simulate_fixed(REFERENCE)
        assert res.y[-1] == 0.0
        assert np.all(res.y[1:-1] > 0)
        a = compute_analytic(REFERENCE)
        assert abs(res.flight_time - a.T) <= REFERENCE.dt + 1e-9
        assert abs(res.range_total - a.R) < 0.5

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            simulate_fixed(REFERENCE, method='rk4')

    def test_summary_mentions_method(self):
        assert 'SEMI_IMPLICIT' in simulate_fixed(REFERENCE).summary()


class TestTrail:
    """Decimated trajectory history."""

    def test_first_sample_always_recorded(self):
        trail = Trail()
        assert trail.record(0.0, (0.0, 1.0))
        assert len(trail) == 1

    def test_decimation(self):
        trail = Trail()
        trail.record(0.0, (0.0, 0.0))
        assert not trail.record(0.01, (1.0, 1.0))
        assert trail.record(0.02, (2.0, 2.0))
        assert trail.last_recorded_time == 0.02
        assert len(trail) == 2

    @pytest.mark.parametrize("dt", [0.001, 0.005, 0.01])
    def test_sample_count_independent_of_dt(self, dt):
        trail = Trail()
        t = 0.0
        trail.record(t, (0.0, 0.0))
        for _ in range(int(round(1.0 / dt))):
            t += dt
            trail.record(t, (t, t))
        # float drift in t can push a sample one step later
        assert 1.0 / (TRAIL_INTERVAL + dt) <= len(trail) <= 1.0 / TRAIL_INTERVAL + 2

    def test_y_clamped_to_ground(self):
        trail = Trail()
        trail.record(0.0, (3.0, -0.4))
        assert trail.samples[0] == (3.0, 0.0)

    def test_clear(self):
        trail = Trail()
        trail.record(0.0, (0.0, 0.0))
        trail.record(1.0, (1.0, 0.0))
        trail.clear()
        assert len(trail) == 0
        assert trail.last_recorded_time == 0.0
        assert trail.as_array().shape == (0, 2)

    def test_as_array(self):
        trail = Trail()
        trail.record(0.0, (0.0, 1.0))
        trail.record(0.5, (2.0, 3.0))
        assert np.array_equal(trail.as_array(), np.array([[0.0, 1.0], [2.0, 3.0]]))


class TestCollision:
    """Circular hit test."""

    def test_boundary_inclusive(self):
        target = Target(x=0.0, y=0.0, r=5.0)
        assert is_hit((3.0, 4.0), target)

    def test_just_outside(self):
        target = Target(x=0.0, y=0.0, r=5.0)
        assert not is_hit((3.0, 4.0 + 1e-9), target)

    def test_centre(self):
        target = Target(x=20.0, y=5.0, r=2.5)
        assert is_hit(np.array([20.0, 5.0]), target)

    def test_hit_radius_override(self):
        assert is_hit((2.0, 0.0), Target(x=0.0, y=0.0, r=1.0, hit_r=3.0))
        assert not is_hit((2.0, 0.0), Target(x=0.0, y=0.0, r=3.0, hit_r=1.0))

    def test_hit_radius_defaults_to_visual(self):
        assert Target(r=2.5).collision_radius == 2.5

    @pytest.mark.parametrize("kwargs", [{'r': 0.0}, {'r': -1.0}, {'hit_r': 0.0}])
    def test_bad_radius(self, kwargs):
        with pytest.raises(ValueError):
            Target(**kwargs)


class TestValidation:
    """Simulated vs closed-form trajectory."""

    def test_error_bounded_by_first_order_law(self):
        cmp = compare_with_analytic(REFERENCE)
        a = compute_analytic(REFERENCE)
        bound = 0.5 * REFERENCE.g * REFERENCE.dt * a.T
        assert cmp.max_position_error <= bound * 1.01 + 1e-3
        assert abs(cmp.flight_time_error) <= REFERENCE.dt + 1e-9

    def test_converges_as_dt_shrinks(self):
        coarse = compare_with_analytic(REFERENCE, dt=0.01)
        fine = compare_with_analytic(REFERENCE, dt=0.005)
        ratio = coarse.max_position_error / fine.max_position_error
        assert 1.8 < ratio < 2.2

    def test_observed_order_is_one(self):
        results = convergence_study(REFERENCE, dts=(0.02, 0.01, 0.005, 0.0025))
        assert abs(observed_order(results) - 1.0) < 0.1

    def test_energy_drift_opposite_signs(self):
        dt = 0.01
        semi = energy_drift(simulate_fixed(REFERENCE, 'semi_implicit', dt=dt))
        expl = energy_drift(simulate_fixed(REFERENCE, 'explicit', dt=dt))
        n = np.arange(len(semi))
        assert np.allclose(semi, -0.5 * 9.8 ** 2 * dt ** 2 * n, atol=1e-8)
        n = np.arange(len(expl))
        assert np.allclose(expl, 0.5 * 9.8 ** 2 * dt ** 2 * n, atol=1e-8)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
