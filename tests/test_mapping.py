"""
Tests for world↔screen mapping, the renderer, the interactive app and
the headless runner. Matplotlib runs on the Agg backend (conftest.py).
"""

import sys
import os
import types
import numpy as np
import pytest
import matplotlib.pyplot as plt

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from projectile_sim.analytic import compute_analytic
from projectile_sim.collision import Target
from projectile_sim.integrator import SimState
from projectile_sim.mapping import (
    CoordinateMapper, Insets, MappingUnavailable, WorldBounds,
    build_mapping, world_bounds,
)
from projectile_sim.params import SimParams, ParameterError
from projectile_sim.visualization import TrajectoryRenderer, nice_step


REFERENCE = SimParams(v0=20.0, ang_deg=45.0, y0=0.0, g=9.8, dt=0.01)


class TestWorldBounds:

    def test_reference_bounds(self):
        a = compute_analytic(REFERENCE)
        b = world_bounds(a)
        assert b.max_x == pytest.approx(1.05 * a.R)
        assert b.max_y == pytest.approx(1.15 * a.H)

    def test_minimum_extent(self):
        b = world_bounds(compute_analytic(SimParams(v0=1.0, ang_deg=30.0)))
        assert b.max_x == 10.0
        assert b.max_y == 5.0


class TestCoordinateMapping:

    def test_scale_is_uniform_minimum(self):
        m = build_mapping(WorldBounds(10.0, 5.0), 900, 520)
        # usable 830 x 450 px
        assert m.scale == pytest.approx(min(830 / 10.0, 450 / 5.0))

    def test_origin_and_axis_flip(self):
        m = build_mapping(WorldBounds(10.0, 5.0), 900, 520)
        assert m.world_to_screen(0.0, 0.0) == (50, 470)
        sx, sy = m.world_to_screen(1.0, 1.0)
        assert sx > 50
        assert sy < 470

    def test_circle_stays_circle(self):
        m = build_mapping(WorldBounds(42.0, 11.0), 1000, 400)
        x0, y0 = m.world_to_screen(5.0, 5.0)
        x1, _ = m.world_to_screen(7.5, 5.0)
        _, y1 = m.world_to_screen(5.0, 7.5)
        assert x1 - x0 == pytest.approx(y0 - y1)

    def test_round_trip_within_a_pixel(self):
        a = compute_analytic(REFERENCE)
        m = build_mapping(world_bounds(a), 900, 520)
        rng = np.random.default_rng(7)
        for x, y in rng.uniform(0, 1, size=(50, 2)) * [m.bounds.max_x, m.bounds.max_y]:
            back = m.screen_to_world(*m.world_to_screen(x, y))
            assert abs(back[0] - x) <= m.meters_per_pixel
            assert abs(back[1] - y) <= m.meters_per_pixel

    def test_screen_to_world_clamped(self):
        m = build_mapping(WorldBounds(10.0, 5.0), 900, 520)
        assert m.screen_to_world(0.0, 520.0) == (0.0, 0.0)

    def test_vectorized(self):
        m = build_mapping(WorldBounds(10.0, 5.0), 900, 520)
        sx, sy = m.world_to_screen(np.array([0.0, 1.0]), np.array([0.0, 1.0]))
        assert sx.shape == (2,)
        assert sy[0] == 470

    def test_empty_viewport(self):
        with pytest.raises(MappingUnavailable):
            build_mapping(WorldBounds(10.0, 5.0), 60, 60)

    def test_custom_insets(self):
        m = build_mapping(WorldBounds(10.0, 10.0), 100, 100, Insets(0, 0, 0, 0))
        assert m.scale == 10.0
        assert m.world_to_screen(10.0, 10.0) == (100.0, 0.0)


class TestCoordinateMapper:

    def test_unavailable_before_first_mapping(self):
        mapper = CoordinateMapper(900, 520)
        assert not mapper.available
        assert mapper.screen_to_world(100, 100) is None
        with pytest.raises(MappingUnavailable):
            mapper.world_to_screen(0.0, 0.0)

    def test_available_after_update(self):
        mapper = CoordinateMapper(900, 520)
        mapper.update(REFERENCE)
        assert mapper.available
        assert mapper.screen_to_world(50, 470) == (0.0, 0.0)

    def test_resize_invalidates(self):
        mapper = CoordinateMapper(900, 520)
        mapper.update(REFERENCE)
        mapper.resize(900, 520)
        assert mapper.available
        mapper.resize(640, 480)
        assert mapper.screen_to_world(100, 100) is None
        mapper.update(REFERENCE)
        assert mapper.mapping.width == 640

    def test_tiny_viewport_reports_unavailable(self):
        mapper = CoordinateMapper(40, 40)
        assert mapper.update(REFERENCE) is None
        assert mapper.screen_to_world(10, 10) is None

    def test_invalid_params_raise(self):
        mapper = CoordinateMapper(900, 520)
        with pytest.raises(ParameterError):
            mapper.update(SimParams(g=0.0))


class TestRenderer:

    def test_nice_step(self):
        assert nice_step(42.86) == 5.0
        assert nice_step(10.0) == 1.0
        assert nice_step(0.0) == 1.0

    def test_viewport_matches_figure(self):
        r = TrajectoryRenderer(width=900, height=520)
        assert r.viewport_size() == (900, 520)

    def test_screen_to_world_needs_a_frame(self):
        r = TrajectoryRenderer(width=900, height=520)
        assert r.screen_to_world(300, 200) is None
        state = SimState.from_params(REFERENCE)
        mapping = r.draw(REFERENCE, state, Target(), False)
        assert mapping is not None
        world = r.screen_to_world(*mapping.world_to_screen(20.0, 5.0))
        assert world == pytest.approx((20.0, 5.0))

    def test_resize_then_redraw(self):
        r = TrajectoryRenderer(width=900, height=520)
        state = SimState.from_params(REFERENCE)
        r.draw(REFERENCE, state, Target(), False)
        r.resize(640, 480)
        assert r.screen_to_world(100, 100) is None
        mapping = r.draw(REFERENCE, state, Target(), False)
        assert (mapping.width, mapping.height) == (640, 480)

    def test_draw_hit_and_save(self, tmp_path):
        r = TrajectoryRenderer(width=600, height=400)
        state = SimState.from_params(REFERENCE)
        state.trail.record(0.5, (5.0, 4.0))
        r.message = 'hello'
        r.draw(REFERENCE, state, Target(x=0.0, y=0.0, r=1.0), True)
        path = r.save(str(tmp_path / 'frame.png'))
        assert os.path.getsize(path) > 0


class TestApp:
    """Interactive window on the Agg backend."""

    @pytest.fixture
    def app(self):
        from projectile_sim.app import ProjectileApp
        app = ProjectileApp(SimParams(v0=20.0, ang_deg=45.0, y0=0.0, g=9.8, dt=0.01))
        yield app
        plt.close(app.fig)

    def test_reads_sliders(self, app):
        p = app.read_params()
        assert p.v0 == 20.0
        assert p.dt == pytest.approx(0.01)

    def test_click_moves_target(self, app):
        mapping = app.renderer.mapper.mapping
        sx, sy = mapping.world_to_screen(12.0, 3.0)
        event = types.SimpleNamespace(inaxes=app.renderer.ax, xdata=sx, ydata=sy)
        app._on_click(event)
        assert app.sim.target.x == pytest.approx(12.0)
        assert app.sim.target.y == pytest.approx(3.0)

    def test_click_outside_view_ignored(self, app):
        event = types.SimpleNamespace(inaxes=None, xdata=None, ydata=None)
        app._on_click(event)
        assert (app.sim.target.x, app.sim.target.y) == (20.0, 5.0)

    def test_play_button_schedules_tick(self, app):
        app._on_play(None)
        assert app.sim.state.is_playing
        assert app.btn_play.label.get_text() == 'Pause'
        app._on_play(None)
        assert not app.sim.state.is_playing

    def test_slider_change_resets_while_paused(self, app):
        app.sliders['y0'].set_val(10.0)
        assert app.sim.state.pos[1] == pytest.approx(10.0)

    def test_reset_with_invalid_params_shows_message(self, app):
        app._on_play(None)

        def bad_params():
            raise ParameterError("dt must be > 0, got 0.0")

        app.sim.params_source = bad_params
        app._on_reset(None)
        assert not app.sim.state.is_playing
        assert 'Invalid parameters' in app.renderer.message

    def test_scheduler_routes_parameter_errors(self, app):
        errors = []
        app.scheduler.on_error = errors.append

        def bad_tick(ts):
            raise ParameterError("g must be > 0")

        app.scheduler(bad_tick)
        app.scheduler._fire()
        assert len(errors) == 1


class TestRunner:

    def test_quick_run(self, tmp_path, capsys):
        import main
        main.main(['--quick', '--out', str(tmp_path)])
        out = capsys.readouterr().out
        assert 'COMPLETE' in out
        for name in ('01_final_frame.png', '02_target_hit.png',
                     '03_method_comparison.png', '04_convergence.png'):
            assert (tmp_path / name).exists()

    def test_flight_animation(self, tmp_path):
        from projectile_sim.visualization import create_flight_animation
        path = create_flight_animation(REFERENCE, save_path=str(tmp_path / 'f.gif'),
                                       fps=10, max_frames=4)
        assert os.path.getsize(path) > 0


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
