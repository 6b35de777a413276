"""
Visualization Engine
====================
  1. TrajectoryRenderer — live frame drawn in screen pixels: grid,
     analytic curve, simulated trail, projectile, target, v and g arrows,
     flight data panel
  2. Analytic vs semi-implicit vs explicit Euler comparison
  3. Convergence plot (error vs dt, log-log)
  4. Animated flight (saved as GIF)

The renderer axes span their drawing area with limits set to pixels and
the y axis pointing down, so CoordinateMapping output is used as is and
mouse event xdata/ydata are drawing-surface pixel coordinates.
"""

import math
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle
from typing import Dict, Optional, Sequence, Tuple

from .analytic import analytic_curve, compute_analytic
from .collision import Target, is_hit
from .integrator import SimState, TrajectoryResult
from .mapping import DEFAULT_INSETS, CoordinateMapper, CoordinateMapping, Insets
from .params import SimParams
from .trail import Trail


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#070a0f',
    'text_color': '#e9eef5',
    'grid_color': '#333333',
    'axis_color': '#5a5d62',
    'analytic_color': '#8c8c8c',
    'trail_color': '#1f6feb',
    'projectile_color': '#ffffff',
    'velocity_color': '#1f6feb',
    'gravity_color': '#f87171',
    'target_color': '#fbbf24',
    'target_hit_color': '#6ee7b7',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b'],
    'font_family': 'monospace',
}

VECTOR_SCALE = 0.6           # s  velocity arrow length = |v|·VECTOR_SCALE meters
GRAVITY_ARROW_METERS = 6.0   # m
PROJECTILE_RADIUS_PX = 5.0


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def nice_step(max_val: float) -> float:
    """Grid spacing of 1, 2 or 5 × 10^n giving roughly 8 lines."""
    if max_val <= 0:
        return 1.0
    rough = max_val / 8
    p = 10 ** math.floor(math.log10(rough))
    r = rough / p
    m = 1 if r < 1.5 else 2 if r < 3.5 else 5 if r < 7.5 else 10
    return m * p


# ══════════════════════════════════════════════════════════════════════════
#  1. Live renderer
# ══════════════════════════════════════════════════════════════════════════

class TrajectoryRenderer:
    """
    Draws simulation frames onto a matplotlib axes in pixel space.

    With no figure given, a standalone width×height figure is created
    (headless use, tests, GIF export). The app passes its own figure
    and axes.
    """

    def __init__(self, fig: Optional[Figure] = None, ax=None,
                 width: int = 900, height: int = 520, dpi: int = 100,
                 insets: Insets = DEFAULT_INSETS):
        if fig is None:
            fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.fig = fig
        self.ax = ax if ax is not None else fig.add_axes([0, 0, 1, 1])
        self.mapper = CoordinateMapper(*self.viewport_size(), insets=insets)
        self.message: Optional[str] = None

    # ── Viewport ──────────────────────────────────────────────────────────

    def viewport_size(self) -> Tuple[int, int]:
        """Drawing area size in pixels."""
        bbox = self.ax.get_window_extent()
        return int(round(bbox.width)), int(round(bbox.height))

    def resize(self, width: Optional[int] = None,
               height: Optional[int] = None) -> None:
        """
        Tell the mapper about a new viewport size.

        With explicit width/height the standalone figure is resized too.
        The mapping stays unavailable until the next draw().
        """
        if width is not None and height is not None:
            dpi = self.fig.get_dpi()
            self.fig.set_size_inches(width / dpi, height / dpi)
        self.mapper.resize(*self.viewport_size())

    def screen_to_world(self, px: float, py: float) -> Optional[Tuple[float, float]]:
        """World meters for drawing-surface pixels, or None if unavailable."""
        return self.mapper.screen_to_world(px, py)

    # ── Frame ─────────────────────────────────────────────────────────────

    def draw(self, params: SimParams, state: SimState, target: Target,
             hit: bool) -> Optional[CoordinateMapping]:
        """Render one frame. Returns the mapping used, None if the view is empty."""
        self.mapper.resize(*self.viewport_size())
        mapping = self.mapper.update(params)

        ax = self.ax
        ax.clear()
        ax.set_axis_off()
        if mapping is None:
            return None

        w, h = mapping.width, mapping.height
        ax.set_xlim(0, w)
        ax.set_ylim(h, 0)
        ax.add_patch(Rectangle((0, 0), w, h, color=STYLE['bg_color'], zorder=0))

        self._draw_grid(mapping)
        self._draw_paths(params, state, mapping)
        hit_now = hit or is_hit(state.pos, target)
        self._draw_target(target, hit_now, mapping)
        self._draw_projectile(state, mapping)
        self._draw_panel(params, state, target, hit_now)

        self.fig.canvas.draw_idle()
        return mapping

    def _draw_grid(self, m: CoordinateMapping):
        ins = m.insets
        left, right = ins.left, m.width - ins.right
        top, bottom = ins.top, m.height - ins.bottom

        step_x = nice_step(m.bounds.max_x)
        for x in np.arange(0.0, m.bounds.max_x + 1e-9, step_x):
            sx, _ = m.world_to_screen(x, 0.0)
            self.ax.plot([sx, sx], [top, bottom], color=STYLE['grid_color'],
                         linewidth=0.8, zorder=1)
            self.ax.text(sx, bottom + 14, f'{x:g}', color=STYLE['text_color'],
                         fontsize=8, ha='center', va='top', alpha=0.7)

        step_y = nice_step(m.bounds.max_y)
        for y in np.arange(0.0, m.bounds.max_y + 1e-9, step_y):
            _, sy = m.world_to_screen(0.0, y)
            self.ax.plot([left, right], [sy, sy], color=STYLE['grid_color'],
                         linewidth=0.8, zorder=1)
            self.ax.text(left - 6, sy, f'{y:g}', color=STYLE['text_color'],
                         fontsize=8, ha='right', va='center', alpha=0.7)

        # Axes: ground and x = 0
        gx, gy = m.world_to_screen(0.0, 0.0)
        self.ax.plot([left, right], [gy, gy], color=STYLE['axis_color'],
                     linewidth=1.2, zorder=1)
        self.ax.plot([gx, gx], [top, bottom], color=STYLE['axis_color'],
                     linewidth=1.2, zorder=1)
        self.ax.text(m.width - 50, m.height - 18, 'x (m)',
                     color=STYLE['text_color'], fontsize=9)
        self.ax.text(12, 18, 'y (m)', color=STYLE['text_color'], fontsize=9)

    def _draw_paths(self, params: SimParams, state: SimState, m: CoordinateMapping):
        xs, ys = analytic_curve(params)
        sx, sy = m.world_to_screen(xs, ys)
        self.ax.plot(sx, sy, color=STYLE['analytic_color'], linewidth=1,
                     zorder=2, label='Analytic')

        trail = state.trail.as_array()
        if len(trail):
            tx, ty = m.world_to_screen(trail[:, 0], trail[:, 1])
            self.ax.plot(tx, ty, color=STYLE['trail_color'], linewidth=2,
                         zorder=3, label='Simulated')

        a = compute_analytic(params)
        rx, ry = m.world_to_screen(a.R, 0.0)
        self.ax.text(rx, ry + 18, f'R≈{a.R:.2f}m', color=STYLE['text_color'],
                     fontsize=9, ha='center', va='top')

    def _draw_target(self, target: Target, hit_now: bool, m: CoordinateMapping):
        tx, ty = m.world_to_screen(target.x, target.y)
        radius = m.meters_to_pixels(target.r)
        edge = STYLE['target_hit_color'] if hit_now else STYLE['target_color']
        self.ax.add_patch(Circle((tx, ty), radius, facecolor=STYLE['target_color'],
                                 alpha=0.15, zorder=4))
        self.ax.add_patch(Circle((tx, ty), radius, fill=False, edgecolor=edge,
                                 linewidth=2, zorder=4))
        self.ax.text(tx, ty - radius - 8, 'Target', color=STYLE['text_color'],
                     fontsize=9, ha='center')

    def _draw_projectile(self, state: SimState, m: CoordinateMapping):
        x, y = state.pos[0], max(0.0, state.pos[1])
        px, py = m.world_to_screen(x, y)
        self.ax.add_patch(Circle((px, py), PROJECTILE_RADIUS_PX,
                                 color=STYLE['projectile_color'], zorder=6))

        # Velocity arrow (screen y is flipped)
        v_end = (px + state.vel[0] * m.scale * VECTOR_SCALE,
                 py - state.vel[1] * m.scale * VECTOR_SCALE)
        g_end = m.world_to_screen(x, max(0.0, y - GRAVITY_ARROW_METERS))
        for end, color, label in ((v_end, STYLE['velocity_color'], 'v'),
                                  (g_end, STYLE['gravity_color'], 'g')):
            self.ax.annotate('', xy=end, xytext=(px, py), zorder=5,
                             arrowprops=dict(arrowstyle='-|>', color=color, lw=2))
            self.ax.text(end[0] + 6, end[1], label, color=color, fontsize=10)

    def _draw_panel(self, params: SimParams, state: SimState, target: Target,
                    hit_now: bool):
        a = compute_analytic(params)
        lines = [
            'ANALYTIC',
            f'T = {a.T:6.2f} s   R = {a.R:7.2f} m   H = {a.H:6.2f} m',
            f'v0x = {a.v0x:6.2f} m/s   v0y = {a.v0y:6.2f} m/s',
            'SIMULATION',
            f't = {state.t:6.2f} s   x = {state.pos[0]:7.2f} m   y = {state.pos[1]:6.2f} m',
            f'vx = {state.vel[0]:6.2f} m/s   vy = {state.vel[1]:6.2f} m/s',
            f'target ({target.x:.1f}, {target.y:.1f}) r={target.r:.1f} m',
            'TARGET HIT' if hit_now else 'No hit (click to move the target)',
        ]
        if self.message:
            lines.append(self.message)
        self.ax.text(0.99, 0.98, '\n'.join(lines), transform=self.ax.transAxes,
                     ha='right', va='top', fontsize=8,
                     fontfamily=STYLE['font_family'], color=STYLE['text_color'],
                     bbox=dict(facecolor='#111111', edgecolor='#444', alpha=0.85),
                     zorder=7)

    def save(self, path: str, dpi: Optional[int] = None) -> str:
        self.fig.savefig(path, dpi=dpi, facecolor=STYLE['bg_color'])
        return path


# ══════════════════════════════════════════════════════════════════════════
#  2. Analytic vs Integrators
# ══════════════════════════════════════════════════════════════════════════

def plot_method_comparison(results: Dict[str, TrajectoryResult],
                           save_path: str = None) -> plt.Figure:
    """Simulated paths for each integrator against the closed form."""
    params = next(iter(results.values())).params
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    xs, ys = analytic_curve(params)
    ax.plot(xs, ys, color='#ffffff', linewidth=1.5, alpha=0.6, label='Analytic')
    for (method, res), color in zip(results.items(), STYLE['accent_colors']):
        ax.plot(res.x, res.y, color=color, linewidth=2, linestyle='--',
                label=f'{method} (dt={res.dt}s)')
    ax.set_xlabel('x (m)')
    ax.set_ylabel('y (m)')
    ax.set_title('Trajectory', fontweight='bold')
    ax.legend(fontsize=10, facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])
    ax.set_ylim(bottom=0)
    ax.set_xlim(left=0)

    ax = axes[1]
    g = params.g
    for (method, res), color in zip(results.items(), STYLE['accent_colors']):
        energy = 0.5 * (res.vx ** 2 + res.vy ** 2) + g * res.y
        ax.plot(res.time[:-1], (energy - energy[0])[:-1], color=color,
                linewidth=2, label=method)
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('E − E₀ (J/kg)')
    ax.set_title('Mechanical Energy Drift', fontweight='bold')
    ax.legend(fontsize=10, facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])

    fig.suptitle('Fixed-Step Integration vs Closed Form',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Convergence
# ══════════════════════════════════════════════════════════════════════════

def plot_convergence(results: Sequence, save_path: str = None) -> plt.Figure:
    """Max position error vs dt on log-log axes, with an O(dt) guide."""
    fig, ax = plt.subplots(figsize=(9, 6))
    _apply_dark_style(fig, ax)

    dts = np.array([r.dt for r in results])
    errs = np.array([r.max_position_error for r in results])
    ax.loglog(dts, errs, 'o-', color=STYLE['accent_colors'][0], linewidth=2,
              markersize=8, label=f'{results[0].method}')
    ax.loglog(dts, errs[0] * dts / dts[0], '--', color='#888',
              label='O(dt) reference')
    ax.set_xlabel('dt (s)', fontsize=12)
    ax.set_ylabel('max |Δp| (m)', fontsize=12)
    ax.set_title('Convergence to the Analytic Trajectory',
                 fontsize=14, fontweight='bold')
    ax.legend(fontsize=11, facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Animated flight (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_flight_animation(params: SimParams, target: Optional[Target] = None,
                            save_path: str = 'outputs/flight.gif',
                            fps: int = 30, max_frames: int = 600) -> str:
    """
    Play the live simulation with synthetic frame timestamps and save
    every rendered frame to an animated GIF.
    """
    from matplotlib.animation import FuncAnimation, PillowWriter
    from .clock import ManualScheduler
    from .simulation import Simulation

    scheduler = ManualScheduler()
    sim = Simulation(lambda: params, target=target, request_tick=scheduler)
    renderer = TrajectoryRenderer(width=800, height=450)

    sim.play()
    frames = []
    ts = 0.0
    while scheduler.pending and len(frames) < max_frames:
        scheduler.fire(ts)
        frames.append((sim.state.t, sim.state.pos.copy(), sim.state.vel.copy(),
                       len(sim.state.trail), sim.hit))
        ts += 1.0 / fps

    snapshot = SimState()

    def animate(i):
        t, pos, vel, n_trail, hit = frames[i]
        snapshot.t, snapshot.pos, snapshot.vel = t, pos, vel
        snapshot.trail = Trail(samples=sim.state.trail.samples[:n_trail])
        renderer.draw(params, snapshot, sim.target, hit)
        return ()

    anim = FuncAnimation(renderer.fig, animate, frames=len(frames),
                         interval=1000 / fps, blit=False)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    print(f"  Animation saved: {save_path}")
    return save_path
