"""
Interactive simulator window.

Sliders set v0, angle, height, gravity and dt; Play/Pause and Reset
drive the simulation; clicking the view moves the target. Animation
ticks come from a single-shot matplotlib timer re-armed by the clock.

Run: python -m projectile_sim.app
"""

import logging
import time
import matplotlib.pyplot as plt
from matplotlib.widgets import Button, Slider
from typing import Callable, List, Optional

from .collision import Target
from .params import PARAM_RANGES, ParameterError, SimParams
from .simulation import Simulation
from .visualization import STYLE, TrajectoryRenderer

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16

SLIDER_LABELS = {
    'v0': 'v0 (m/s)',
    'ang_deg': 'angle (°)',
    'y0': 'y0 (m)',
    'g': 'g (m/s²)',
    'dt': 'dt (s)',
}


class TimerScheduler:
    """
    Tick scheduler backed by a canvas timer.

    Callbacks receive time.perf_counter() seconds. ParameterError raised
    by a tick goes to on_error instead of the GUI event loop.
    """

    def __init__(self, canvas, interval_ms: int = FRAME_INTERVAL_MS,
                 on_error: Optional[Callable[[ParameterError], None]] = None):
        self._callbacks: List[Callable[[float], None]] = []
        self.on_error = on_error
        self.timer = canvas.new_timer(interval=interval_ms)
        self.timer.single_shot = True
        self.timer.add_callback(self._fire)

    def __call__(self, callback: Callable[[float], None]) -> None:
        self._callbacks.append(callback)
        self.timer.start()

    def _fire(self):
        callbacks, self._callbacks = self._callbacks, []
        ts = time.perf_counter()
        for cb in callbacks:
            try:
                cb(ts)
            except ParameterError as err:
                if self.on_error is None:
                    raise
                self.on_error(err)


class ProjectileApp:
    """
    Manages the window, widgets and user interaction.
    """

    def __init__(self, params: Optional[SimParams] = None,
                 target: Optional[Target] = None):
        params = params or SimParams()

        self.fig = plt.figure(figsize=(11, 8))
        self.fig.patch.set_facecolor(STYLE['bg_color'])
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title('Projectile Motion Simulator')

        view_ax = self.fig.add_axes([0.0, 0.30, 1.0, 0.70])
        self.renderer = TrajectoryRenderer(self.fig, view_ax)
        self._init_widgets(params)

        self.scheduler = TimerScheduler(self.fig.canvas, on_error=self._on_error)
        self.sim = Simulation(self.read_params, target=target,
                              request_tick=self.scheduler, on_frame=self.redraw)

        self.fig.canvas.mpl_connect('button_press_event', self._on_click)
        self.fig.canvas.mpl_connect('resize_event', self._on_resize)
        self.redraw()

    def _init_widgets(self, params: SimParams):
        """Setup Sliders and Buttons."""
        self.sliders = {}
        for i, name in enumerate(SLIDER_LABELS):
            lo, hi, step = PARAM_RANGES[name]
            # [left, bottom, width, height]
            ax = self.fig.add_axes([0.15, 0.24 - i * 0.04, 0.6, 0.025])
            slider = Slider(ax, SLIDER_LABELS[name], lo, hi,
                            valinit=getattr(params, name), valstep=step)
            slider.label.set_color(STYLE['text_color'])
            slider.valtext.set_color(STYLE['text_color'])
            slider.on_changed(self._on_param_change)
            self.sliders[name] = slider

        self.btn_play = Button(self.fig.add_axes([0.80, 0.17, 0.12, 0.05]), 'Play')
        self.btn_reset = Button(self.fig.add_axes([0.80, 0.09, 0.12, 0.05]), 'Reset')
        self.btn_play.on_clicked(self._on_play)
        self.btn_reset.on_clicked(self._on_reset)

    def read_params(self) -> SimParams:
        return SimParams(**{name: float(s.val) for name, s in self.sliders.items()})

    # --- Drawing ---

    def redraw(self):
        sim = self.sim
        try:
            params = sim.read_params()
        except ParameterError as err:
            self._on_error(err)
            return
        self.renderer.draw(params, sim.state, sim.target, sim.hit)
        self.btn_play.label.set_text('Pause' if sim.state.is_playing else 'Play')

    # --- Event Callbacks ---

    def _on_error(self, err: ParameterError):
        logger.warning("Invalid parameters: %s", err)
        self.sim.pause()
        self.renderer.message = f'Invalid parameters: {err}'
        self.fig.canvas.draw_idle()

    def _on_param_change(self, _val):
        self.renderer.message = None
        try:
            self.sim.on_params_changed()
        except ParameterError as err:
            self._on_error(err)
            return
        self.redraw()

    def _on_play(self, _event):
        try:
            self.sim.toggle()
        except ParameterError as err:
            self._on_error(err)
            return
        self.redraw()

    def _on_reset(self, _event):
        self.sim.pause()
        try:
            self.sim.reset()
        except ParameterError as err:
            self._on_error(err)
            return
        self.redraw()

    def _on_click(self, event):
        if event.inaxes is not self.renderer.ax or event.xdata is None:
            return
        world = self.renderer.screen_to_world(event.xdata, event.ydata)
        if world is None:
            return
        self.sim.relocate_target(*world)
        self.redraw()

    def _on_resize(self, _event):
        self.renderer.resize()
        self.redraw()

    def show(self):
        plt.show()


if __name__ == "__main__":
    ProjectileApp().show()
