"""
World ↔ Screen Mapping
======================
Affine transform between world meters and screen pixels.

World y grows upward, screen y grows downward, so the vertical axis is
flipped around the bottom inset. A single uniform scale is used for both
axes so circles stay circles.

    sx = inset.left + x·scale
    sy = height − inset.bottom − y·scale

The world extent comes from the analytic trajectory, inflated so the
whole flight fits with some room:

    max_x = max(10, 1.05·R)
    max_y = max(5,  1.15·H)
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .analytic import AnalyticResult, compute_analytic
from .params import SimParams


# ── View sizing ───────────────────────────────────────────────────────────
MIN_WORLD_X = 10.0     # m
MIN_WORLD_Y = 5.0      # m
X_MARGIN = 1.05
Y_MARGIN = 1.15


class MappingUnavailable(RuntimeError):
    """No usable mapping for the current viewport."""


@dataclass(frozen=True)
class Insets:
    """Pixel margins around the drawing area."""
    left: int = 50
    right: int = 20
    top: int = 20
    bottom: int = 50


DEFAULT_INSETS = Insets()


@dataclass(frozen=True)
class WorldBounds:
    max_x: float
    max_y: float


def world_bounds(analytic: AnalyticResult) -> WorldBounds:
    """Visible world extent for a trajectory."""
    return WorldBounds(max_x=max(MIN_WORLD_X, analytic.R * X_MARGIN),
                       max_y=max(MIN_WORLD_Y, analytic.H * Y_MARGIN))


@dataclass(frozen=True)
class CoordinateMapping:
    """One immutable world↔screen transform for a fixed viewport size."""
    scale: float          # pixels per meter
    width: int
    height: int
    bounds: WorldBounds
    insets: Insets = DEFAULT_INSETS

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return (self.insets.left + x * self.scale,
                self.height - self.insets.bottom - y * self.scale)

    def screen_to_world(self, sx: float, sy: float) -> Optional[Tuple[float, float]]:
        """
        Inverse of world_to_screen, clamped to x >= 0 and y >= 0.

        Returns None if the result is not finite.
        """
        wx = (sx - self.insets.left) / self.scale
        wy = (self.height - self.insets.bottom - sy) / self.scale
        if not (math.isfinite(wx) and math.isfinite(wy)):
            return None
        return max(0.0, wx), max(0.0, wy)

    def meters_to_pixels(self, d: float) -> float:
        return d * self.scale

    @property
    def meters_per_pixel(self) -> float:
        return 1.0 / self.scale


def build_mapping(bounds: WorldBounds, width: int, height: int,
                  insets: Insets = DEFAULT_INSETS) -> CoordinateMapping:
    """
    Fit bounds into the viewport minus insets.

    Raises MappingUnavailable if the usable area is empty.
    """
    usable_w = width - insets.left - insets.right
    usable_h = height - insets.top - insets.bottom
    if usable_w <= 0 or usable_h <= 0:
        raise MappingUnavailable(
            f"Viewport {width}x{height} leaves no room inside the insets"
        )
    scale = min(usable_w / bounds.max_x, usable_h / bounds.max_y)
    return CoordinateMapping(scale=scale, width=int(width), height=int(height),
                             bounds=bounds, insets=insets)


class CoordinateMapper:
    """
    Holds the mapping of the most recent render.

    A resize to a different size drops the mapping, so clicks are never
    interpreted with a transform built for another viewport.
    """

    def __init__(self, width: int = 0, height: int = 0,
                 insets: Insets = DEFAULT_INSETS):
        self.viewport_size = (int(width), int(height))
        self.insets = insets
        self.mapping: Optional[CoordinateMapping] = None

    def resize(self, width: int, height: int) -> None:
        size = (int(width), int(height))
        if size != self.viewport_size:
            self.viewport_size = size
            self.mapping = None

    def update(self, params: SimParams) -> Optional[CoordinateMapping]:
        """Rebuild the mapping for params at the current viewport size."""
        bounds = world_bounds(compute_analytic(params))
        try:
            self.mapping = build_mapping(bounds, *self.viewport_size,
                                         insets=self.insets)
        except MappingUnavailable:
            self.mapping = None
        return self.mapping

    @property
    def available(self) -> bool:
        return self.mapping is not None

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        if self.mapping is None:
            raise MappingUnavailable("No mapping computed for this viewport yet")
        return self.mapping.world_to_screen(x, y)

    def screen_to_world(self, sx: float, sy: float) -> Optional[Tuple[float, float]]:
        """World meters for a pixel position, or None if unavailable."""
        if self.mapping is None:
            return None
        return self.mapping.screen_to_world(sx, sy)
