"""
Target & hit testing.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Target:
    """Circular target in world meters. Moved by clicking on the view."""
    x: float = 20.0
    y: float = 5.0
    r: float = 2.5
    hit_r: Optional[float] = None   # collision radius override

    def __post_init__(self):
        if self.r <= 0:
            raise ValueError(f"Target radius must be > 0, got {self.r}")
        if self.hit_r is not None and self.hit_r <= 0:
            raise ValueError(f"Target hit_r must be > 0, got {self.hit_r}")

    @property
    def collision_radius(self) -> float:
        return self.r if self.hit_r is None else self.hit_r

    def move_to(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)


def is_hit(pos, target: Target) -> bool:
    """
    True if pos lies inside or on the target circle.

    pos must be the projectile's current position, not a trail sample.
    """
    dx = pos[0] - target.x
    dy = pos[1] - target.y
    r = target.collision_radius
    return dx * dx + dy * dy <= r * r
