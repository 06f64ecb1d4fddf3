"""
Scene class: static box and circle obstacles and the ray-cast query the sensors use.
"""
import math
from typing import List, Optional, Sequence, Tuple

from utils import Point

# Axis-aligned box obstacle: (centre_x, centre_y, half_width, half_height)
Box = Tuple[float, float, float, float]

# Circular obstacle: (centre_x, centre_y, radius)
Circle = Tuple[float, float, float]

# Reference layout: one wide floor slab below the spawn point
DEFAULT_BOXES: List[Box] = [
    (0.0, -200.0, 500.0, 50.0),
]

# Extra round obstacles so the sensor fan has something to see near the spawn
DEMO_CIRCLES: List[Circle] = [
    (180.0, 60.0, 35.0),
    (-150.0, 120.0, 50.0),
    (40.0, 220.0, 25.0),
]

# Hits closer than this to the ray origin are treated as "behind" it
_EPS = 1e-9


class Scene:
    """Static 2D geometry.

    Coordinate system: x to the right, y upward. The scene is unbounded; only
    the listed obstacles can be hit. Nothing here changes after construction,
    so ``cast_ray`` is deterministic and safe to call at any rate.
    """

    def __init__(
        self,
        boxes: Optional[Sequence[Box]] = None,
        circles: Optional[Sequence[Circle]] = None,
    ) -> None:
        """
        Args:
            boxes:   Axis-aligned boxes as (cx, cy, half_width, half_height).
            circles: Circles as (cx, cy, radius).
        """
        self.boxes: Tuple[Box, ...] = tuple(boxes or ())
        self.circles: Tuple[Circle, ...] = tuple(circles or ())

        for cx, cy, hw, hh in self.boxes:
            if hw < 0.0 or hh < 0.0:
                raise ValueError(f"Box at ({cx}, {cy}) has negative half extents")
        for cx, cy, r in self.circles:
            if r < 0.0:
                raise ValueError(f"Circle at ({cx}, {cy}) has negative radius")

    @classmethod
    def default(cls) -> "Scene":
        return cls(boxes=DEFAULT_BOXES)

    @classmethod
    def demo(cls) -> "Scene":
        """Reference floor slab plus a few circles, as shown by the front-ends."""
        return cls(boxes=DEFAULT_BOXES, circles=DEMO_CIRCLES)

    # ------------------------------------------------------------------
    # Internal geometry helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ray_circle_distance(
        rx: float, ry: float,   # ray origin
        dx: float, dy: float,   # unit direction
        cx: float, cy: float,   # circle centre
        cr: float,              # circle radius
    ) -> float:
        """Distance along a ray to the first intersection with a circle, or inf.

        Solves the quadratic |O + t*D - C|^2 = r^2 for the smallest t >= 0.
        From inside the circle this is the exit point.
        """
        fx = rx - cx
        fy = ry - cy

        # a = |D|^2 = 1 for a unit-direction vector, but keep it generic
        a = dx * dx + dy * dy
        if a < _EPS:
            return math.inf
        b = 2.0 * (fx * dx + fy * dy)
        c = fx * fx + fy * fy - cr * cr

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0:
            return math.inf   # Ray misses the circle

        sqrt_d = math.sqrt(discriminant)
        t1 = (-b - sqrt_d) / (2.0 * a)
        t2 = (-b + sqrt_d) / (2.0 * a)

        if t1 >= 0.0:
            return t1
        if t2 >= 0.0:
            return t2
        return math.inf   # Circle is entirely behind the ray origin

    @staticmethod
    def _ray_box_distance(
        rx: float, ry: float,
        dx: float, dy: float,
        cx: float, cy: float,
        hw: float, hh: float,
    ) -> float:
        """Distance along a ray to an axis-aligned box (slab method), or inf.

        From inside the box this is the exit point.
        """
        t_near = -math.inf
        t_far = math.inf

        for origin, direction, lo, hi in (
            (rx, dx, cx - hw, cx + hw),
            (ry, dy, cy - hh, cy + hh),
        ):
            if abs(direction) < _EPS:
                # Parallel to this slab: must already lie between its planes
                if origin < lo or origin > hi:
                    return math.inf
                continue
            t1 = (lo - origin) / direction
            t2 = (hi - origin) / direction
            if t1 > t2:
                t1, t2 = t2, t1
            t_near = max(t_near, t1)
            t_far = min(t_far, t2)
            if t_near > t_far:
                return math.inf

        if t_far < 0.0:
            return math.inf   # Box is behind the ray origin
        return t_near if t_near >= 0.0 else t_far

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def cast_ray(
        self,
        origin: Point,
        direction: Point,
        max_distance: float,
    ) -> Optional[float]:
        """Distance along a ray to the nearest obstacle surface.

        Args:
            origin:       Ray start (x, y).
            direction:    Unit direction vector (dx, dy).
            max_distance: Hits farther than this are ignored.

        Returns:
            Distance to the closest hit in [0, max_distance], or None when
            nothing is hit within range.
        """
        rx, ry = origin
        dx, dy = direction

        min_dist = math.inf
        for cx, cy, hw, hh in self.boxes:
            d = self._ray_box_distance(rx, ry, dx, dy, cx, cy, hw, hh)
            if d < min_dist:
                min_dist = d

        for cx, cy, cr in self.circles:
            d = self._ray_circle_distance(rx, ry, dx, dy, cx, cy, cr)
            if d < min_dist:
                min_dist = d

        if math.isinf(min_dist) or min_dist > max_distance:
            return None
        return min_dist
