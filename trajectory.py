"""
Trajectory queue: the FIFO of waypoints the robot drives through.
"""
from collections import deque
from typing import Deque, Iterable, Iterator, Optional

from utils import Point


class TrajectoryQueue:
    """Ordered waypoints; the front element is the current target.

    External producers (mouse clicks, scripted runs) only ever ``append``.
    The motion controller is the only caller of ``pop_front`` and does so
    once it has snapped exactly onto the front waypoint.
    """

    def __init__(self, waypoints: Optional[Iterable[Point]] = None) -> None:
        self._points: Deque[Point] = deque()
        for point in waypoints or ():
            self.append(point)

    def append(self, point: Point) -> None:
        """Add a waypoint at the back. No validation: any point is a legal target."""
        x, y = point
        self._points.append((float(x), float(y)))

    def front(self) -> Optional[Point]:
        """Current target, or None when the queue is empty (robot idle)."""
        return self._points[0] if self._points else None

    def pop_front(self) -> Point:
        return self._points.popleft()

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"TrajectoryQueue({list(self._points)!r})"
