"""
Robot class: pose, speeds, and the latest sensor readings.
"""
from typing import List, Optional, Tuple

from utils import Point, wrap_to_pi

# (relative_angle, length) for one sensor ray
SensorReading = Tuple[float, float]


class Robot:
    """Point robot driven by the motion controller.

    State
    -----
    x, y             : position (world units)
    orientation      : heading (rad), kept in (-pi, pi]
    velocity         : forward speed, never negative
    angular_velocity : turn-speed magnitude; the turn direction is picked
                       by the controller on every tick
    sensor_readings  : (relative_angle, length) per sensor ray

    Only the motion controller writes the pose and speeds, and only the
    sensor array writes ``sensor_readings``.
    """

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        orientation: float = 0.0,
        sensor_readings: Optional[List[SensorReading]] = None,
        trail_length: int = 600,
    ) -> None:
        """
        Args:
            x:               Initial x position.
            y:               Initial y position.
            orientation:     Initial heading (rad), wrapped into (-pi, pi].
            sensor_readings: Initial sensor fan readings.
            trail_length:    Number of past positions kept for drawing the trail.
        """
        self.x = x
        self.y = y
        self.orientation = wrap_to_pi(orientation)
        self.velocity = 0.0
        self.angular_velocity = 0.0
        self.sensor_readings: List[SensorReading] = list(sensor_readings or [])

        self.trail_length = trail_length
        self.trail_x: List[float] = [x]
        self.trail_y: List[float] = [y]

    @property
    def position(self) -> Point:
        return self.x, self.y

    def move_to(self, x: float, y: float) -> None:
        """Set the position and record it in the trail (cap length to avoid unbounded memory)."""
        self.x = x
        self.y = y
        self.trail_x.append(x)
        self.trail_y.append(y)
        if len(self.trail_x) > self.trail_length:
            self.trail_x = self.trail_x[-self.trail_length:]
            self.trail_y = self.trail_y[-self.trail_length:]

    def reset(self, x: float = 0.0, y: float = 0.0, orientation: float = 0.0) -> None:
        """Put the robot back at rest at the given pose and clear its trail."""
        self.x = x
        self.y = y
        self.orientation = wrap_to_pi(orientation)
        self.velocity = 0.0
        self.angular_velocity = 0.0
        self.trail_x = [x]
        self.trail_y = [y]

    def __repr__(self) -> str:
        return (
            f"Robot(x={self.x:.2f}, y={self.y:.2f}, orientation={self.orientation:+.3f}, "
            f"velocity={self.velocity:.2f}, angular_velocity={self.angular_velocity:.3f})"
        )
