"""
Range sensor fan using ray casting against the static scene.
"""
import logging
import math
from typing import List, Tuple

import numpy as np

from config import SimConfig
from robot import Robot, SensorReading
from utils import unit_vector
from world import Scene

logger = logging.getLogger(__name__)


class SensorArray:
    """Fan of range sensors fixed to the robot body.

    Casts ``ray_count`` evenly spaced rays centred on the robot heading and
    records, for each ray, the distance to the nearest obstacle surface.
    A ray that hits nothing reports ``max_length``.

    Ray angle convention
    --------------------
    ray_angles[i] = (i / ray_count) * (2 * fov) - fov

    so ray_angles[0] = -fov and the last ray sits one step short of +fov.
    """

    def __init__(
        self,
        ray_count: int = 10,
        fov: float = math.pi / 4,
        max_length: float = 250.0,
    ) -> None:
        """
        Args:
            ray_count:  Number of rays in the fan.
            fov:        Half-angle of the fan in radians.
            max_length: Maximum sensing range; also the no-hit reading.
        """
        if ray_count < 1:
            raise ValueError(f"ray_count must be >= 1, got {ray_count}")
        if max_length < 0.0:
            raise ValueError(f"max_length must be >= 0, got {max_length}")

        self.ray_count = ray_count
        self.fov = fov
        self.max_length = max_length

        # Angular offsets of each ray relative to the robot heading
        self.ray_angles = np.arange(ray_count) / ray_count * (2.0 * fov) - fov

    @classmethod
    def from_config(cls, config: SimConfig) -> "SensorArray":
        return cls(
            ray_count=config.ray_count,
            fov=config.fov,
            max_length=config.sensor_max_length,
        )

    def initial_readings(self) -> List[SensorReading]:
        """Readings for a robot that has not sensed anything yet (all rays at max range)."""
        return [(float(a), self.max_length) for a in self.ray_angles]

    def cast(self, scene: Scene, x: float, y: float, orientation: float) -> List[SensorReading]:
        """Perform one sweep from the given pose without touching any robot state."""
        readings: List[SensorReading] = []
        for offset in self.ray_angles:
            angle = orientation + offset
            direction = unit_vector(angle)

            hit = scene.cast_ray((x, y), direction, self.max_length)
            if hit is None:
                length = self.max_length
            else:
                length = min(max(hit, 0.0), self.max_length)
            readings.append((float(offset), length))
        return readings

    def update(self, robot: Robot, scene: Scene) -> List[SensorReading]:
        """Recompute ``robot.sensor_readings`` from the robot's current pose.

        Only the readings are written; the pose is read as-is.
        """
        robot.sensor_readings = self.cast(scene, robot.x, robot.y, robot.orientation)
        if logger.isEnabledFor(logging.DEBUG):
            nearest = float(self.ranges(robot).min())
            logger.debug("Sensor sweep from (%.2f, %.2f): nearest %.2f", robot.x, robot.y, nearest)
        return robot.sensor_readings

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    @staticmethod
    def ranges(robot: Robot) -> np.ndarray:
        """Latest ray lengths as a float array (one entry per ray)."""
        return np.array([length for _, length in robot.sensor_readings], dtype=float)

    @staticmethod
    def endpoints(robot: Robot) -> List[Tuple[float, float]]:
        """World coordinates of each ray tip, as of the robot's current heading."""
        tips = []
        for offset, length in robot.sensor_readings:
            dx, dy = unit_vector(robot.orientation + offset)
            tips.append((robot.x + length * dx, robot.y + length * dy))
        return tips
