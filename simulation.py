"""
Simulation: owns the robot, its waypoint queue, the sensor fan, and the
controller, and advances them one tick at a time.
"""
import logging
from typing import Optional

from config import SimConfig
from controller import MotionController, MotionState
from robot import Robot
from sensors import SensorArray
from trajectory import TrajectoryQueue
from utils import Point
from world import Scene

logger = logging.getLogger(__name__)


class Simulation:
    """Single-threaded tick driver.

    Each ``step`` runs the sensor sweep first and the controller second, so
    readings always describe the pose left by the previous tick.
    """

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        scene: Optional[Scene] = None,
        spawn: Point = (0.0, 0.0),
        spawn_orientation: float = 0.0,
    ) -> None:
        self.config = config if config is not None else SimConfig()
        self.scene = scene if scene is not None else Scene.default()
        self.spawn = spawn
        self.spawn_orientation = spawn_orientation

        self.sensors = SensorArray.from_config(self.config)
        self.controller = MotionController.from_config(self.config)
        self.trajectory = TrajectoryQueue()
        self.robot = Robot(
            x=spawn[0],
            y=spawn[1],
            orientation=spawn_orientation,
            sensor_readings=self.sensors.initial_readings(),
            trail_length=self.config.trail_length,
        )

        self.tick = 0
        self.time = 0.0

    @property
    def state(self) -> MotionState:
        return self.controller.state

    @property
    def is_idle(self) -> bool:
        return self.controller.state is MotionState.IDLE and not self.trajectory

    def add_waypoint(self, point: Point) -> None:
        """Queue a new target for the robot."""
        self.trajectory.append(point)
        logger.debug("Waypoint (%.2f, %.2f) queued (%d pending)", point[0], point[1], len(self.trajectory))

    def step(self, dt: Optional[float] = None) -> MotionState:
        """Advance the simulation by one tick.

        Args:
            dt: Tick duration (s); defaults to ``config.dt``.  Must be >= 0.

        Returns:
            Controller state after the tick.
        """
        if dt is None:
            dt = self.config.dt
        if dt < 0.0:
            raise ValueError(f"dt must be >= 0, got {dt}")

        # 1. Sense (pose from the end of the previous tick)
        self.sensors.update(self.robot, self.scene)

        # 2. Act
        state = self.controller.update(self.robot, self.trajectory, dt)

        self.tick += 1
        self.time += dt
        return state

    def run_until_idle(self, dt: Optional[float] = None, max_steps: int = 100_000) -> int:
        """Step until every queued waypoint is consumed.

        Returns:
            Number of ticks taken.  Stops early after ``max_steps`` ticks and
            logs a warning if the queue is still not empty.
        """
        steps = 0
        while not self.is_idle and steps < max_steps:
            self.step(dt)
            steps += 1
        if not self.is_idle:
            logger.warning(
                "Stopped after %d steps with %d waypoint(s) pending", steps, len(self.trajectory)
            )
        return steps

    def reset(self) -> None:
        """Clear the queue and put the robot back at its spawn pose."""
        self.trajectory.clear()
        self.controller.reset()
        self.robot.reset(self.spawn[0], self.spawn[1], self.spawn_orientation)
        self.robot.sensor_readings = self.sensors.initial_readings()
        self.tick = 0
        self.time = 0.0
        logger.info("Simulation reset")
