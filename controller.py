"""
Controller: two-phase (rotate, then translate) waypoint follower with
acceleration-limited, bang-bang speed profiles.

Tuning guide
------------
acceleration         : Forward acceleration and braking rate.  Higher → shorter
                       legs; the speed profile stays trapezoidal.
max_velocity         : Forward speed cap.  Long legs cruise at this speed.
angular_acceleration : Turn acceleration and braking rate.
max_angular_velocity : Turn speed cap.

Both phases use the same law: keep accelerating until the remaining
distance (or angle) is smaller than what is needed to stop at the current
speed, then brake at the same rate.  Arrival is an exact snap onto the
target once a tick would carry the robot at or past it.
"""
import enum
import logging
import math
from typing import Optional

from config import SimConfig
from robot import Robot
from trajectory import TrajectoryQueue
from utils import Point, angle_to, distance, unit_vector, wrap_to_pi

logger = logging.getLogger(__name__)


class MotionState(enum.Enum):
    IDLE = "idle"
    ROTATING = "rotating"
    TRANSLATING = "translating"


class MotionController:
    """Drives a robot through the waypoints of a trajectory queue.

    Pipeline (each timestep)
    ------------------------
    1. IDLE: pick up the queue front if there is one → ROTATING.
    2. ROTATING: turn on the spot toward the bearing of the target.  The
       position never changes in this phase.  On convergence the heading is
       snapped to the bearing, which is kept for the whole leg → TRANSLATING.
    3. TRANSLATING: drive along the fixed bearing.  On arrival the position
       is snapped onto the target and the queue front is popped
       → ROTATING (next waypoint) or IDLE.
    """

    def __init__(
        self,
        acceleration: float = 150.0,
        max_velocity: float = 200.0,
        angular_acceleration: float = math.pi / 4,
        max_angular_velocity: float = math.pi / 2,
    ) -> None:
        if acceleration <= 0.0:
            raise ValueError(f"acceleration must be > 0, got {acceleration}")
        if angular_acceleration <= 0.0:
            raise ValueError(f"angular_acceleration must be > 0, got {angular_acceleration}")

        self.acceleration = acceleration
        self.max_velocity = max_velocity
        self.angular_acceleration = angular_acceleration
        self.max_angular_velocity = max_angular_velocity

        self._state = MotionState.IDLE
        self._bearing: Optional[float] = None

    @classmethod
    def from_config(cls, config: SimConfig) -> "MotionController":
        return cls(
            acceleration=config.acceleration,
            max_velocity=config.max_velocity,
            angular_acceleration=config.angular_acceleration,
            max_angular_velocity=config.max_angular_velocity,
        )

    @property
    def state(self) -> MotionState:
        return self._state

    @property
    def bearing(self) -> Optional[float]:
        """Heading held during the current translation leg, None otherwise."""
        return self._bearing

    def reset(self) -> None:
        self._state = MotionState.IDLE
        self._bearing = None

    # ------------------------------------------------------------------
    # Main update
    # ------------------------------------------------------------------

    def update(self, robot: Robot, trajectory: TrajectoryQueue, dt: float) -> MotionState:
        """Advance the robot by one tick toward the front of ``trajectory``.

        Args:
            robot:      Robot whose pose and speeds are updated in place.
            trajectory: Waypoint queue; its front is popped on arrival.
            dt:         Elapsed time for this tick (s), >= 0.

        Returns:
            The controller state after the tick.
        """
        target = trajectory.front()
        if target is None:
            if self._state is not MotionState.IDLE:
                logger.info("Trajectory emptied mid-leg, stopping")
                robot.velocity = 0.0
                robot.angular_velocity = 0.0
                self.reset()
            return self._state

        if self._state is MotionState.IDLE:
            self._set_state(MotionState.ROTATING, target)

        # A waypoint on top of the robot needs neither turning nor driving
        if self._state is MotionState.ROTATING and target == robot.position:
            self._arrive(robot, trajectory, target)
            return self._state

        if self._state is MotionState.ROTATING:
            self._rotate(robot, target, dt)
        else:
            self._translate(robot, trajectory, target, dt)
        return self._state

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _rotate(self, robot: Robot, target: Point, dt: float) -> None:
        # atan2 yields -pi for a -0.0 dy; the bearing must stay in (-pi, pi]
        target_angle = wrap_to_pi(angle_to(robot.position, target))
        # Raw difference; the ±pi seam is handled when choosing the direction
        angle_delta = abs(target_angle - robot.orientation)
        breaking_angle = robot.angular_velocity ** 2 / (2.0 * self.angular_acceleration)

        if angle_delta < breaking_angle:
            robot.angular_velocity = max(
                robot.angular_velocity - self.angular_acceleration * dt, 0.0
            )
        else:
            robot.angular_velocity = min(
                robot.angular_velocity + self.angular_acceleration * dt,
                self.max_angular_velocity,
            )

        travelled_angle = robot.angular_velocity * dt

        if angle_delta > travelled_angle:
            if self._turn_positive(robot.orientation, target_angle):
                orientation = robot.orientation + travelled_angle
            else:
                orientation = robot.orientation - travelled_angle
            robot.orientation = wrap_to_pi(orientation)
            return

        robot.orientation = target_angle
        robot.angular_velocity = 0.0
        self._bearing = target_angle
        self._set_state(MotionState.TRANSLATING, target)

    def _translate(
        self, robot: Robot, trajectory: TrajectoryQueue, target: Point, dt: float
    ) -> None:
        remaining = distance(robot.position, target)
        stopping_distance = robot.velocity ** 2 / (2.0 * self.acceleration)

        if stopping_distance > remaining:
            robot.velocity = max(robot.velocity - self.acceleration * dt, 0.0)
        else:
            robot.velocity = min(robot.velocity + self.acceleration * dt, self.max_velocity)

        travelled_distance = robot.velocity * dt

        if remaining > travelled_distance:
            dx, dy = unit_vector(self._bearing)
            robot.move_to(robot.x + travelled_distance * dx, robot.y + travelled_distance * dy)
            return

        self._arrive(robot, trajectory, target)

    def _arrive(self, robot: Robot, trajectory: TrajectoryQueue, target: Point) -> None:
        """Snap onto the target, stop, consume it and pick up the next one."""
        robot.move_to(target[0], target[1])
        robot.velocity = 0.0
        trajectory.pop_front()
        self._bearing = None
        logger.info(
            "Reached waypoint (%.2f, %.2f), %d remaining", target[0], target[1], len(trajectory)
        )

        next_target = trajectory.front()
        if next_target is None:
            self._set_state(MotionState.IDLE)
        else:
            self._set_state(MotionState.ROTATING, next_target)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _turn_positive(orientation: float, target_angle: float) -> bool:
        """True when the shorter way from ``orientation`` to ``target_angle`` is counter-clockwise.

        Ties at exactly pi go counter-clockwise when the target is ahead
        numerically and clockwise when it is behind.
        """
        if orientation < target_angle:
            return target_angle - orientation <= math.pi
        if orientation > target_angle:
            return orientation - target_angle > math.pi
        return False

    def _set_state(self, state: MotionState, target: Optional[Point] = None) -> None:
        if state is self._state:
            return
        if target is None:
            logger.info("Motion %s -> %s", self._state.value, state.value)
        else:
            logger.info(
                "Motion %s -> %s (target (%.2f, %.2f))",
                self._state.value, state.value, target[0], target[1],
            )
        self._state = state
