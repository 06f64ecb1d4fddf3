"""
Unit tests for the two-phase motion controller.
"""
import math

import pytest

from config import SimConfig
from controller import MotionController, MotionState
from robot import Robot
from trajectory import TrajectoryQueue

DT = 1.0 / 60.0


@pytest.fixture
def controller():
    return MotionController(
        acceleration=150.0,
        max_velocity=200.0,
        angular_acceleration=math.pi / 4,
        max_angular_velocity=math.pi / 2,
    )


def run(controller, robot, trajectory, dt=DT, max_steps=20_000, on_tick=None):
    """Tick until the queue is consumed; returns the number of ticks."""
    steps = 0
    while trajectory and steps < max_steps:
        state = controller.update(robot, trajectory, dt)
        steps += 1
        if on_tick is not None:
            on_tick(state)
    assert not trajectory, "controller did not consume the trajectory"
    return steps


class TestConstruction:
    @pytest.mark.parametrize(
        "kwargs",
        [{"acceleration": 0.0}, {"angular_acceleration": 0.0}, {"acceleration": -5.0}],
    )
    def test_zero_or_negative_acceleration_is_rejected(self, kwargs):
        with pytest.raises(ValueError):
            MotionController(**kwargs)

    def test_from_config(self):
        controller = MotionController.from_config(SimConfig(max_velocity=42.0))
        assert controller.max_velocity == 42.0
        assert controller.state is MotionState.IDLE
        assert controller.bearing is None


class TestIdle:
    def test_empty_queue_holds_pose(self, controller):
        robot = Robot(x=1.0, y=2.0, orientation=0.5)
        trajectory = TrajectoryQueue()

        for _ in range(10):
            assert controller.update(robot, trajectory, DT) is MotionState.IDLE

        assert (robot.x, robot.y, robot.orientation) == (1.0, 2.0, 0.5)
        assert robot.velocity == 0.0
        assert robot.angular_velocity == 0.0

    def test_new_waypoint_starts_rotation(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue()
        controller.update(robot, trajectory, DT)

        trajectory.append((0.0, 100.0))

        assert controller.update(robot, trajectory, DT) is MotionState.ROTATING

    def test_queue_cleared_externally_returns_to_idle(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(0.0, 100.0)])
        controller.update(robot, trajectory, DT)

        trajectory.clear()

        assert controller.update(robot, trajectory, DT) is MotionState.IDLE
        assert controller.bearing is None


class TestRotation:
    def test_position_is_fixed_while_rotating(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(0.0, 100.0)])

        state = controller.update(robot, trajectory, DT)
        while state is MotionState.ROTATING:
            assert robot.position == (0.0, 0.0)
            assert robot.velocity == 0.0
            state = controller.update(robot, trajectory, DT)

        assert state is MotionState.TRANSLATING
        assert robot.orientation == math.pi / 2
        assert robot.angular_velocity == 0.0
        assert controller.bearing == math.pi / 2

    def test_aligned_target_switches_to_translation_in_one_tick(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(50.0, 0.0)])

        assert controller.update(robot, trajectory, DT) is MotionState.TRANSLATING
        assert robot.position == (0.0, 0.0)

    def test_turns_counter_clockwise_across_the_seam(self, controller):
        # Heading 3.0 rad, target bearing -3.0 rad: shortest turn crosses +pi
        robot = Robot(orientation=3.0)
        target = (100.0 * math.cos(-3.0), 100.0 * math.sin(-3.0))
        trajectory = TrajectoryQueue([target])

        controller.update(robot, trajectory, DT)
        assert robot.orientation > 3.0

        state = MotionState.ROTATING
        while state is MotionState.ROTATING:
            state = controller.update(robot, trajectory, DT)
            assert -math.pi < robot.orientation <= math.pi

        assert robot.orientation == pytest.approx(-3.0)

    def test_turns_clockwise_when_target_is_to_the_right(self, controller):
        robot = Robot(orientation=0.0)
        trajectory = TrajectoryQueue([(0.0, -100.0)])

        controller.update(robot, trajectory, DT)

        assert robot.orientation < 0.0

    @pytest.mark.parametrize(
        "orientation, target_angle, expected",
        [
            (0.0, 1.0, True),
            (1.0, 0.0, False),
            (3.0, -3.0, True),
            (-3.0, 3.0, False),
            (0.0, math.pi, True),       # exactly half a turn ahead
            (math.pi, 0.0, False),      # exactly half a turn behind
            (0.5, 0.5, False),
        ],
    )
    def test_turn_direction_tie_break(self, orientation, target_angle, expected):
        assert MotionController._turn_positive(orientation, target_angle) is expected

    def test_zero_dt_does_not_move(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(0.0, 100.0)])

        for _ in range(5):
            assert controller.update(robot, trajectory, 0.0) is MotionState.ROTATING

        assert robot.orientation == 0.0
        assert robot.angular_velocity == 0.0

    def test_angular_speed_never_exceeds_limit(self):
        controller = MotionController(angular_acceleration=10.0, max_angular_velocity=1.0)
        robot = Robot()
        trajectory = TrajectoryQueue([(-100.0, 1.0)])

        def check(_state):
            assert 0.0 <= robot.angular_velocity <= 1.0
            assert -math.pi < robot.orientation <= math.pi

        run(controller, robot, trajectory, on_tick=check)

    def test_bearing_straight_behind_with_negative_zero_y(self, controller):
        # atan2(-0.0, -100.0) is -pi; heading and bearing must still land on +pi
        robot = Robot()
        trajectory = TrajectoryQueue([(-100.0, -0.0)])
        bearings = []

        def check(state):
            assert -math.pi < robot.orientation <= math.pi
            if state is MotionState.TRANSLATING:
                bearings.append(controller.bearing)

        run(controller, robot, trajectory, on_tick=check)

        assert bearings and all(b == math.pi for b in bearings)
        assert robot.orientation == math.pi
        assert robot.position == (-100.0, 0.0)
        assert controller.bearing is None


class TestTranslation:
    def test_arrival_snaps_exactly_and_stops(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(0.01, 0.0)])

        assert controller.update(robot, trajectory, DT) is MotionState.TRANSLATING
        # One tick covers 150 / 60 / 60 ≈ 0.04 > 0.01
        assert controller.update(robot, trajectory, DT) is MotionState.IDLE

        assert robot.position == (0.01, 0.0)
        assert robot.velocity == 0.0
        assert trajectory.front() is None

    def test_speed_profile_is_bounded_and_reaches_cruise(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(1000.0, 0.0)])
        speeds = []

        def check(_state):
            assert 0.0 <= robot.velocity <= 200.0
            speeds.append(robot.velocity)

        run(controller, robot, trajectory, on_tick=check)

        assert max(speeds) == 200.0
        assert robot.position == (1000.0, 0.0)
        assert robot.velocity == 0.0

    def test_heading_is_held_during_translation(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(30.0, 40.0)])
        bearing = math.atan2(40.0, 30.0)

        def check(state):
            if state is MotionState.TRANSLATING:
                assert robot.orientation == bearing
                assert controller.bearing == bearing

        run(controller, robot, trajectory, on_tick=check)
        assert robot.position == (30.0, 40.0)

    def test_coincident_waypoint_is_consumed_immediately(self, controller):
        robot = Robot(x=5.0, y=5.0, orientation=1.0)
        trajectory = TrajectoryQueue([(5.0, 5.0)])

        assert controller.update(robot, trajectory, DT) is MotionState.IDLE

        assert trajectory.front() is None
        assert robot.orientation == 1.0
        assert robot.position == (5.0, 5.0)

    def test_coincident_waypoint_with_zero_dt(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(0.0, 0.0), (10.0, 0.0)])

        assert controller.update(robot, trajectory, 0.0) is MotionState.ROTATING
        assert trajectory.front() == (10.0, 0.0)


class TestWaypointSequence:
    def test_two_waypoints_end_at_the_last_one(self, controller):
        robot = Robot()
        a, b = (50.0, 0.0), (50.0, 80.0)
        trajectory = TrajectoryQueue([a, b])
        visited = []

        def record(_state):
            if robot.position in (a, b) and robot.position not in visited:
                visited.append(robot.position)

        run(controller, robot, trajectory, on_tick=record)

        assert visited == [a, b]
        assert robot.position == b
        assert controller.state is MotionState.IDLE
        assert len(trajectory) == 0

    def test_rotates_again_between_legs(self, controller):
        robot = Robot()
        trajectory = TrajectoryQueue([(20.0, 0.0), (20.0, 20.0)])
        states = []

        run(controller, robot, trajectory, on_tick=states.append)

        collapsed = [s for i, s in enumerate(states) if i == 0 or s is not states[i - 1]]
        assert collapsed == [
            MotionState.TRANSLATING,
            MotionState.ROTATING,
            MotionState.TRANSLATING,
            MotionState.IDLE,
        ]
