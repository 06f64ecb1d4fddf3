"""
Utility functions for the robot motion testbed.
"""
import math
from typing import Tuple

Point = Tuple[float, float]

TWO_PI = 2.0 * math.pi


def wrap_to_pi(angle: float) -> float:
    """Wrap an angle to the half-open range (-pi, pi].

    Angles already inside the range are returned untouched so that exact
    values (e.g. a snapped bearing) survive repeated normalisation.

    Args:
        angle: Angle in radians (any value).

    Returns:
        Equivalent angle in (-pi, pi].
    """
    if -math.pi < angle <= math.pi:
        return angle
    wrapped = (angle + math.pi) % TWO_PI - math.pi
    # The modulo lands on [-pi, pi); -pi belongs to the other end of the range
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two 2D points."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def angle_to(p1: Point, p2: Point) -> float:
    """Bearing angle (radians) from point p1 to point p2."""
    return math.atan2(p2[1] - p1[1], p2[0] - p1[0])


def unit_vector(angle: float) -> Point:
    """Unit direction vector for a heading angle."""
    return math.cos(angle), math.sin(angle)
