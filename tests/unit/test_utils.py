"""
Unit tests for the angle and geometry helpers.
"""
import math

import pytest

from utils import angle_to, distance, unit_vector, wrap_to_pi


class TestWrapToPi:
    """wrap_to_pi keeps angles in (-pi, pi]."""

    def test_in_range_values_are_returned_unchanged(self):
        for angle in (0.0, 1.0, -1.0, math.pi / 2, math.pi, -math.pi + 1e-12):
            assert wrap_to_pi(angle) == angle

    def test_minus_pi_maps_to_pi(self):
        assert wrap_to_pi(-math.pi) == math.pi

    def test_overflow_wraps_by_full_turn(self):
        assert wrap_to_pi(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
        assert wrap_to_pi(-3 * math.pi / 2) == pytest.approx(math.pi / 2)

    def test_multiple_turns(self):
        assert wrap_to_pi(4 * math.pi + 0.5) == pytest.approx(0.5)

    def test_result_always_in_half_open_range(self):
        for i in range(-200, 201):
            wrapped = wrap_to_pi(i * 0.1)
            assert -math.pi < wrapped <= math.pi


class TestGeometryHelpers:
    def test_distance(self):
        assert distance((0.0, 0.0), (3.0, 4.0)) == 5.0
        assert distance((1.0, 1.0), (1.0, 1.0)) == 0.0

    def test_angle_to_uses_four_quadrant_arctangent(self):
        assert angle_to((0.0, 0.0), (0.0, 100.0)) == math.pi / 2
        assert angle_to((0.0, 0.0), (-1.0, 0.0)) == math.pi
        assert angle_to((0.0, 0.0), (0.0, -1.0)) == -math.pi / 2

    def test_unit_vector(self):
        dx, dy = unit_vector(math.pi / 3)
        assert math.hypot(dx, dy) == pytest.approx(1.0)
        assert dx == pytest.approx(0.5)
