"""Tests for distance and projection utilities."""

from __future__ import annotations

import math

import pytest

from connector_routing.geometry import (
    are_collinear,
    distance_to_segment,
    euclidean_distance,
    handle_manhattan_distance,
    manhattan_distance,
    midpoint,
    perpendicular_distance,
    project_point_onto_segment,
    routing_efficiency,
)
from connector_routing.types import HandleInfo, HandleType, Point, Side

# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------


class TestDistances:
    def test_numeric_example(self) -> None:
        a, b = Point(0, 0), Point(3, 4)
        assert manhattan_distance(a, b) == 7
        assert euclidean_distance(a, b) == 5
        assert routing_efficiency(a, b) == pytest.approx(1.4)

    def test_manhattan_is_symmetric(self) -> None:
        a, b = Point(-12.5, 40), Point(33, -7)
        assert manhattan_distance(a, b) == manhattan_distance(b, a)

    def test_efficiency_is_symmetric(self) -> None:
        a, b = Point(10, 20), Point(130, 75)
        assert routing_efficiency(a, b) == routing_efficiency(b, a)

    def test_efficiency_of_coincident_points_is_one(self) -> None:
        p = Point(42, 17)
        assert routing_efficiency(p, p) == 1.0

    def test_efficiency_on_axis_is_one(self) -> None:
        assert routing_efficiency(Point(0, 0), Point(100, 0)) == pytest.approx(1.0)

    def test_efficiency_on_diagonal_is_sqrt2(self) -> None:
        assert routing_efficiency(Point(0, 0), Point(50, 50)) == pytest.approx(math.sqrt(2))

    def test_handle_manhattan_distance(self) -> None:
        h1 = HandleInfo("h1", "a", Point(100, 30), Side.RIGHT, HandleType.SOURCE)
        h2 = HandleInfo("h2", "b", Point(200, 30), Side.LEFT, HandleType.TARGET)
        assert handle_manhattan_distance(h1, h2) == 100

    def test_midpoint(self) -> None:
        assert midpoint(Point(0, 0), Point(10, 20)) == Point(5, 10)


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


class TestProjection:
    def test_projects_onto_interior(self) -> None:
        t, p = project_point_onto_segment(Point(5, 5), Point(0, 0), Point(10, 0))
        assert t == pytest.approx(0.5)
        assert p == Point(5, 0)

    def test_clamps_past_end(self) -> None:
        t, p = project_point_onto_segment(Point(20, 3), Point(0, 0), Point(10, 0))
        assert t == 1.0
        assert p == Point(10, 0)

    def test_clamps_before_start(self) -> None:
        t, p = project_point_onto_segment(Point(-20, 3), Point(0, 0), Point(10, 0))
        assert t == 0.0
        assert p == Point(0, 0)

    def test_zero_length_segment(self) -> None:
        t, p = project_point_onto_segment(Point(3, 4), Point(1, 1), Point(1, 1))
        assert t == 0.0
        assert p == Point(1, 1)

    def test_nan_point_falls_back_to_midpoint(self) -> None:
        t, p = project_point_onto_segment(Point(math.nan, 0), Point(0, 0), Point(10, 0))
        assert t == 0.5
        assert p == Point(5, 0)

    def test_infinite_endpoint_never_leaks(self) -> None:
        t, p = project_point_onto_segment(Point(1, 1), Point(math.inf, 0), Point(10, 0))
        assert t == 0.5
        assert p.is_finite()
        assert p == Point(10, 0)

    def test_distance_to_segment(self) -> None:
        assert distance_to_segment(Point(5, 5), Point(0, 0), Point(10, 0)) == pytest.approx(5)


# ---------------------------------------------------------------------------
# Collinearity
# ---------------------------------------------------------------------------


class TestCollinearity:
    def test_perpendicular_distance(self) -> None:
        d = perpendicular_distance(Point(0, 0), Point(5, 3), Point(10, 0))
        assert d == pytest.approx(3)

    def test_perpendicular_distance_degenerate_line(self) -> None:
        d = perpendicular_distance(Point(0, 0), Point(3, 4), Point(0, 0))
        assert d == pytest.approx(5)

    def test_collinear_within_tolerance(self) -> None:
        assert are_collinear(Point(0, 0), Point(50, 2), Point(100, 0), tolerance=5)

    def test_not_collinear_beyond_tolerance(self) -> None:
        assert not are_collinear(Point(0, 0), Point(50, 20), Point(100, 0), tolerance=5)
