"""
Distance and projection utilities for orthogonal routing.

Provides:
- Manhattan distance: the lower bound on any orthogonal path length
- Euclidean distance: straight-line reference
- Routing efficiency: Manhattan / Euclidean ratio (>= 1, lower is better)
- Projection and collinearity helpers used by the interactive editors

The projection helpers guard against non-finite input so that a single
corrupt coordinate cannot poison cached paths or persisted metrics.
"""

from __future__ import annotations

import math

from .types import HandleInfo, Point


def manhattan_distance(p1: Point, p2: Point) -> float:
    """Sum of absolute coordinate differences."""
    return abs(p1.x - p2.x) + abs(p1.y - p2.y)


def handle_manhattan_distance(source: HandleInfo, target: HandleInfo) -> float:
    """Manhattan distance between two handle positions."""
    return manhattan_distance(source.position, target.position)


def euclidean_distance(p1: Point, p2: Point) -> float:
    """Straight-line distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def routing_efficiency(p1: Point, p2: Point) -> float:
    """
    Ratio of Manhattan to Euclidean distance.

    Returns 1 for coincident points. The ratio ranges from 1 (aligned on an
    axis) to sqrt(2) (exact diagonal).
    """
    euclid = euclidean_distance(p1, p2)
    if euclid == 0:
        return 1.0
    return manhattan_distance(p1, p2) / euclid


def midpoint(p1: Point, p2: Point) -> Point:
    """Point halfway between p1 and p2."""
    return Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


def project_point_onto_segment(
    point: Point,
    start: Point,
    end: Point,
) -> tuple[float, Point]:
    """
    Project a point onto the segment start-end.

    Args:
        point: Point to project
        start: Segment start
        end: Segment end

    Returns:
        (t, projected) where t in [0, 1] is the parameter along the segment.
        Non-finite input yields the neutral fallback (0.5, midpoint).
    """
    if not (point.is_finite() and start.is_finite() and end.is_finite()):
        return 0.5, _finite_midpoint(start, end)

    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return 0.0, start

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return t, Point(start.x + dx * t, start.y + dy * t)


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    """Euclidean distance from point to the closest point of a segment."""
    _, projected = project_point_onto_segment(point, start, end)
    return euclidean_distance(point, projected)


def perpendicular_distance(a: Point, b: Point, c: Point) -> float:
    """
    Distance of ``b`` from the infinite line through ``a`` and ``c``.

    Computed from the cross product of (b - a) and (c - a). When a and c
    coincide the line is undefined and the distance |ab| is returned.
    """
    base = euclidean_distance(a, c)
    if base == 0:
        return euclidean_distance(a, b)
    cross = (b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y)
    return abs(cross) / base


def are_collinear(a: Point, b: Point, c: Point, tolerance: float) -> bool:
    """True when b lies within ``tolerance`` of the line a-c."""
    return perpendicular_distance(a, b, c) <= tolerance


def _finite_midpoint(start: Point, end: Point) -> Point:
    """Midpoint with non-finite coordinates replaced by the finite partner (or 0)."""

    def _pick(a: float, b: float) -> float:
        if math.isfinite(a) and math.isfinite(b):
            return (a + b) / 2
        if math.isfinite(a):
            return a
        if math.isfinite(b):
            return b
        return 0.0

    return Point(_pick(start.x, end.x), _pick(start.y, end.y))


__all__ = [
    "manhattan_distance",
    "handle_manhattan_distance",
    "euclidean_distance",
    "routing_efficiency",
    "midpoint",
    "project_point_onto_segment",
    "distance_to_segment",
    "perpendicular_distance",
    "are_collinear",
]
