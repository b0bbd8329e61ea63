"""
Orthogonality checks and drag constraints for connector editing.

Provides:
- Path validation: which segments are not axis-aligned, and how to fix them
- Path enforcement: insert an L-bend wherever a segment runs diagonally
- Movement constraints for segment drags (axis lock, grid, distance limits)
- Intersection checks for a proposed segment move
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from ..geometry import euclidean_distance
from ..types import Direction, Point
from .segments import EdgeSegment

ORTHOGONAL_TOLERANCE = 2.0
GRID_SIZE = 20.0
MIN_SEGMENT_LENGTH = 40.0
MAX_DRAG_DISTANCE = 500.0


class DragAxis(Enum):
    """Axis a dragged segment may move along."""

    X = "x"
    Y = "y"
    BOTH = "both"
    NONE = "none"


@dataclass(frozen=True)
class MovementConstraint:
    axis: DragAxis = DragAxis.BOTH
    snap_to_grid: bool = False
    min_distance: Optional[float] = None
    max_distance: Optional[float] = None


@dataclass(frozen=True)
class ConstraintValidationResult:
    is_valid: bool
    adjusted_position: Point
    violated_constraints: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SegmentCorrection:
    """Corner that would make a diagonal segment orthogonal."""

    segment_id: str
    suggested_fix: Point


@dataclass(frozen=True)
class OrthogonalValidation:
    is_orthogonal: bool
    non_orthogonal_segments: list[str] = field(default_factory=list)
    corrections: list[SegmentCorrection] = field(default_factory=list)


def is_orthogonal_segment(start: Point, end: Point, tolerance: float = ORTHOGONAL_TOLERANCE) -> bool:
    """True if the segment stays within ``tolerance`` of one axis."""
    return abs(end.x - start.x) <= tolerance or abs(end.y - start.y) <= tolerance


def orthogonal_corner(start: Point, end: Point) -> Point:
    """Corner of the L that replaces a diagonal, turning on its longer axis first."""
    if abs(end.x - start.x) > abs(end.y - start.y):
        return Point(end.x, start.y)
    return Point(start.x, end.y)


def validate_orthogonal_path(
    control_points: Sequence[Point],
    source: Point,
    target: Point,
    tolerance: float = ORTHOGONAL_TOLERANCE,
) -> OrthogonalValidation:
    """Report every segment of the connector that is not axis-aligned."""
    points = [source, *control_points, target]
    bad: list[str] = []
    corrections: list[SegmentCorrection] = []

    for i, (start, end) in enumerate(zip(points, points[1:])):
        if is_orthogonal_segment(start, end, tolerance):
            continue
        segment_id = f"segment-{i}"
        bad.append(segment_id)
        corrections.append(SegmentCorrection(segment_id, orthogonal_corner(start, end)))

    return OrthogonalValidation(
        is_orthogonal=not bad,
        non_orthogonal_segments=bad,
        corrections=corrections,
    )


def _straight_through(a: Point, b: Point, c: Point) -> bool:
    if a.y == b.y == c.y:
        return (b.x - a.x) * (c.x - b.x) >= 0
    if a.x == b.x == c.x:
        return (b.y - a.y) * (c.y - b.y) >= 0
    return False


def enforce_orthogonal_path(
    control_points: Sequence[Point],
    source: Point,
    target: Point,
    tolerance: float = ORTHOGONAL_TOLERANCE,
) -> list[Point]:
    """
    Make every segment of the connector axis-aligned.

    Each diagonal segment gets an L-bend at ``orthogonal_corner``. Duplicate
    points and points in the middle of a straight run are dropped afterwards.
    The source and target are never moved.

    Returns:
        The corrected intermediate control points.
    """
    points = [source, *control_points, target]
    bent = [points[0]]
    for start, end in zip(points, points[1:]):
        if not is_orthogonal_segment(start, end, tolerance):
            bent.append(orthogonal_corner(start, end))
        bent.append(end)

    deduped = [bent[0]]
    for p in bent[1:]:
        if p != deduped[-1]:
            deduped.append(p)

    if len(deduped) < 2:
        return []

    result = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        if _straight_through(result[-1], deduped[i], deduped[i + 1]):
            continue
        result.append(deduped[i])
    result.append(deduped[-1])
    return result[1:-1]


# ---------------------------------------------------------------------------
# Drag constraints
# ---------------------------------------------------------------------------


def _snap(point: Point, grid_size: float) -> Point:
    return Point(
        round(point.x / grid_size) * grid_size,
        round(point.y / grid_size) * grid_size,
    )


def apply_movement_constraints(
    original: Point,
    proposed: Point,
    segment: EdgeSegment,
    constraint: MovementConstraint,
    grid_size: float = GRID_SIZE,
) -> ConstraintValidationResult:
    """
    Restrict a proposed segment midpoint.

    Unless the constraint allows both axes, a horizontal segment keeps its x
    and a vertical segment keeps its y. Both coordinates are then snapped to the
    grid if requested, and a move longer than ``max_distance`` is shortened
    along its own direction. A move shorter than ``min_distance`` is reported
    but not changed.
    """
    x, y = proposed.x, proposed.y
    violated: list[str] = []
    suggestions: list[str] = []

    if constraint.axis is DragAxis.NONE:
        x, y = original.x, original.y
        if proposed != original:
            violated.append("segment-locked")
            suggestions.append("This segment cannot be moved")
    elif constraint.axis is not DragAxis.BOTH:
        if segment.direction is Direction.HORIZONTAL:
            x = original.x
            if proposed.x != original.x:
                violated.append("horizontal-segment-x-movement")
                suggestions.append("Horizontal segments can only move up or down")
        else:
            y = original.y
            if proposed.y != original.y:
                violated.append("vertical-segment-y-movement")
                suggestions.append("Vertical segments can only move left or right")

    adjusted = Point(x, y)
    if constraint.snap_to_grid:
        adjusted = _snap(adjusted, grid_size)

    if constraint.min_distance is not None:
        if euclidean_distance(original, adjusted) < constraint.min_distance:
            violated.append("minimum-distance")
            suggestions.append(f"Movement must be at least {constraint.min_distance:g}px")

    if constraint.max_distance is not None:
        distance = euclidean_distance(original, adjusted)
        if distance > constraint.max_distance:
            scale = constraint.max_distance / distance
            adjusted = Point(
                original.x + (adjusted.x - original.x) * scale,
                original.y + (adjusted.y - original.y) * scale,
            )
            violated.append("maximum-distance")
            suggestions.append(f"Movement limited to {constraint.max_distance:g}px")

    return ConstraintValidationResult(
        is_valid=not violated,
        adjusted_position=adjusted,
        violated_constraints=violated,
        suggestions=suggestions,
    )


def calculate_segment_constraints(segment: EdgeSegment) -> MovementConstraint:
    """Default drag constraint: free axis only, on the grid, bounded distance."""
    axis = DragAxis.Y if segment.direction is Direction.HORIZONTAL else DragAxis.X
    return MovementConstraint(
        axis=axis,
        snap_to_grid=True,
        min_distance=MIN_SEGMENT_LENGTH / 4,
        max_distance=MAX_DRAG_DISTANCE,
    )


def validate_segment_movement(
    segment_id: str,
    new_midpoint: Point,
    segments: Sequence[EdgeSegment],
) -> ConstraintValidationResult:
    """Apply the default constraint of the segment named ``segment_id``."""
    segment = next((s for s in segments if s.id == segment_id), None)
    if segment is None:
        return ConstraintValidationResult(
            is_valid=False,
            adjusted_position=new_midpoint,
            violated_constraints=["segment-not-found"],
            suggestions=[f"Unknown segment {segment_id!r}"],
        )
    return apply_movement_constraints(
        segment.midpoint, new_midpoint, segment, calculate_segment_constraints(segment)
    )


def _orientation(p: Point, q: Point, r: Point) -> int:
    value = (q.y - p.y) * (r.x - q.x) - (q.x - p.x) * (r.y - q.y)
    if value == 0:
        return 0
    return 1 if value > 0 else 2


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    return min(p.x, r.x) <= q.x <= max(p.x, r.x) and min(p.y, r.y) <= q.y <= max(p.y, r.y)


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    """True if segment p1-q1 touches or crosses segment p2-q2."""
    o1 = _orientation(p1, q1, p2)
    o2 = _orientation(p1, q1, q2)
    o3 = _orientation(p2, q2, p1)
    o4 = _orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    return (
        (o1 == 0 and _on_segment(p1, p2, q1))
        or (o2 == 0 and _on_segment(p1, q2, q1))
        or (o3 == 0 and _on_segment(p2, p1, q2))
        or (o4 == 0 and _on_segment(p2, q1, q2))
    )


def check_path_intersections(
    segment_id: str,
    new_midpoint: Point,
    segments: Sequence[EdgeSegment],
) -> list[str]:
    """
    Ids of segments the moved segment would touch.

    The dragged segment's direct neighbours are skipped: they stretch to
    follow it and always share an end point with it.
    """
    position = next((i for i, s in enumerate(segments) if s.id == segment_id), None)
    if position is None:
        return []

    segment = segments[position]
    dx = new_midpoint.x - segment.midpoint.x
    dy = new_midpoint.y - segment.midpoint.y
    start, end = segment.start.offset(dx, dy), segment.end.offset(dx, dy)

    hits: list[str] = []
    for i, other in enumerate(segments):
        if abs(i - position) <= 1:
            continue
        if segments_intersect(start, end, other.start, other.end):
            hits.append(other.id)
    return hits


__all__ = [
    "ORTHOGONAL_TOLERANCE",
    "DragAxis",
    "MovementConstraint",
    "ConstraintValidationResult",
    "SegmentCorrection",
    "OrthogonalValidation",
    "is_orthogonal_segment",
    "orthogonal_corner",
    "validate_orthogonal_path",
    "enforce_orthogonal_path",
    "apply_movement_constraints",
    "calculate_segment_constraints",
    "validate_segment_movement",
    "segments_intersect",
    "check_path_intersections",
]
