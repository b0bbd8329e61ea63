"""
Waypoint management for orthogonal connectors.

Keeps a connector glued to its handles while the user drags a segment, and
prunes redundant corners afterwards. All operations work on the intermediate
control points of a connector; the source and target positions are fixed
and passed separately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..geometry import euclidean_distance, midpoint, perpendicular_distance
from ..types import AXIS_EPSILON, Direction, Point
from ..validation import validate_segment_index, validate_tolerance
from .segments import EdgeSegment, segment_direction

DEFAULT_CONNECTION_TOLERANCE = 5.0
DEFAULT_SIMPLIFY_TOLERANCE = 5.0

SOURCE = "source"
TARGET = "target"


@dataclass(frozen=True)
class ConnectionAnalysis:
    """Effect of a segment move on the connector's handles."""

    would_disconnect: bool
    affected_handles: list[str] = field(default_factory=list)
    required_bridge_segments: list[EdgeSegment] = field(default_factory=list)


@dataclass(frozen=True)
class WaypointInsertionResult:
    """
    Outcome of a segment move that may need bridge waypoints.

    When ``requires_insertion`` is False, ``new_control_points`` is the very
    list the caller passed in.
    """

    requires_insertion: bool
    inserted_waypoints: list[Point]
    new_control_points: Sequence[Point]
    modified_segments: list[str] = field(default_factory=list)


def _translated_segment(start: Point, end: Point, new_midpoint: Point) -> tuple[Point, Point]:
    """Move a segment so its midpoint tracks ``new_midpoint`` across its own axis."""
    center = midpoint(start, end)
    if segment_direction(start, end) is Direction.HORIZONTAL:
        dx, dy = 0.0, new_midpoint.y - center.y
    else:
        dx, dy = new_midpoint.x - center.x, 0.0
    return start.offset(dx, dy), end.offset(dx, dy)


def _is_axis_aligned(a: Point, b: Point) -> bool:
    return abs(a.x - b.x) <= AXIS_EPSILON or abs(a.y - b.y) <= AXIS_EPSILON


def _turns_back(a: Point, b: Point, c: Point) -> bool:
    """True if a -> b -> c reverses direction at b."""
    return (b.x - a.x) * (c.x - b.x) + (b.y - a.y) * (c.y - b.y) < 0


class OrthogonalWaypointManager:
    """
    Inserts and removes waypoints so connectors stay orthogonal.

    Args:
        connection_tolerance: How far a moved terminal segment may drift from
            its handle before the handle counts as disconnected.

    Example:
        manager = OrthogonalWaypointManager()
        result = manager.insert_preservation_waypoints(
            2, Point(150, 50), control_points, source, target
        )
        points = manager.cleanup_waypoints(result.new_control_points, source, target)
    """

    def __init__(self, *, connection_tolerance: float = DEFAULT_CONNECTION_TOLERANCE) -> None:
        self._connection_tolerance = validate_tolerance(connection_tolerance)

    @property
    def connection_tolerance(self) -> float:
        return self._connection_tolerance

    # -------------------------------------------------------------------------
    # Drag analysis and bridge insertion
    # -------------------------------------------------------------------------

    def analyze_connection_impact(
        self,
        segment_index: int,
        new_midpoint: Point,
        control_points: Sequence[Point],
        source: Point,
        target: Point,
    ) -> ConnectionAnalysis:
        """
        Check whether moving a segment would detach it from a handle.

        The segment is translated perpendicular to its own direction so that
        its midpoint follows ``new_midpoint``. Only the first segment can
        detach from the source and only the last from the target; either one
        detaches once its moved end lies farther than the connection
        tolerance from the handle.
        """
        points = [source, *control_points, target]
        last = len(points) - 2
        index = validate_segment_index(segment_index, last + 1)
        moved_start, moved_end = _translated_segment(points[index], points[index + 1], new_midpoint)

        affected: list[str] = []
        bridges: list[EdgeSegment] = []
        tol = self._connection_tolerance

        if index == 0 and euclidean_distance(moved_start, source) > tol:
            affected.append(SOURCE)
            bridges.append(EdgeSegment.from_points(f"bridge-source-{index}", source, moved_start))
        if index == last and euclidean_distance(moved_end, target) > tol:
            affected.append(TARGET)
            bridges.append(EdgeSegment.from_points(f"bridge-target-{index}", moved_end, target))

        return ConnectionAnalysis(
            would_disconnect=bool(affected),
            affected_handles=affected,
            required_bridge_segments=bridges,
        )

    def insert_preservation_waypoints(
        self,
        segment_index: int,
        new_midpoint: Point,
        control_points: Sequence[Point],
        source: Point,
        target: Point,
    ) -> WaypointInsertionResult:
        """
        Apply a segment move that would detach a handle, bridging the gap.

        The moved segment's end at a detached handle is kept as an extra
        waypoint, so the connector leaves the handle along the old axis and
        turns onto the moved segment. Interior ends of the segment slide along
        their neighbouring segments. Every consecutive pair of points stays
        axis-aligned as long as the input path was.

        Returns:
            WaypointInsertionResult; the input list itself when no handle
            would detach.
        """
        analysis = self.analyze_connection_impact(
            segment_index, new_midpoint, control_points, source, target
        )
        if not analysis.would_disconnect:
            return WaypointInsertionResult(
                requires_insertion=False,
                inserted_waypoints=[],
                new_control_points=control_points,
            )

        points = [source, *control_points, target]
        last = len(points) - 2
        index = validate_segment_index(segment_index, last + 1)
        moved_start, moved_end = _translated_segment(points[index], points[index + 1], new_midpoint)

        inserted: list[Point] = []
        modified: list[str] = []

        head = points[: index + 1]
        if SOURCE in analysis.affected_handles:
            head.append(moved_start)
            inserted.append(moved_start)
            modified.extend([f"segment-{index}", f"segment-{index + 1}"])
        elif index > 0:
            head[-1] = moved_start

        tail = points[index + 1 :]
        if TARGET in analysis.affected_handles:
            tail.insert(0, moved_end)
            inserted.append(moved_end)
            modified.extend([f"segment-{index}", f"segment-{index + 1}"])
        elif index < last:
            tail[0] = moved_end

        updated = head + tail
        return WaypointInsertionResult(
            requires_insertion=True,
            inserted_waypoints=inserted,
            new_control_points=updated[1:-1],
            modified_segments=list(dict.fromkeys(modified)),
        )

    # -------------------------------------------------------------------------
    # Simplification
    # -------------------------------------------------------------------------

    def can_merge_waypoints(
        self,
        a: Point,
        b: Point,
        c: Point,
        tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE,
    ) -> bool:
        """True when ``b`` lies within ``tolerance`` of the line a-c."""
        return perpendicular_distance(a, b, c) <= tolerance

    def simplify_waypoints(
        self,
        points: Sequence[Point],
        tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE,
    ) -> list[Point]:
        """
        Drop points that sit on the straight run between their neighbours.

        Each interior point is tested against its neighbours in the input.
        The first and last points always survive, and so does a point where
        the run doubles back on itself.
        """
        tolerance = validate_tolerance(tolerance)
        if len(points) <= 2:
            return list(points)

        simplified = [points[0]]
        for a, b, c in zip(points, points[1:], points[2:]):
            if self.can_merge_waypoints(a, b, c, tolerance) and not _turns_back(a, b, c):
                continue
            simplified.append(b)
        simplified.append(points[-1])
        return simplified

    def cleanup_waypoints(
        self,
        control_points: Sequence[Point],
        source: Point,
        target: Point,
        tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE,
    ) -> list[Point]:
        """
        Simplify control points against the full connector.

        A point is dropped only when it is redundant and the corner kept
        before it still meets the next point on a horizontal or vertical line.
        """
        tolerance = validate_tolerance(tolerance)
        points = [source, *control_points, target]
        kept = [source]
        for i in range(1, len(points) - 1):
            prev, current, following = kept[-1], points[i], points[i + 1]
            redundant = (
                self.can_merge_waypoints(prev, current, following, tolerance)
                and not _turns_back(prev, current, following)
            )
            if redundant and _is_axis_aligned(prev, following):
                continue
            kept.append(current)
        return kept[1:]


__all__ = [
    "DEFAULT_CONNECTION_TOLERANCE",
    "DEFAULT_SIMPLIFY_TOLERANCE",
    "ConnectionAnalysis",
    "WaypointInsertionResult",
    "OrthogonalWaypointManager",
]
