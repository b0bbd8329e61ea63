"""Orthogonal path generation.

Provides the segment generators used by the routing engine:
- Plain one- or two-segment paths for both canonical orderings
  (horizontal-first and vertical-first)
- Perpendicular-approach paths that leave and enter handles at a right
  angle to the node side
- Self-loops that bulge out of a node, shaped by a 16-entry side table

Every generator returns segments that are strictly horizontal or vertical.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..geometry import euclidean_distance, manhattan_distance
from ..types import (
    AXIS_EPSILON,
    ControlPoint,
    Direction,
    HandleInfo,
    NodeBounds,
    OrthogonalPath,
    PathSegment,
    Point,
    RoutingType,
    Side,
)

# Pixel tolerance under which near-equal coordinates are snapped together.
# Routing and waypoint simplification share it so that a drag smaller than
# the tolerance never introduces a new bend on recalculation.
ORTHOGONAL_ALIGNMENT_TOLERANCE = 6.0

# Segments shorter than this are dropped instead of emitted.
SEGMENT_EPSILON = 0.1

DEFAULT_APPROACH_DISTANCE = 30.0
APPROACH_RATIO = 0.2
MIN_APPROACH_DISTANCE = 20.0
MAX_APPROACH_DISTANCE = 80.0

SELF_LOOP_RATIO = 1.1
MIN_SELF_LOOP_EXTENSION = 60.0
MAX_SELF_LOOP_EXTENSION = 250.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def apply_alignment_tolerance(
    start: Point,
    end: Point,
    tolerance: float = ORTHOGONAL_ALIGNMENT_TOLERANCE,
) -> tuple[Point, Point]:
    """Snap nearly-equal coordinates of two points to their average.

    If ``|dy| <= tolerance`` both y-coordinates become their mean, and the
    same for x. This keeps a near-pixel-perfect drag from producing a
    visually spurious micro-bend.
    """
    sx, sy = start.x, start.y
    ex, ey = end.x, end.y

    if abs(sy - ey) <= tolerance:
        aligned_y = (sy + ey) / 2
        sy = ey = aligned_y

    if abs(sx - ex) <= tolerance:
        aligned_x = (sx + ex) / 2
        sx = ex = aligned_x

    return Point(sx, sy), Point(ex, ey)


# ---------------------------------------------------------------------------
# Canonical one/two segment paths
# ---------------------------------------------------------------------------


def generate_horizontal_first_path(start: Point, end: Point) -> list[PathSegment]:
    """Segments going horizontally first, turning at (end.x, start.y)."""
    if start == end:
        return []

    if start.y == end.y:
        return [PathSegment(start, end, Direction.HORIZONTAL)]

    if start.x == end.x:
        return [PathSegment(start, end, Direction.VERTICAL)]

    corner = Point(end.x, start.y)
    return [
        PathSegment(start, corner, Direction.HORIZONTAL),
        PathSegment(corner, end, Direction.VERTICAL),
    ]


def generate_vertical_first_path(start: Point, end: Point) -> list[PathSegment]:
    """Segments going vertically first, turning at (start.x, end.y)."""
    if start == end:
        return []

    if start.x == end.x:
        return [PathSegment(start, end, Direction.VERTICAL)]

    if start.y == end.y:
        return [PathSegment(start, end, Direction.HORIZONTAL)]

    corner = Point(start.x, end.y)
    return [
        PathSegment(start, corner, Direction.VERTICAL),
        PathSegment(corner, end, Direction.HORIZONTAL),
    ]


def generate_path(start: Point, end: Point, routing_type: RoutingType) -> list[PathSegment]:
    """Dispatch to the generator for ``routing_type``."""
    if routing_type is RoutingType.HORIZONTAL_FIRST:
        return generate_horizontal_first_path(start, end)
    return generate_vertical_first_path(start, end)


def calculate_path_length(segments: Sequence[PathSegment]) -> float:
    """Total length of a segment list."""
    return sum(segment.length for segment in segments)


def generate_control_points(segments: Sequence[PathSegment]) -> list[ControlPoint]:
    """Corner sequence of a segment list, including both endpoints."""
    if not segments:
        return []

    control_points = [ControlPoint(segments[0].start.x, segments[0].start.y)]
    for segment in segments:
        control_points.append(ControlPoint(segment.end.x, segment.end.y))
    return control_points


def _path_efficiency(total_length: float, start: Point, end: Point) -> float:
    euclid = euclidean_distance(start, end)
    if euclid == 0:
        return 1.0
    return total_length / euclid


def build_orthogonal_path(
    start: Point,
    end: Point,
    routing_type: RoutingType,
    tolerance: float = ORTHOGONAL_ALIGNMENT_TOLERANCE,
) -> OrthogonalPath:
    """Build a complete one/two segment path between two points."""
    start, end = apply_alignment_tolerance(start, end, tolerance)
    segments = generate_path(start, end, routing_type)
    total_length = calculate_path_length(segments)

    if segments:
        control_points = generate_control_points(segments)
    else:
        # Zero-length edge still renders a handle marker
        control_points = [ControlPoint(start.x, start.y)]

    return OrthogonalPath(
        segments=tuple(segments),
        total_length=total_length,
        routing_type=routing_type,
        efficiency=_path_efficiency(total_length, start, end),
        control_points=tuple(control_points),
    )


def create_orthogonal_path(
    source_handle: HandleInfo,
    target_handle: HandleInfo,
    routing_type: RoutingType,
) -> OrthogonalPath:
    """Build the path between two handles for one canonical ordering."""
    return build_orthogonal_path(source_handle.position, target_handle.position, routing_type)


def compare_orthogonal_paths(
    horizontal_first: OrthogonalPath,
    vertical_first: OrthogonalPath,
) -> OrthogonalPath:
    """Return the shorter path; horizontal-first wins an exact tie."""
    if vertical_first.total_length < horizontal_first.total_length:
        return vertical_first
    return horizontal_first


# ---------------------------------------------------------------------------
# Polyline helpers shared by the padded generators
# ---------------------------------------------------------------------------


def _same_axis(a: Point, b: Point, c: Point) -> Optional[Direction]:
    if abs(a.y - b.y) <= AXIS_EPSILON and abs(b.y - c.y) <= AXIS_EPSILON:
        return Direction.HORIZONTAL
    if abs(a.x - b.x) <= AXIS_EPSILON and abs(b.x - c.x) <= AXIS_EPSILON:
        return Direction.VERTICAL
    return None


def _continues_straight(a: Point, b: Point, c: Point) -> bool:
    axis = _same_axis(a, b, c)
    if axis is Direction.HORIZONTAL:
        return (b.x - a.x) * (c.x - b.x) > 0
    if axis is Direction.VERTICAL:
        return (b.y - a.y) * (c.y - b.y) > 0
    return False


def _has_reversal(points: Sequence[Point]) -> bool:
    """True if the polyline doubles back on itself anywhere."""
    for a, b, c in zip(points, points[1:], points[2:]):
        if _same_axis(a, b, c) is not None and not _continues_straight(a, b, c):
            return True
    return False


def _clean_polyline(points: Sequence[Point]) -> list[Point]:
    """Drop sub-epsilon segments and merge straight runs.

    The first and last points are always kept.
    """
    deduped = [points[0]]
    for p in points[1:]:
        if manhattan_distance(deduped[-1], p) < SEGMENT_EPSILON:
            continue
        deduped.append(p)

    last = points[-1]
    if deduped[-1] != last:
        if len(deduped) > 1:
            deduped[-1] = last
        else:
            deduped.append(last)

    merged = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        if _continues_straight(merged[-1], deduped[i], deduped[i + 1]):
            continue
        merged.append(deduped[i])
    if len(deduped) > 1:
        merged.append(deduped[-1])
    return merged


def _polyline_to_path(points: Sequence[Point]) -> OrthogonalPath:
    segments = [PathSegment.between(a, b) for a, b in zip(points, points[1:])]
    total_length = calculate_path_length(segments)
    if segments and segments[0].direction is Direction.VERTICAL:
        routing_type = RoutingType.VERTICAL_FIRST
    else:
        routing_type = RoutingType.HORIZONTAL_FIRST

    control_points = [ControlPoint(p.x, p.y) for p in points]
    return OrthogonalPath(
        segments=tuple(segments),
        total_length=total_length,
        routing_type=routing_type,
        efficiency=_path_efficiency(total_length, points[0], points[-1]),
        control_points=tuple(control_points),
    )


# ---------------------------------------------------------------------------
# Perpendicular approach
# ---------------------------------------------------------------------------


def approach_distance(bounds: Optional[NodeBounds] = None) -> float:
    """Offset of exit/approach points from a handle, derived from node size."""
    if bounds is None:
        return DEFAULT_APPROACH_DISTANCE
    average = (bounds.width + bounds.height) / 2
    return _clamp(average * APPROACH_RATIO, MIN_APPROACH_DISTANCE, MAX_APPROACH_DISTANCE)


def _push(point: Point, side: Side, distance: float) -> Point:
    dx, dy = side.outward()
    return Point(point.x + dx * distance, point.y + dy * distance)


def _snap_free_axes(
    exit_point: Point,
    approach: Point,
    source_side: Optional[Side],
    target_side: Side,
) -> tuple[Point, Point]:
    """Collapse sub-epsilon offsets between exit and approach points.

    A point may only slide along the normal of its own handle, otherwise the
    segment back to the handle would stop being axis-aligned.
    """
    dx = approach.x - exit_point.x
    if 0 < abs(dx) < SEGMENT_EPSILON:
        if target_side.is_horizontal():
            approach = Point(exit_point.x, approach.y)
        elif source_side is not None and source_side.is_horizontal():
            exit_point = Point(approach.x, exit_point.y)

    dy = approach.y - exit_point.y
    if 0 < abs(dy) < SEGMENT_EPSILON:
        if target_side.is_vertical():
            approach = Point(approach.x, exit_point.y)
        elif source_side is not None and source_side.is_vertical():
            exit_point = Point(exit_point.x, approach.y)

    return exit_point, approach


def _bridge_candidates(exit_point: Point, approach: Point) -> list[list[Point]]:
    """Orthogonal connections from exit to approach, in preference order."""
    mid_x = (exit_point.x + approach.x) / 2
    mid_y = (exit_point.y + approach.y) / 2
    return [
        [exit_point, Point(mid_x, exit_point.y), Point(mid_x, approach.y), approach],
        [exit_point, Point(exit_point.x, mid_y), Point(approach.x, mid_y), approach],
        [exit_point, Point(approach.x, exit_point.y), approach],
        [exit_point, Point(exit_point.x, approach.y), approach],
    ]


def create_perpendicular_path(
    source_handle: HandleInfo,
    target_handle: HandleInfo,
    source_bounds: Optional[NodeBounds] = None,
    target_bounds: Optional[NodeBounds] = None,
    both_ends: bool = True,
    tolerance: float = ORTHOGONAL_ALIGNMENT_TOLERANCE,
) -> OrthogonalPath:
    """Route so the path meets handles at right angles to their sides.

    The path runs source -> exit -> (corners) -> approach -> target, where the
    approach point sits ``approach_distance(target_bounds)`` outside the
    target handle along its side normal. With ``both_ends`` the source gets a
    matching exit point, so the first segment is perpendicular as well.

    Among the constant set of candidate bridges the one without reversals,
    then with the fewest segments, then the shortest, is chosen.

    Args:
        source_handle: Handle the path leaves from.
        target_handle: Handle the path enters.
        source_bounds: Source node box, sizes the exit offset.
        target_bounds: Target node box, sizes the approach offset.
        both_ends: Also force a perpendicular exit from the source.
        tolerance: Alignment tolerance applied to the endpoints.

    Returns:
        OrthogonalPath whose last segment is perpendicular to the target side.
    """
    start, end = apply_alignment_tolerance(
        source_handle.position, target_handle.position, tolerance
    )
    target_side = target_handle.side
    source_side: Optional[Side] = source_handle.side if both_ends else None

    approach = _push(end, target_side, approach_distance(target_bounds))
    if source_side is not None:
        exit_point = _push(start, source_side, approach_distance(source_bounds))
    else:
        exit_point = start

    exit_point, approach = _snap_free_axes(exit_point, approach, source_side, target_side)

    ranked: list[tuple[tuple[bool, int, float, int], list[Point]]] = []
    for index, bridge in enumerate(_bridge_candidates(exit_point, approach)):
        raw = [start, *bridge, end] if source_side is not None else [*bridge, end]
        points = _clean_polyline(raw)
        if not _is_axis_aligned(points):
            continue
        key = (_has_reversal(points), len(points), _polyline_length(points), index)
        ranked.append((key, points))

    # The single-corner bridges always survive the alignment filter
    _, best = min(ranked, key=lambda item: item[0])
    return _polyline_to_path(best)


def _polyline_length(points: Sequence[Point]) -> float:
    return sum(manhattan_distance(a, b) for a, b in zip(points, points[1:]))


def _is_axis_aligned(points: Sequence[Point]) -> bool:
    for a, b in zip(points, points[1:]):
        if abs(a.x - b.x) > AXIS_EPSILON and abs(a.y - b.y) > AXIS_EPSILON:
            return False
    return True


# ---------------------------------------------------------------------------
# Self loops
# ---------------------------------------------------------------------------


def self_loop_extension(bounds: NodeBounds) -> float:
    """How far a self-loop bulges out of its node."""
    average = (bounds.width + bounds.height) / 2
    return _clamp(average * SELF_LOOP_RATIO, MIN_SELF_LOOP_EXTENSION, MAX_SELF_LOOP_EXTENSION)


def _outer(point: Point, side: Side, bounds: NodeBounds, extension: float) -> Point:
    """Project point onto the loop line running outside ``side``."""
    if side is Side.TOP:
        return Point(point.x, bounds.top - extension)
    if side is Side.BOTTOM:
        return Point(point.x, bounds.bottom + extension)
    if side is Side.LEFT:
        return Point(bounds.left - extension, point.y)
    return Point(bounds.right + extension, point.y)


def _outer_corner(a: Side, b: Side, bounds: NodeBounds, extension: float) -> Point:
    """Intersection of the loop lines of two adjacent sides."""
    vertical_side = a if a.is_horizontal() else b
    horizontal_side = b if vertical_side is a else a
    x = bounds.left - extension if vertical_side is Side.LEFT else bounds.right + extension
    y = bounds.top - extension if horizontal_side is Side.TOP else bounds.bottom + extension
    return Point(x, y)


LoopBuilder = Callable[[Point, Point, Side, Side, NodeBounds, float], list[Point]]


def _same_side_loop(
    s: Point, t: Point, s_side: Side, t_side: Side, bounds: NodeBounds, ext: float
) -> list[Point]:
    """Bulge straight out of the shared side."""
    return [s, _outer(s, s_side, bounds, ext), _outer(t, t_side, bounds, ext), t]


def _corner_loop(
    s: Point, t: Point, s_side: Side, t_side: Side, bounds: NodeBounds, ext: float
) -> list[Point]:
    """Bulge diagonally around the corner shared by two adjacent sides."""
    return [
        s,
        _outer(s, s_side, bounds, ext),
        _outer_corner(s_side, t_side, bounds, ext),
        _outer(t, t_side, bounds, ext),
        t,
    ]


def _wrap_side(s: Point, t: Point, s_side: Side, bounds: NodeBounds) -> Side:
    """Side an opposite-side loop wraps around, chosen by the handles' midline."""
    center = bounds.center
    if s_side.is_vertical():
        return Side.RIGHT if (s.x + t.x) / 2 >= center.x else Side.LEFT
    return Side.BOTTOM if (s.y + t.y) / 2 >= center.y else Side.TOP


def _wrap_loop(
    s: Point, t: Point, s_side: Side, t_side: Side, bounds: NodeBounds, ext: float
) -> list[Point]:
    """Wrap around a third side to join opposite sides."""
    via = _wrap_side(s, t, s_side, bounds)
    return [
        s,
        _outer(s, s_side, bounds, ext),
        _outer_corner(s_side, via, bounds, ext),
        _outer_corner(via, t_side, bounds, ext),
        _outer(t, t_side, bounds, ext),
        t,
    ]


SELF_LOOP_BUILDERS: dict[tuple[Side, Side], LoopBuilder] = {
    (Side.TOP, Side.TOP): _same_side_loop,
    (Side.TOP, Side.RIGHT): _corner_loop,
    (Side.TOP, Side.BOTTOM): _wrap_loop,
    (Side.TOP, Side.LEFT): _corner_loop,
    (Side.RIGHT, Side.TOP): _corner_loop,
    (Side.RIGHT, Side.RIGHT): _same_side_loop,
    (Side.RIGHT, Side.BOTTOM): _corner_loop,
    (Side.RIGHT, Side.LEFT): _wrap_loop,
    (Side.BOTTOM, Side.TOP): _wrap_loop,
    (Side.BOTTOM, Side.RIGHT): _corner_loop,
    (Side.BOTTOM, Side.BOTTOM): _same_side_loop,
    (Side.BOTTOM, Side.LEFT): _corner_loop,
    (Side.LEFT, Side.TOP): _corner_loop,
    (Side.LEFT, Side.RIGHT): _wrap_loop,
    (Side.LEFT, Side.BOTTOM): _corner_loop,
    (Side.LEFT, Side.LEFT): _same_side_loop,
}


def self_loop_points(
    source_handle: HandleInfo,
    target_handle: HandleInfo,
    bounds: NodeBounds,
) -> list[Point]:
    """Raw loop corners (before cleanup) for a handle pair on one node."""
    builder = SELF_LOOP_BUILDERS[(source_handle.side, target_handle.side)]
    return builder(
        source_handle.position,
        target_handle.position,
        source_handle.side,
        target_handle.side,
        bounds,
        self_loop_extension(bounds),
    )


def create_self_loop_path(
    source_handle: HandleInfo,
    target_handle: HandleInfo,
    bounds: NodeBounds,
) -> OrthogonalPath:
    """Route a connector that leaves and re-enters the same node.

    Handle positions are used as given: snapping two handles of one node
    together would collapse the loop.
    """
    points = _clean_polyline(self_loop_points(source_handle, target_handle, bounds))
    return _polyline_to_path(points)


__all__ = [
    "ORTHOGONAL_ALIGNMENT_TOLERANCE",
    "SEGMENT_EPSILON",
    "DEFAULT_APPROACH_DISTANCE",
    "SELF_LOOP_BUILDERS",
    "apply_alignment_tolerance",
    "generate_horizontal_first_path",
    "generate_vertical_first_path",
    "generate_path",
    "calculate_path_length",
    "generate_control_points",
    "build_orthogonal_path",
    "create_orthogonal_path",
    "compare_orthogonal_paths",
    "approach_distance",
    "create_perpendicular_path",
    "self_loop_extension",
    "self_loop_points",
    "create_self_loop_path",
]
