"""
Segment drag handling for orthogonal connectors.

Splits a rendered connector into draggable segments, tracks a single drag
gesture and translates the dragged segment on its free axis:
horizontal segments move up and down, vertical segments move left and right.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ..geometry import euclidean_distance, midpoint
from ..types import Direction, Point
from ..validation import ValidationError

DEFAULT_GRID_SIZE = 20.0

# Pointer distance from a segment midpoint that still grabs the segment.
DEFAULT_HIT_THRESHOLD = 15.0

# Slack when deciding that two segments meet end to start and share a line.
CONSOLIDATION_TOLERANCE = 2.0

_SEGMENT_ID = re.compile(r"segment-(\d+)")


@dataclass(frozen=True)
class EdgeSegment:
    """
    One draggable segment of a rendered connector.

    ``id`` is ``"segment-<i>"`` where ``i`` indexes the segment's first point
    in ``[source, *control_points, target]``.
    """

    id: str
    start: Point
    end: Point
    direction: Direction
    length: float
    midpoint: Point

    @property
    def index(self) -> Optional[int]:
        """Position parsed from the id, or None for foreign ids."""
        match = _SEGMENT_ID.fullmatch(self.id)
        if match is None:
            return None
        return int(match.group(1))

    @classmethod
    def from_points(cls, segment_id: str, start: Point, end: Point) -> EdgeSegment:
        return cls(
            id=segment_id,
            start=start,
            end=end,
            direction=segment_direction(start, end),
            length=euclidean_distance(start, end),
            midpoint=midpoint(start, end),
        )


@dataclass(frozen=True)
class SegmentDragState:
    """Snapshot of an in-progress segment drag."""

    segment_id: str
    start_position: Point
    current_position: Point
    constrained_position: Point
    drag_offset: Point


def segment_direction(start: Point, end: Point) -> Direction:
    """Horizontal when the x-extent strictly dominates, else vertical."""
    if abs(end.x - start.x) > abs(end.y - start.y):
        return Direction.HORIZONTAL
    return Direction.VERTICAL


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _same_heading(first: EdgeSegment, second: EdgeSegment) -> bool:
    if first.direction is Direction.HORIZONTAL:
        a = _sign(first.end.x - first.start.x)
        b = _sign(second.end.x - second.start.x)
    else:
        a = _sign(first.end.y - first.start.y)
        b = _sign(second.end.y - second.start.y)
    return a == 0 or b == 0 or a == b


def _can_consolidate(first: EdgeSegment, second: EdgeSegment) -> bool:
    if first.direction is not second.direction:
        return False

    tol = CONSOLIDATION_TOLERANCE
    connected = (
        abs(first.end.x - second.start.x) <= tol and abs(first.end.y - second.start.y) <= tol
    )
    if not connected or not _same_heading(first, second):
        return False

    if first.direction is Direction.HORIZONTAL:
        return abs(first.start.y - second.end.y) <= tol
    return abs(first.start.x - second.end.x) <= tol


def _merge(group: list[EdgeSegment]) -> EdgeSegment:
    if len(group) == 1:
        return group[0]
    first, last = group[0], group[-1]
    return EdgeSegment(
        id=first.id,
        start=first.start,
        end=last.end,
        direction=first.direction,
        length=euclidean_distance(first.start, last.end),
        midpoint=midpoint(first.start, last.end),
    )


def calculate_segments(
    control_points: Sequence[Point],
    source: Point,
    target: Point,
) -> list[EdgeSegment]:
    """
    Break a connector into segments, merging straight runs.

    Consecutive segments are merged when they share a direction, meet end to
    start, lie on one line and run the same way. Segments that double back
    stay separate so each can be dragged on its own.
    """
    points = [source, *control_points, target]
    raw = [
        EdgeSegment.from_points(f"segment-{i}", start, end)
        for i, (start, end) in enumerate(zip(points, points[1:]))
    ]
    if len(raw) <= 1:
        return raw

    consolidated: list[EdgeSegment] = []
    group = [raw[0]]
    for segment in raw[1:]:
        if _can_consolidate(group[-1], segment):
            group.append(segment)
        else:
            consolidated.append(_merge(group))
            group = [segment]
    consolidated.append(_merge(group))
    return consolidated


def is_near_segment_midpoint(
    point: Point,
    segment: EdgeSegment,
    threshold: float = DEFAULT_HIT_THRESHOLD,
) -> bool:
    return euclidean_distance(point, segment.midpoint) <= threshold


def find_target_segment(
    point: Point,
    segments: Sequence[EdgeSegment],
    threshold: float = DEFAULT_HIT_THRESHOLD,
) -> Optional[EdgeSegment]:
    """The segment whose midpoint is closest to ``point`` within ``threshold``."""
    best: Optional[EdgeSegment] = None
    best_distance = threshold
    for segment in segments:
        distance = euclidean_distance(point, segment.midpoint)
        if distance <= best_distance and (best is None or distance < best_distance):
            best = segment
            best_distance = distance
    return best


def calculate_updated_control_points(
    control_points: Sequence[Point],
    segment: EdgeSegment,
    new_midpoint: Point,
    source: Point,
    target: Point,
) -> list[Point]:
    """
    Translate a dragged segment perpendicular to its direction.

    Every point of the segment moves, including the interior corners of a
    consolidated run, but the source and target endpoints never do. A
    segment whose id carries no index leaves the points as they are.
    """
    index = segment.index
    if index is None:
        return list(control_points)

    points = [source, *control_points, target]
    last = len(points) - 1
    index = min(max(0, index), max(0, last - 1))

    # A consolidated segment spans up to the point matching its recorded end
    end_index = index + 1
    while end_index < last and points[end_index] != segment.end:
        end_index += 1
    if points[end_index] != segment.end:
        end_index = index + 1

    center = midpoint(points[index], points[end_index])
    if segment.direction is Direction.VERTICAL:
        dx, dy = new_midpoint.x - center.x, 0.0
    else:
        dx, dy = 0.0, new_midpoint.y - center.y

    for i in range(max(index, 1), min(end_index, last - 1) + 1):
        points[i] = points[i].offset(dx, dy)

    return points[1:-1]


class SegmentDragHandler:
    """
    Tracks one segment drag at a time.

    Example:
        handler = SegmentDragHandler()
        segments = handler.calculate_segments(points, source, target)
        segment = handler.find_target_segment(pointer, segments)
        if segment is not None:
            handler.start_drag(segment, pointer)
            state = handler.update_drag(new_pointer, segment, snap_to_grid=True)
            points = handler.calculate_updated_control_points(
                points, segment, state.constrained_position, source, target
            )
            handler.end_drag()
    """

    def __init__(self, *, grid_size: float = DEFAULT_GRID_SIZE) -> None:
        if grid_size <= 0:
            raise ValidationError(f"grid_size must be > 0, got {grid_size}")
        self._grid_size = float(grid_size)
        self._state: Optional[SegmentDragState] = None

    @property
    def grid_size(self) -> float:
        return self._grid_size

    @property
    def current_drag_state(self) -> Optional[SegmentDragState]:
        return self._state

    def is_dragging(self) -> bool:
        return self._state is not None

    def calculate_segments(
        self,
        control_points: Sequence[Point],
        source: Point,
        target: Point,
    ) -> list[EdgeSegment]:
        return calculate_segments(control_points, source, target)

    def find_target_segment(
        self,
        point: Point,
        segments: Sequence[EdgeSegment],
        threshold: float = DEFAULT_HIT_THRESHOLD,
    ) -> Optional[EdgeSegment]:
        return find_target_segment(point, segments, threshold)

    def start_drag(self, segment: EdgeSegment, pointer: Point) -> SegmentDragState:
        """Begin dragging ``segment``; replaces any drag in progress."""
        self._state = SegmentDragState(
            segment_id=segment.id,
            start_position=segment.midpoint,
            current_position=pointer,
            constrained_position=pointer,
            drag_offset=Point(pointer.x - segment.midpoint.x, pointer.y - segment.midpoint.y),
        )
        return self._state

    def update_drag(
        self,
        pointer: Point,
        segment: EdgeSegment,
        snap_to_grid: bool = False,
    ) -> Optional[SegmentDragState]:
        """
        Move the drag to ``pointer``, locked to the segment's free axis.

        With ``snap_to_grid`` the displacement from the drag start is rounded
        to whole grid steps. Returns None when ``segment`` is not the one
        being dragged.
        """
        state = self._state
        if state is None or state.segment_id != segment.id:
            return None

        if segment.direction is Direction.HORIZONTAL:
            y = pointer.y - state.drag_offset.y
            if snap_to_grid:
                y = state.start_position.y + self._step(y - state.start_position.y)
            constrained = Point(segment.midpoint.x, y)
        else:
            x = pointer.x - state.drag_offset.x
            if snap_to_grid:
                x = state.start_position.x + self._step(x - state.start_position.x)
            constrained = Point(x, segment.midpoint.y)

        self._state = replace(state, current_position=pointer, constrained_position=constrained)
        return self._state

    def end_drag(self) -> Optional[SegmentDragState]:
        """Finish the drag and return its final state."""
        state, self._state = self._state, None
        return state

    def calculate_updated_control_points(
        self,
        control_points: Sequence[Point],
        segment: EdgeSegment,
        new_midpoint: Point,
        source: Point,
        target: Point,
    ) -> list[Point]:
        return calculate_updated_control_points(
            control_points, segment, new_midpoint, source, target
        )

    def _step(self, delta: float) -> float:
        return round(delta / self._grid_size) * self._grid_size


__all__ = [
    "DEFAULT_GRID_SIZE",
    "DEFAULT_HIT_THRESHOLD",
    "EdgeSegment",
    "SegmentDragState",
    "SegmentDragHandler",
    "segment_direction",
    "calculate_segments",
    "is_near_segment_midpoint",
    "find_target_segment",
    "calculate_updated_control_points",
]
