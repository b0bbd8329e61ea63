"""Tests for segment extraction and drag handling."""

from __future__ import annotations

import pytest

from connector_routing.editing.segments import (
    EdgeSegment,
    SegmentDragHandler,
    calculate_segments,
    calculate_updated_control_points,
    find_target_segment,
    is_near_segment_midpoint,
    segment_direction,
)
from connector_routing.types import Direction, Point
from connector_routing.validation import ValidationError

SOURCE = Point(100, 100)
TARGET = Point(300, 200)
CONTROL_POINTS = [Point(200, 100), Point(200, 150)]


def _segments() -> list[EdgeSegment]:
    return [
        EdgeSegment("segment-0", SOURCE, Point(200, 100), Direction.HORIZONTAL, 100, Point(150, 100)),
        EdgeSegment("segment-1", Point(200, 100), Point(200, 150), Direction.VERTICAL, 50, Point(200, 125)),
        EdgeSegment("segment-2", Point(200, 150), TARGET, Direction.HORIZONTAL, 100, Point(250, 150)),
    ]


# ---------------------------------------------------------------------------
# Segment extraction
# ---------------------------------------------------------------------------


class TestCalculateSegments:
    def test_segments_from_control_points(self) -> None:
        segments = calculate_segments(CONTROL_POINTS, SOURCE, TARGET)

        assert [s.direction for s in segments] == [
            Direction.HORIZONTAL,
            Direction.VERTICAL,
            Direction.HORIZONTAL,
        ]
        assert [s.midpoint for s in segments] == [
            Point(150, 100),
            Point(200, 125),
            Point(250, 175),
        ]
        assert [s.id for s in segments] == ["segment-0", "segment-1", "segment-2"]

    def test_no_control_points(self) -> None:
        segments = calculate_segments([], SOURCE, TARGET)
        assert len(segments) == 1
        assert segments[0].start == SOURCE
        assert segments[0].end == TARGET

    def test_opposing_runs_stay_separate(self) -> None:
        control_points = [Point(100, 0), Point(-150, 0), Point(-150, -100)]
        segments = calculate_segments(control_points, Point(0, 0), Point(-100, -100))

        assert [s.direction for s in segments] == [
            Direction.HORIZONTAL,
            Direction.HORIZONTAL,
            Direction.VERTICAL,
            Direction.HORIZONTAL,
        ]
        assert segments[0].end.x > segments[0].start.x
        assert segments[1].end.x < segments[1].start.x

    def test_straight_run_is_merged(self) -> None:
        control_points = [Point(0, 50), Point(100, 50), Point(200, 50), Point(200, 100)]
        segments = calculate_segments(control_points, Point(0, 0), Point(300, 100))

        assert [s.id for s in segments] == ["segment-0", "segment-1", "segment-3", "segment-4"]
        merged = segments[1]
        assert (merged.start, merged.end) == (Point(0, 50), Point(200, 50))
        assert merged.length == 200
        assert merged.midpoint == Point(100, 50)

    def test_direction_of_diagonal(self) -> None:
        assert segment_direction(Point(0, 0), Point(10, 5)) is Direction.HORIZONTAL
        assert segment_direction(Point(0, 0), Point(5, 5)) is Direction.VERTICAL

    def test_index_from_id(self) -> None:
        assert _segments()[2].index == 2
        assert EdgeSegment.from_points("bridge-source-0", SOURCE, TARGET).index is None


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------


class TestHitTesting:
    def test_near_midpoint(self) -> None:
        segment = _segments()[0]
        assert is_near_segment_midpoint(Point(155, 105), segment, 15)
        assert not is_near_segment_midpoint(Point(170, 120), segment, 15)

    def test_find_target_segment(self) -> None:
        segments = _segments()
        assert find_target_segment(Point(152, 102), segments) is segments[0]

    def test_nothing_in_reach(self) -> None:
        assert find_target_segment(Point(50, 50), _segments()) is None

    def test_closest_of_several(self) -> None:
        near = EdgeSegment.from_points("segment-0", Point(0, 0), Point(20, 0))
        nearer = EdgeSegment.from_points("segment-1", Point(0, 8), Point(20, 8))
        assert find_target_segment(Point(10, 6), [near, nearer]) is nearer


# ---------------------------------------------------------------------------
# Drag lifecycle
# ---------------------------------------------------------------------------


class TestSegmentDrag:
    def test_start_drag(self) -> None:
        handler = SegmentDragHandler()
        segment = _segments()[0]

        state = handler.start_drag(segment, Point(160, 110))

        assert state.segment_id == "segment-0"
        assert state.start_position == segment.midpoint
        assert state.current_position == Point(160, 110)
        assert state.drag_offset == Point(10, 10)

    def test_vertical_segment_moves_horizontally(self) -> None:
        handler = SegmentDragHandler()
        segment = _segments()[1]
        handler.start_drag(segment, Point(205, 130))

        state = handler.update_drag(Point(220, 135), segment, snap_to_grid=True)

        assert state is not None
        # 220 - 5 = 215, snapped to the 20 px grid
        assert state.constrained_position == Point(220, 125)

    def test_horizontal_segment_moves_vertically(self) -> None:
        handler = SegmentDragHandler()
        segment = _segments()[0]
        handler.start_drag(segment, Point(155, 105))

        state = handler.update_drag(Point(160, 120), segment, snap_to_grid=True)

        assert state is not None
        assert state.constrained_position == Point(150, 120)

    def test_grid_snapping(self) -> None:
        handler = SegmentDragHandler()
        segment = _segments()[1]
        handler.start_drag(segment, Point(200, 125))

        state = handler.update_drag(Point(217, 132), segment, snap_to_grid=True)

        assert state is not None
        assert state.constrained_position.x == 220

    def test_without_snapping(self) -> None:
        handler = SegmentDragHandler()
        segment = _segments()[1]
        handler.start_drag(segment, Point(200, 125))

        state = handler.update_drag(Point(217, 132), segment)

        assert state is not None
        assert state.constrained_position == Point(217, 125)
        assert state.current_position == Point(217, 132)

    def test_update_for_other_segment_is_ignored(self) -> None:
        handler = SegmentDragHandler()
        segments = _segments()
        handler.start_drag(segments[0], Point(150, 100))
        assert handler.update_drag(Point(0, 0), segments[1]) is None

    def test_update_without_drag(self) -> None:
        assert SegmentDragHandler().update_drag(Point(0, 0), _segments()[0]) is None

    def test_end_drag(self) -> None:
        handler = SegmentDragHandler()
        initial = handler.start_drag(_segments()[0], Point(160, 110))
        assert handler.is_dragging()

        final = handler.end_drag()

        assert final == initial
        assert not handler.is_dragging()
        assert handler.current_drag_state is None

    def test_end_drag_when_idle(self) -> None:
        assert SegmentDragHandler().end_drag() is None

    @pytest.mark.parametrize("grid_size", [0, -20])
    def test_invalid_grid_size(self, grid_size: float) -> None:
        with pytest.raises(ValidationError):
            SegmentDragHandler(grid_size=grid_size)


# ---------------------------------------------------------------------------
# Control point updates
# ---------------------------------------------------------------------------


class TestUpdatedControlPoints:
    def test_vertical_segment_moves_as_unit(self) -> None:
        updated = calculate_updated_control_points(
            CONTROL_POINTS, _segments()[1], Point(220, 125), SOURCE, TARGET
        )
        assert updated == [Point(220, 100), Point(220, 150)]

    def test_first_segment_keeps_source(self) -> None:
        updated = calculate_updated_control_points(
            CONTROL_POINTS, _segments()[0], Point(150, 120), SOURCE, TARGET
        )
        assert updated == [Point(200, 120), Point(200, 150)]

    def test_merged_run_moves_every_point(self) -> None:
        control_points = [Point(0, 50), Point(100, 50), Point(200, 50), Point(200, 100)]
        source, target = Point(0, 0), Point(300, 100)
        run = calculate_segments(control_points, source, target)[1]

        updated = calculate_updated_control_points(
            control_points, run, Point(100, 80), source, target
        )

        assert updated == [Point(0, 80), Point(100, 80), Point(200, 80), Point(200, 100)]

    def test_foreign_segment_id_leaves_points(self) -> None:
        segment = EdgeSegment.from_points("bridge-target-2", Point(200, 100), Point(200, 150))
        updated = calculate_updated_control_points(
            CONTROL_POINTS, segment, Point(260, 125), SOURCE, TARGET
        )
        assert updated == CONTROL_POINTS

    def test_handler_delegates(self) -> None:
        handler = SegmentDragHandler(grid_size=10)
        segments = handler.calculate_segments(CONTROL_POINTS, SOURCE, TARGET)
        updated = handler.calculate_updated_control_points(
            CONTROL_POINTS, segments[1], Point(230, 125), SOURCE, TARGET
        )
        assert handler.grid_size == 10
        assert updated == [Point(230, 100), Point(230, 150)]
