"""Tests for the orthogonal routing engine and its path cache."""

from __future__ import annotations

import dataclasses
import math

import pytest

from connector_routing.routing.engine import (
    DEFAULT_CACHE_SIZE,
    OrthogonalRoutingEngine,
    RoutingOptions,
    handle_combination_label,
)
from connector_routing.routing.paths import build_orthogonal_path
from connector_routing.types import (
    Direction,
    HandleInfo,
    HandleType,
    NodeBounds,
    Point,
    RoutingType,
    Side,
)
from connector_routing.validation import InvalidSegmentError, ValidationError


def _source(x: float = 0, y: float = 0, side: Side = Side.RIGHT, node_id: str = "A") -> HandleInfo:
    return HandleInfo(f"{node_id}-{side.value}-source", node_id, Point(x, y), side, HandleType.SOURCE)


def _target(x: float = 100, y: float = 50, side: Side = Side.LEFT, node_id: str = "B") -> HandleInfo:
    return HandleInfo(f"{node_id}-{side.value}-target", node_id, Point(x, y), side, HandleType.TARGET)


def _assert_points(points: list[Point], expected: list[tuple[float, float]]) -> None:
    assert len(points) == len(expected)
    for point, (x, y) in zip(points, expected):
        assert (point.x, point.y) == pytest.approx((x, y)), point


# ---------------------------------------------------------------------------
# Path selection
# ---------------------------------------------------------------------------


class TestCalculatePath:
    def test_default_prefers_horizontal_first_on_tie(self) -> None:
        engine = OrthogonalRoutingEngine()
        path = engine.calculate_path(_source(), _target())
        assert path.routing_type is RoutingType.HORIZONTAL_FIRST
        assert path.waypoints() == [Point(100, 0)]
        assert path.total_length == 150

    def test_preferred_routing_within_threshold(self) -> None:
        engine = OrthogonalRoutingEngine()
        options = RoutingOptions(preferred_routing=RoutingType.VERTICAL_FIRST)
        path = engine.calculate_path(_source(), _target(), options)
        assert path.routing_type is RoutingType.VERTICAL_FIRST
        assert path.waypoints() == [Point(0, 50)]

    def test_aligned_handles_give_straight_path(self) -> None:
        engine = OrthogonalRoutingEngine()
        path = engine.calculate_path(_source(0, 30), _target(200, 33))
        assert len(path.segments) == 1
        assert path.segments[0].direction is Direction.HORIZONTAL

    def test_degenerate_path(self) -> None:
        engine = OrthogonalRoutingEngine()
        path = engine.calculate_path(_source(10, 10), _target(10, 10))
        assert path.segments == ()
        assert path.total_length == 0
        assert len(path.control_points) == 1

    def test_self_loop_with_bounds(self) -> None:
        engine = OrthogonalRoutingEngine()
        bounds = NodeBounds(100, 100, 120, 60)
        source = _source(140, 100, Side.TOP, node_id="A")
        target = _target(180, 100, Side.TOP, node_id="A")

        path = engine.calculate_path(source, target, RoutingOptions(source_bounds=bounds))

        _assert_points(path.waypoints(), [(140, 1), (180, 1)])

    def test_same_node_without_bounds_uses_canonical_path(self) -> None:
        engine = OrthogonalRoutingEngine()
        source = _source(140, 100, Side.TOP, node_id="A")
        target = _target(180, 100, Side.TOP, node_id="A")
        path = engine.calculate_path(source, target)
        assert len(path.segments) == 1

    def test_perpendicular_option(self) -> None:
        engine = OrthogonalRoutingEngine()
        options = RoutingOptions(
            perpendicular=True,
            source_bounds=NodeBounds(0, 0, 100, 60),
            target_bounds=NodeBounds(300, 100, 100, 60),
        )
        path = engine.calculate_path(_source(100, 30), _target(300, 130), options)
        assert path.points() == [Point(100, 30), Point(200, 30), Point(200, 130), Point(300, 130)]

    def test_obstacles_route_like_plain_call(self) -> None:
        engine = OrthogonalRoutingEngine()
        plain = engine.calculate_path(_source(), _target())
        routed = engine.calculate_path_with_obstacles(
            _source(), _target(), [NodeBounds(40, -20, 20, 40)]
        )
        assert routed is not plain
        assert routed.points() == plain.points()


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class TestPathCache:
    def test_identical_calls_return_cached_object(self) -> None:
        engine = OrthogonalRoutingEngine()
        first = engine.calculate_path(_source(), _target())
        second = engine.calculate_path(_source(), _target())
        assert first is second
        stats = engine.cache_stats()
        assert (stats.size, stats.hits, stats.misses) == (1, 1, 1)

    def test_clear_cache_recomputes(self) -> None:
        engine = OrthogonalRoutingEngine()
        first = engine.calculate_path(_source(), _target())
        engine.clear_cache()
        second = engine.calculate_path(_source(), _target())
        assert second is not first
        assert second == first
        assert engine.cache_stats().hits == 0

    def test_moved_handle_misses(self) -> None:
        engine = OrthogonalRoutingEngine()
        first = engine.calculate_path(_source(), _target())
        moved = engine.calculate_path(_source(), _target(120, 50))
        assert moved is not first
        assert moved.total_length == 170

    def test_options_take_part_in_key(self) -> None:
        engine = OrthogonalRoutingEngine()
        plain = engine.calculate_path(_source(), _target())
        preferred = engine.calculate_path(
            _source(), _target(), RoutingOptions(preferred_routing=RoutingType.HORIZONTAL_FIRST)
        )
        assert preferred is not plain
        assert engine.cache_stats().size == 2

    def test_least_recently_used_entry_is_evicted(self) -> None:
        engine = OrthogonalRoutingEngine(cache_size=2)
        a = engine.calculate_path(_source(), _target(100, 50))
        engine.calculate_path(_source(), _target(200, 50))
        # Touch the first entry so the second becomes the oldest
        assert engine.calculate_path(_source(), _target(100, 50)) is a
        engine.calculate_path(_source(), _target(300, 50))

        assert engine.cache_stats().size == 2
        assert engine.calculate_path(_source(), _target(100, 50)) is a

    def test_default_capacity(self) -> None:
        engine = OrthogonalRoutingEngine()
        assert engine.cache_size == DEFAULT_CACHE_SIZE
        assert engine.cache_stats().max_size == DEFAULT_CACHE_SIZE

    @pytest.mark.parametrize("size", [0, -5])
    def test_invalid_capacity(self, size: int) -> None:
        with pytest.raises(ValidationError, match="cache size"):
            OrthogonalRoutingEngine(cache_size=size)

    def test_cached_path_cannot_be_mutated(self) -> None:
        engine = OrthogonalRoutingEngine()
        path = engine.calculate_path(_source(), _target())

        assert isinstance(path.segments, tuple)
        assert isinstance(path.control_points, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            path.total_length = 0  # type: ignore[misc]

        again = engine.calculate_path(_source(), _target())
        assert again is path
        assert again.total_length == 150
        assert again.waypoints() == [Point(100, 0)]

    def test_non_finite_handle_is_rejected_and_not_cached(self) -> None:
        engine = OrthogonalRoutingEngine()

        with pytest.raises(InvalidSegmentError, match="non-finite"):
            engine.calculate_path(_source(math.nan, 0), _target())

        assert engine.cache_stats().size == 0

    def test_cache_key_distinguishes_obstacles(self) -> None:
        with_obstacle = RoutingOptions(obstacles=(NodeBounds(0, 0, 10, 10),))
        assert with_obstacle.cache_key() != RoutingOptions().cache_key()


# ---------------------------------------------------------------------------
# Comparison and metrics
# ---------------------------------------------------------------------------


class TestComparisonAndMetrics:
    def test_equal_lengths_reason(self) -> None:
        engine = OrthogonalRoutingEngine()
        h = build_orthogonal_path(Point(0, 0), Point(50, 50), RoutingType.HORIZONTAL_FIRST)
        v = build_orthogonal_path(Point(0, 0), Point(50, 50), RoutingType.VERTICAL_FIRST)

        comparison = engine.compare_routing_options(h, v)

        assert comparison.selected is h
        assert comparison.alternative is v
        assert "horizontal-first wins the tie" in comparison.reason

    def test_metrics(self) -> None:
        engine = OrthogonalRoutingEngine()
        source, target = _source(), _target()
        path = engine.calculate_path(source, target)

        metrics = engine.calculate_routing_metrics(path, source, target)

        assert metrics.path_length == 150
        assert metrics.segment_count == 2
        assert metrics.routing_type is RoutingType.HORIZONTAL_FIRST
        assert metrics.handle_combination == "A:right -> B:left"

    def test_label(self) -> None:
        label = handle_combination_label(_source(side=Side.BOTTOM), _target(side=Side.TOP))
        assert label == "A:bottom -> B:top"
