"""
Orthogonal routing engine.

Builds both canonical paths between two handles, applies the selection
policy and memoizes the result. The cache is a bounded LRU keyed by handle
identity, side and position plus the serialized options, so a handle that
moves produces a fresh key and its stale entry eventually ages out.
"""

from __future__ import annotations

import dataclasses
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Optional

from ..types import HandleInfo, NodeBounds, OrthogonalPath, RoutingMetrics, RoutingType
from ..validation import validate_cache_size
from .paths import (
    compare_orthogonal_paths,
    create_orthogonal_path,
    create_perpendicular_path,
    create_self_loop_path,
)

DEFAULT_CACHE_SIZE = 512

# Preferred routing is kept while it is at most this much longer than the
# alternative, relative to the alternative's length.
PREFERENCE_THRESHOLD = 0.2


@dataclass(frozen=True)
class RoutingOptions:
    """
    Per-call routing options.

    Attributes:
        preferred_routing: Ordering to keep unless it is clearly longer
        avoid_obstacles: Caller intends obstacle avoidance
        obstacles: Boxes the caller wants avoided
        perpendicular: Enter (and leave) handles at right angles to their side
        source_bounds: Source node box; enables self-loops and sizes offsets
        target_bounds: Target node box; sizes the approach offset
    """

    preferred_routing: Optional[RoutingType] = None
    avoid_obstacles: bool = False
    obstacles: tuple[NodeBounds, ...] = ()
    perpendicular: bool = False
    source_bounds: Optional[NodeBounds] = None
    target_bounds: Optional[NodeBounds] = None

    def cache_key(self) -> str:
        """Stable string form used in the path cache key."""
        preferred = self.preferred_routing.value if self.preferred_routing else "-"
        obstacles = ";".join(_bounds_key(b) for b in self.obstacles)
        return (
            f"pref={preferred}"
            f"|avoid={int(self.avoid_obstacles)}"
            f"|obs={obstacles}"
            f"|perp={int(self.perpendicular)}"
            f"|sb={_bounds_key(self.source_bounds)}"
            f"|tb={_bounds_key(self.target_bounds)}"
        )


@dataclass(frozen=True)
class RoutingComparison:
    """Outcome of comparing the two canonical orderings."""

    selected: OrthogonalPath
    alternative: OrthogonalPath
    reason: str


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int
    hits: int
    misses: int


def _bounds_key(bounds: Optional[NodeBounds]) -> str:
    if bounds is None:
        return "-"
    return f"{bounds.x},{bounds.y},{bounds.width},{bounds.height}"


def _handle_key(handle: HandleInfo) -> str:
    position = handle.position
    return f"{handle.node_id}:{handle.id}:{handle.side.value}:{position.x},{position.y}"


def handle_combination_label(source_handle: HandleInfo, target_handle: HandleInfo) -> str:
    """Human-readable ``"nodeA:side -> nodeB:side"`` label."""
    return (
        f"{source_handle.node_id}:{source_handle.side.value} -> "
        f"{target_handle.node_id}:{target_handle.side.value}"
    )


class OrthogonalRoutingEngine:
    """
    Computes and caches orthogonal connector paths.

    Engines are constructed explicitly and owned by whoever renders the
    connectors; there is no shared global instance.

    Example:
        engine = OrthogonalRoutingEngine(cache_size=256)
        path = engine.calculate_path(source_handle, target_handle)
        metrics = engine.calculate_routing_metrics(path, source_handle, target_handle)
    """

    def __init__(self, *, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._cache_size = validate_cache_size(cache_size)
        self._cache: OrderedDict[str, OrthogonalPath] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @property
    def cache_size(self) -> int:
        """Maximum number of cached paths."""
        return self._cache_size

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def calculate_path(
        self,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
        options: Optional[RoutingOptions] = None,
    ) -> OrthogonalPath:
        """
        Route a connector between two handles.

        Repeated calls with identical arguments return the identical cached
        object until the entry is evicted or the cache is cleared.

        Args:
            source_handle: Handle the connector leaves from
            target_handle: Handle the connector enters
            options: Routing options (defaults apply when omitted)

        Returns:
            The selected OrthogonalPath
        """
        if options is None:
            options = RoutingOptions()

        key = f"{_handle_key(source_handle)}->{_handle_key(target_handle)}|{options.cache_key()}"
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self._hits += 1
            return cached

        self._misses += 1
        path = self._route(source_handle, target_handle, options)

        self._cache[key] = path
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return path

    def calculate_path_with_obstacles(
        self,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
        obstacles: Iterable[NodeBounds],
        options: Optional[RoutingOptions] = None,
    ) -> OrthogonalPath:
        """
        Route with obstacle boxes attached to the options.

        Obstacles take part in the cache key only; paths are not searched
        around them. Control points that end up inside nodes are handled by
        the collision resolver.
        """
        base = options if options is not None else RoutingOptions()
        options = dataclasses.replace(base, avoid_obstacles=True, obstacles=tuple(obstacles))
        return self.calculate_path(source_handle, target_handle, options)

    def _route(
        self,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
        options: RoutingOptions,
    ) -> OrthogonalPath:
        if source_handle.node_id == target_handle.node_id and options.source_bounds is not None:
            return create_self_loop_path(source_handle, target_handle, options.source_bounds)

        if options.perpendicular:
            return create_perpendicular_path(
                source_handle,
                target_handle,
                source_bounds=options.source_bounds,
                target_bounds=options.target_bounds,
            )

        horizontal_first = create_orthogonal_path(
            source_handle, target_handle, RoutingType.HORIZONTAL_FIRST
        )
        vertical_first = create_orthogonal_path(
            source_handle, target_handle, RoutingType.VERTICAL_FIRST
        )

        if options.preferred_routing is not None:
            if options.preferred_routing is RoutingType.HORIZONTAL_FIRST:
                preferred, alternative = horizontal_first, vertical_first
            else:
                preferred, alternative = vertical_first, horizontal_first

            if alternative.total_length > 0:
                difference = (
                    preferred.total_length - alternative.total_length
                ) / alternative.total_length
                if difference <= PREFERENCE_THRESHOLD:
                    return preferred

        return compare_orthogonal_paths(horizontal_first, vertical_first)

    def compare_routing_options(
        self,
        horizontal_first: OrthogonalPath,
        vertical_first: OrthogonalPath,
    ) -> RoutingComparison:
        """Apply the default comparator and explain the choice."""
        selected = compare_orthogonal_paths(horizontal_first, vertical_first)
        if selected is horizontal_first:
            alternative = vertical_first
        else:
            alternative = horizontal_first

        if horizontal_first.total_length == vertical_first.total_length:
            reason = (
                f"Equal lengths ({selected.total_length:g}); "
                f"horizontal-first wins the tie"
            )
        else:
            reason = (
                f"{selected.routing_type.value} is shorter "
                f"({selected.total_length:g} vs {alternative.total_length:g})"
            )
        return RoutingComparison(selected=selected, alternative=alternative, reason=reason)

    def calculate_routing_metrics(
        self,
        path: OrthogonalPath,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
    ) -> RoutingMetrics:
        """Summarize a path for persistence."""
        return RoutingMetrics(
            path_length=path.total_length,
            segment_count=len(path.segments),
            routing_type=path.routing_type,
            efficiency=path.efficiency,
            handle_combination=handle_combination_label(source_handle, target_handle),
        )

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------

    def clear_cache(self) -> None:
        """Drop every cached path and reset the hit counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def cache_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._cache),
            max_size=self._cache_size,
            hits=self._hits,
            misses=self._misses,
        )


__all__ = [
    "DEFAULT_CACHE_SIZE",
    "PREFERENCE_THRESHOLD",
    "RoutingOptions",
    "RoutingComparison",
    "CacheStats",
    "OrthogonalRoutingEngine",
    "handle_combination_label",
]
