"""
Control-point collision resolution.

Pushes the corners of rendered connectors out of node bodies. Every node
except a connector's own endpoints is an obstacle. A colliding corner moves
along the axis of least penetration to ``distance`` beyond the obstacle's
edge. Moving one corner can push it into another node, so passes repeat up
to ``max_iterations`` times. Overlap that survives the budget is reported
with a ``CollisionResolutionWarning`` and the corner stays at its last
position.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from .editing.constraints import enforce_orthogonal_path
from .persistence import ConnectorRecord
from .routing.engine import OrthogonalRoutingEngine, RoutingOptions
from .types import NodeInfo, Point
from .validation import (
    CollisionResolutionWarning,
    validate_distance,
    validate_iterations,
)

DEFAULT_DISTANCE = 50.0
DEFAULT_MAX_ITERATIONS = 10


@dataclass(frozen=True)
class CollisionAdjustment:
    """New control points for one connector."""

    edge_id: str
    control_points: list[Point]


def _obstacle_array(nodes: Sequence[NodeInfo], clearance: float) -> np.ndarray:
    """(n, 4) array of inflated [left, top, right, bottom] boxes."""
    boxes = np.empty((len(nodes), 4), dtype=np.float64)
    for i, node in enumerate(nodes):
        b = node.bounds.inflate(clearance)
        boxes[i] = (b.left, b.top, b.right, b.bottom)
    return boxes


def _first_hit(point: Point, boxes: np.ndarray) -> Optional[int]:
    """Index of the first box that holds ``point``, borders included."""
    if len(boxes) == 0:
        return None
    inside = (
        (boxes[:, 0] <= point.x)
        & (point.x <= boxes[:, 2])
        & (boxes[:, 1] <= point.y)
        & (point.y <= boxes[:, 3])
    )
    hits = np.flatnonzero(inside)
    if hits.size == 0:
        return None
    return int(hits[0])


def _push_out(point: Point, box: np.ndarray, distance: float) -> Point:
    """Move point out through the nearest edge of ``box``."""
    left, top, right, bottom = box
    penetration = np.array(
        [point.x - left, right - point.x, point.y - top, bottom - point.y]
    )
    side = int(np.argmin(penetration))
    if side == 0:
        return Point(float(left) - distance, point.y)
    if side == 1:
        return Point(float(right) + distance, point.y)
    if side == 2:
        return Point(point.x, float(top) - distance)
    return Point(point.x, float(bottom) + distance)


class CollisionResolver:
    """
    Moves connector corners out of node bodies.

    Args:
        distance: Gap left between a moved corner and the obstacle's edge
        max_iterations: Upper bound on resolution passes per connector
        clearance: Margin added around every node before testing
        engine: Routing engine used for connectors without stored corners
        preserve_orthogonality: Re-insert L-bends after each pass so the
            connector stays axis-aligned (needs the connector's handles)

    Example:
        resolver = CollisionResolver(distance=40, clearance=5, engine=engine)
        for adjustment in resolver.resolve_all(records, nodes):
            store(adjustment.edge_id, adjustment.control_points)
    """

    def __init__(
        self,
        *,
        distance: float = DEFAULT_DISTANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        clearance: float = 0.0,
        engine: Optional[OrthogonalRoutingEngine] = None,
        preserve_orthogonality: bool = True,
    ) -> None:
        self._distance = validate_distance(distance)
        self._max_iterations = validate_iterations(max_iterations)
        self._clearance = validate_distance(clearance)
        self._engine = engine
        self._preserve_orthogonality = preserve_orthogonality

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @property
    def clearance(self) -> float:
        return self._clearance

    def default_control_points(
        self,
        edge: ConnectorRecord,
        nodes: Sequence[NodeInfo] = (),
    ) -> list[Point]:
        """
        Stored corners, or the engine's route when none are stored.

        The bounds of the endpoint nodes found in ``nodes`` are passed to the
        engine, so a connector from a node to itself routes as a loop.
        """
        if edge.control_points:
            return list(edge.control_points)
        if self._engine is None or edge.selected_handles is None:
            return []
        handles = edge.selected_handles
        bounds = {n.id: n.bounds for n in nodes}
        options = RoutingOptions(
            preferred_routing=edge.routing_type,
            source_bounds=bounds.get(edge.source),
            target_bounds=bounds.get(edge.target),
        )
        return self._engine.calculate_path(handles.source, handles.target, options).waypoints()

    def resolve_edge(
        self,
        edge: ConnectorRecord,
        nodes: Sequence[NodeInfo],
    ) -> Optional[list[Point]]:
        """
        Resolve one connector.

        Returns:
            The adjusted control points, or None when no corner collided
        """
        points = self.default_control_points(edge, nodes)
        if not points:
            return None

        obstacles = [n for n in nodes if n.id not in (edge.source, edge.target)]
        boxes = _obstacle_array(obstacles, self._clearance)

        endpoints = None
        if self._preserve_orthogonality and edge.selected_handles is not None:
            endpoints = (
                edge.selected_handles.source.position,
                edge.selected_handles.target.position,
            )

        changed = False
        for _ in range(self._max_iterations):
            moved = False
            for i, point in enumerate(points):
                hit = _first_hit(point, boxes)
                if hit is None:
                    continue
                points[i] = _push_out(point, boxes[hit], self._distance)
                moved = True
            if not moved:
                break
            changed = True
            if endpoints is not None:
                points = enforce_orthogonal_path(points, *endpoints)

        remaining = sum(1 for p in points if _first_hit(p, boxes) is not None)
        if remaining:
            warnings.warn(
                f"Collision resolution for connector {edge.id!r} stopped after "
                f"{self._max_iterations} iteration(s) with {remaining} control point(s) "
                "still inside a node.",
                CollisionResolutionWarning,
                stacklevel=2,
            )

        return points if changed else None

    def resolve_all(
        self,
        edges: Iterable[ConnectorRecord],
        nodes: Sequence[NodeInfo],
    ) -> list[CollisionAdjustment]:
        """Resolve every connector; connectors that needed no change are skipped."""
        adjustments: list[CollisionAdjustment] = []
        for edge in edges:
            points = self.resolve_edge(edge, nodes)
            if points is not None:
                adjustments.append(CollisionAdjustment(edge_id=edge.id, control_points=points))
        return adjustments


__all__ = [
    "DEFAULT_DISTANCE",
    "DEFAULT_MAX_ITERATIONS",
    "CollisionAdjustment",
    "CollisionResolver",
]
