"""
Handle selection for orthogonal connectors.

Chooses the source/target handle pair a connector should use by scoring
every candidate pair on Manhattan distance, routing efficiency, preferred
routing order and a fixed side order. Distances for all pairs are computed
at once with numpy broadcasting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..geometry import handle_manhattan_distance, routing_efficiency
from ..types import HandleCombination, HandleInfo, NodeInfo, Point, RoutingType
from ..validation import NoValidHandlesError


@dataclass(frozen=True)
class HandleEvaluation:
    """A scored candidate with a human-readable explanation."""

    combination: HandleCombination
    score: float
    reason: str


def _positions(handles: Sequence[HandleInfo]) -> np.ndarray:
    return np.array([(h.position.x, h.position.y) for h in handles], dtype=np.float64)


def determine_preferred_routing_type(
    source_handle: HandleInfo,
    target_handle: HandleInfo,
) -> RoutingType:
    """Pick the routing order that travels the longer axis first.

    On an exact tie the handle orientations decide: horizontal sides on both
    ends prefer horizontal-first, vertical sides on both ends prefer
    vertical-first, and a mixed pair falls back to horizontal-first.
    """
    dx = abs(target_handle.position.x - source_handle.position.x)
    dy = abs(target_handle.position.y - source_handle.position.y)

    if dx > dy:
        return RoutingType.HORIZONTAL_FIRST
    if dy > dx:
        return RoutingType.VERTICAL_FIRST

    source_horizontal = source_handle.side.is_horizontal()
    target_horizontal = target_handle.side.is_horizontal()
    if source_horizontal and target_horizontal:
        return RoutingType.HORIZONTAL_FIRST
    if not source_horizontal and not target_horizontal:
        return RoutingType.VERTICAL_FIRST
    return RoutingType.HORIZONTAL_FIRST


def _sort_key(combination: HandleCombination) -> tuple[float, float, int, int, int]:
    return (
        combination.manhattan_distance,
        combination.efficiency,
        0 if combination.routing_type is RoutingType.HORIZONTAL_FIRST else 1,
        combination.source_handle.side.order,
        combination.target_handle.side.order,
    )


class HandleSelectionService:
    """
    Selects connection handles between nodes.

    Example:
        service = HandleSelectionService()
        best = service.find_optimal_handles(source_node, target_node)
        print(best.source_handle.side, best.target_handle.side)
    """

    def find_optimal_handles(
        self,
        source_node: NodeInfo,
        target_node: NodeInfo,
    ) -> HandleCombination:
        """
        Find the best handle pair between two nodes.

        Candidates are ordered by Manhattan distance, then efficiency, then
        routing type (horizontal-first first), then the side order
        top < right < bottom < left of the source handle and finally of the
        target handle.

        Raises:
            NoValidHandlesError: If either node lacks handles of the needed type
        """
        combinations = self.get_all_handle_combinations(source_node, target_node)
        if not combinations:
            raise NoValidHandlesError(
                f"No valid handle combinations between nodes "
                f"{source_node.id!r} and {target_node.id!r}"
            )
        return min(combinations, key=_sort_key)

    def rank_handle_combinations(
        self,
        source_node: NodeInfo,
        target_node: NodeInfo,
    ) -> list[HandleCombination]:
        """All candidates, best first."""
        return sorted(self.get_all_handle_combinations(source_node, target_node), key=_sort_key)

    def get_all_handle_combinations(
        self,
        source_node: NodeInfo,
        target_node: NodeInfo,
    ) -> list[HandleCombination]:
        """Score every source-typed x target-typed handle pair."""
        source_handles = source_node.source_handles()
        target_handles = target_node.target_handles()
        if not source_handles or not target_handles:
            return []

        src = _positions(source_handles)
        tgt = _positions(target_handles)

        # (n_source, n_target) distance matrices
        dx = np.abs(tgt[np.newaxis, :, 0] - src[:, np.newaxis, 0])
        dy = np.abs(tgt[np.newaxis, :, 1] - src[:, np.newaxis, 1])
        manhattan = dx + dy
        euclid = np.hypot(dx, dy)
        efficiency = np.divide(
            manhattan, euclid, out=np.ones_like(manhattan), where=euclid > 0
        )

        combinations: list[HandleCombination] = []
        for i, source_handle in enumerate(source_handles):
            for j, target_handle in enumerate(target_handles):
                distance = float(manhattan[i, j])
                combinations.append(
                    HandleCombination(
                        source_handle=source_handle,
                        target_handle=target_handle,
                        manhattan_distance=distance,
                        path_length=distance,
                        efficiency=float(efficiency[i, j]),
                        routing_type=determine_preferred_routing_type(
                            source_handle, target_handle
                        ),
                    )
                )
        return combinations

    def calculate_manhattan_distance(
        self,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
    ) -> float:
        return handle_manhattan_distance(source_handle, target_handle)

    def evaluate_handle_combination(
        self,
        source_handle: HandleInfo,
        target_handle: HandleInfo,
    ) -> HandleEvaluation:
        """Score a single pair; lower scores are better."""
        distance = handle_manhattan_distance(source_handle, target_handle)
        efficiency = routing_efficiency(source_handle.position, target_handle.position)
        routing_type = determine_preferred_routing_type(source_handle, target_handle)

        combination = HandleCombination(
            source_handle=source_handle,
            target_handle=target_handle,
            manhattan_distance=distance,
            path_length=distance,
            efficiency=efficiency,
            routing_type=routing_type,
        )
        score = distance + efficiency * 10
        reason = (
            f"{source_handle.side.value}-to-{target_handle.side.value} connection: "
            f"Manhattan distance {distance:g}, "
            f"efficiency {efficiency:.2f}, "
            f"{routing_type.value} routing, "
            f"score {score:.2f}"
        )
        return HandleEvaluation(combination=combination, score=score, reason=reason)

    def find_optimal_handles_for_position(
        self,
        source_node: NodeInfo,
        target_position: Point,
    ) -> Optional[HandleInfo]:
        """
        Closest source handle to a free-floating point.

        Used for live previews while a connector is being dragged. Returns
        None when the node has no source handles; the first handle wins ties.
        """
        source_handles = source_node.source_handles()
        if not source_handles:
            return None

        src = _positions(source_handles)
        distances = np.abs(src[:, 0] - target_position.x) + np.abs(src[:, 1] - target_position.y)
        return source_handles[int(np.argmin(distances))]


__all__ = [
    "HandleEvaluation",
    "HandleSelectionService",
    "determine_preferred_routing_type",
]
