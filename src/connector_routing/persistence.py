"""
Persistence boundary for routed connectors.

A ``ConnectorRecord`` is the routing part of a connector as the host editor
stores it. Records written by older editor versions may lack any of the
routing fields; loading never fails because of that. Instead
``assess_routing_state`` reports what is missing and ``route_connector``
fills it in.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .routing.engine import OrthogonalRoutingEngine, RoutingOptions
from .routing.handles import HandleSelectionService
from .types import HandleInfo, NodeInfo, Point, RoutingMetrics, RoutingType
from .validation import NoValidHandlesError


class RoutingState(Enum):
    """How much routing data a stored connector carries."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    LEGACY = "legacy"


@dataclass(frozen=True)
class SelectedHandles:
    """The handle pair a connector is attached to."""

    source: HandleInfo
    target: HandleInfo

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source.to_dict(), "target": self.target.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> Optional[SelectedHandles]:
        """Parse a stored pair; returns None when either handle is unusable."""
        if not isinstance(data, dict):
            return None
        try:
            return cls(
                source=HandleInfo.from_dict(data["source"]),
                target=HandleInfo.from_dict(data["target"]),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class ConnectorRecord:
    """
    Routing data of one connector.

    ``control_points`` are the intermediate corners only; the endpoints are
    the selected handles' positions.
    """

    id: str
    source: str
    target: str
    routing_metrics: Optional[RoutingMetrics] = None
    selected_handles: Optional[SelectedHandles] = None
    control_points: Optional[tuple[Point, ...]] = None
    routing_type: Optional[RoutingType] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting fields that are not set."""
        data: dict[str, Any] = {}
        if self.routing_metrics is not None:
            data["routingMetrics"] = self.routing_metrics.to_dict()
        if self.selected_handles is not None:
            data["selectedHandles"] = self.selected_handles.to_dict()
        if self.control_points is not None:
            data["controlPoints"] = [p.to_dict() for p in self.control_points]
        if self.routing_type is not None:
            data["routingType"] = self.routing_type.value
        return {"id": self.id, "source": self.source, "target": self.target, "data": data}

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> ConnectorRecord:
        """
        Load a stored connector.

        Routing fields are read from the nested ``data`` mapping, falling back
        to the top level. Missing or malformed routing fields load as None.
        """
        data = record.get("data")
        if not isinstance(data, dict):
            data = record

        metrics = data.get("routingMetrics")
        routing_type = data.get("routingType")
        return cls(
            id=str(record.get("id", "")),
            source=str(record.get("source", "")),
            target=str(record.get("target", "")),
            routing_metrics=RoutingMetrics.from_dict(metrics) if isinstance(metrics, dict) else None,
            selected_handles=SelectedHandles.from_dict(data.get("selectedHandles")),
            control_points=_parse_points(data.get("controlPoints")),
            routing_type=_parse_routing_type(routing_type),
        )


def _parse_points(raw: Any) -> Optional[tuple[Point, ...]]:
    if not isinstance(raw, (list, tuple)):
        return None
    try:
        return tuple(Point.from_dict(p) for p in raw)
    except (KeyError, TypeError, ValueError):
        return None


def _parse_routing_type(raw: Any) -> Optional[RoutingType]:
    if raw is None:
        return None
    try:
        return RoutingType(raw)
    except ValueError:
        return None


def assess_routing_state(record: ConnectorRecord) -> RoutingState:
    """
    Classify a stored connector.

    COMPLETE records carry both metrics and selected handles and can be drawn
    as stored. PARTIAL records carry some routing data that is reused while
    the rest is recomputed. LEGACY records carry none.
    """
    if record.routing_metrics is not None and record.selected_handles is not None:
        return RoutingState.COMPLETE
    if (
        record.routing_metrics is not None
        or record.selected_handles is not None
        or record.routing_type is not None
    ):
        return RoutingState.PARTIAL
    return RoutingState.LEGACY


def route_connector(
    record: ConnectorRecord,
    source_node: NodeInfo,
    target_node: NodeInfo,
    engine: OrthogonalRoutingEngine,
    selector: HandleSelectionService,
) -> ConnectorRecord:
    """
    Fill in missing routing data on a stored connector.

    Complete records are returned as they are. Partial records keep their
    selected handles, stored routing type (as the preferred ordering) and
    control points. Legacy records get everything computed from scratch.
    When the nodes offer no valid handle pair the record is returned
    unchanged, and the caller draws a straight line instead.

    Args:
        record: Stored connector
        source_node: Current snapshot of the connector's source node
        target_node: Current snapshot of the connector's target node
        engine: Routing engine used for the path
        selector: Handle selection service used when no handles are stored

    Returns:
        The updated record
    """
    state = assess_routing_state(record)
    if state is RoutingState.COMPLETE:
        return record

    handles = record.selected_handles if state is RoutingState.PARTIAL else None
    if handles is None:
        try:
            best = selector.find_optimal_handles(source_node, target_node)
        except NoValidHandlesError:
            return record
        handles = SelectedHandles(best.source_handle, best.target_handle)

    options = RoutingOptions(
        preferred_routing=record.routing_type if state is RoutingState.PARTIAL else None,
        source_bounds=source_node.bounds,
        target_bounds=target_node.bounds,
    )
    path = engine.calculate_path(handles.source, handles.target, options)
    metrics = engine.calculate_routing_metrics(path, handles.source, handles.target)

    control_points = record.control_points if state is RoutingState.PARTIAL else None
    if control_points is None:
        control_points = tuple(path.waypoints())

    return dataclasses.replace(
        record,
        routing_metrics=metrics,
        selected_handles=handles,
        control_points=control_points,
        routing_type=path.routing_type,
    )


__all__ = [
    "RoutingState",
    "SelectedHandles",
    "ConnectorRecord",
    "assess_routing_state",
    "route_connector",
]
