"""
Type definitions for orthogonal connector routing.

Provides the value objects exchanged between the rendering layer and the
routing core:

- Point: Immutable 2-D coordinate in diagram space
- Side / HandleType / RoutingType / Direction: Enumerations
- HandleInfo, NodeBounds, NodeInfo: Read-only node snapshots
- PathSegment, ControlPoint, OrthogonalPath: Routed geometry
- HandleCombination, RoutingMetrics: Scoring and persisted summaries

Diagram space uses a top-left origin with y growing downward.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from typing_extensions import Self

from .validation import InvalidSegmentError

# Coordinates closer than this are treated as equal on an axis.
AXIS_EPSILON = 1e-6


@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Self:
        """Return a copy translated by (dx, dy)."""
        return type(self)(self.x + dx, self.y + dy)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def is_finite(self) -> bool:
        """True if both coordinates are finite numbers."""
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Any) -> Point:
        """Build a point from a ``{"x", "y"}`` mapping or an ``(x, y)`` pair."""
        if isinstance(data, Point):
            return cls(data.x, data.y)
        if isinstance(data, dict):
            return cls(float(data.get("x", 0.0)), float(data.get("y", 0.0)))
        x, y = data
        return cls(float(x), float(y))


class Side(Enum):
    """Side of a node a handle sits on."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    def opposite(self) -> Side:
        """Get the opposite side."""
        return _OPPOSITE_SIDE[self]

    def is_horizontal(self) -> bool:
        """Check if a connector meets this side with a horizontal segment."""
        return self in (Side.LEFT, Side.RIGHT)

    def is_vertical(self) -> bool:
        """Check if a connector meets this side with a vertical segment."""
        return self in (Side.TOP, Side.BOTTOM)

    def outward(self) -> tuple[float, float]:
        """Unit vector pointing away from the node through this side."""
        return _OUTWARD[self]

    @property
    def order(self) -> int:
        """Tie-break rank: top < right < bottom < left."""
        return _SIDE_ORDER[self]


_OPPOSITE_SIDE: dict[Side, Side] = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}

_OUTWARD: dict[Side, tuple[float, float]] = {
    Side.TOP: (0.0, -1.0),
    Side.RIGHT: (1.0, 0.0),
    Side.BOTTOM: (0.0, 1.0),
    Side.LEFT: (-1.0, 0.0),
}

_SIDE_ORDER: dict[Side, int] = {
    Side.TOP: 0,
    Side.RIGHT: 1,
    Side.BOTTOM: 2,
    Side.LEFT: 3,
}


class HandleType(Enum):
    """Role a handle plays in a connection."""

    SOURCE = "source"
    TARGET = "target"


class RoutingType(Enum):
    """Which axis a two-segment path travels first."""

    HORIZONTAL_FIRST = "horizontal-first"
    VERTICAL_FIRST = "vertical-first"


class Direction(Enum):
    """Orientation of a path segment."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class HandleInfo:
    """
    A fixed connection point on a node's boundary.

    Handles are computed by the rendering layer whenever a node moves or
    resizes; the routing core only consumes them.
    """

    id: str
    node_id: str
    position: Point
    side: Side
    type: HandleType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nodeId": self.node_id,
            "position": self.position.to_dict(),
            "side": self.side.value,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HandleInfo:
        return cls(
            id=str(data["id"]),
            node_id=str(data.get("nodeId", data.get("node_id", ""))),
            position=Point.from_dict(data["position"]),
            side=Side(data["side"]),
            type=HandleType(data["type"]),
        )


@dataclass(frozen=True)
class NodeBounds:
    """Axis-aligned node rectangle (top-left origin)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        """Check if point lies inside or on the border of the box."""
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom

    def inflate(self, margin: float) -> Self:
        """Return a copy grown by ``margin`` on every side."""
        return type(self)(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )


@dataclass(frozen=True)
class NodeInfo:
    """Read-only node snapshot passed into handle selection."""

    id: str
    bounds: NodeBounds
    handles: Sequence[HandleInfo] = ()

    def source_handles(self) -> list[HandleInfo]:
        return [h for h in self.handles if h.type is HandleType.SOURCE]

    def target_handles(self) -> list[HandleInfo]:
        return [h for h in self.handles if h.type is HandleType.TARGET]


@dataclass(frozen=True)
class PathSegment:
    """
    An axis-aligned segment of an orthogonal path.

    ``start`` and ``end`` must be finite and may differ in one axis only;
    ``length`` is the absolute delta on that axis and is derived, not passed in.
    """

    start: Point
    end: Point
    direction: Direction
    length: float = field(init=False)

    def __post_init__(self) -> None:
        # NaN compares False against AXIS_EPSILON and would pass the axis checks
        if not (self.start.is_finite() and self.end.is_finite()):
            raise InvalidSegmentError(
                f"segment {self.start} -> {self.end} has a non-finite coordinate"
            )
        dx = abs(self.end.x - self.start.x)
        dy = abs(self.end.y - self.start.y)
        if self.direction is Direction.HORIZONTAL:
            if dy > AXIS_EPSILON:
                raise InvalidSegmentError(
                    f"horizontal segment {self.start} -> {self.end} changes y by {dy}"
                )
            object.__setattr__(self, "length", dx)
        else:
            if dx > AXIS_EPSILON:
                raise InvalidSegmentError(
                    f"vertical segment {self.start} -> {self.end} changes x by {dx}"
                )
            object.__setattr__(self, "length", dy)

    @classmethod
    def between(cls, start: Point, end: Point) -> PathSegment:
        """Build a segment, inferring its direction from the changing axis."""
        dx = abs(end.x - start.x)
        dy = abs(end.y - start.y)
        if dx > AXIS_EPSILON and dy > AXIS_EPSILON:
            raise InvalidSegmentError(f"segment {start} -> {end} is not axis-aligned")
        direction = Direction.HORIZONTAL if dx >= dy else Direction.VERTICAL
        return cls(start, end, direction)


@dataclass(frozen=True)
class ControlPoint:
    """A corner of a rendered path."""

    x: float
    y: float
    type: str = "corner"  # "corner" or "intermediate"

    def to_point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class OrthogonalPath:
    """
    A routed connector.

    ``control_points`` is the ordered corner sequence including both
    endpoints: ``len(segments) + 1`` points, or a single point when source
    and target coincide. Paths are shared through the engine cache, so
    both sequences are tuples.
    """

    segments: tuple[PathSegment, ...]
    total_length: float
    routing_type: RoutingType
    efficiency: float
    control_points: tuple[ControlPoint, ...] = ()

    def points(self) -> list[Point]:
        """Control points as plain points."""
        return [cp.to_point() for cp in self.control_points]

    def waypoints(self) -> list[Point]:
        """Intermediate corners only (endpoints excluded)."""
        return self.points()[1:-1]


@dataclass(frozen=True)
class HandleCombination:
    """A scored (source handle, target handle) candidate."""

    source_handle: HandleInfo
    target_handle: HandleInfo
    manhattan_distance: float
    path_length: float
    efficiency: float
    routing_type: RoutingType


@dataclass(frozen=True)
class RoutingMetrics:
    """Serializable routing summary stored on a connector."""

    path_length: float
    segment_count: int
    routing_type: RoutingType
    efficiency: float
    handle_combination: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "pathLength": self.path_length,
            "segmentCount": self.segment_count,
            "routingType": self.routing_type.value,
            "efficiency": self.efficiency,
            "handleCombination": self.handle_combination,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Optional[RoutingMetrics]:
        """Parse a persisted record; returns None if any field is missing."""
        try:
            return cls(
                path_length=float(data["pathLength"]),
                segment_count=int(data["segmentCount"]),
                routing_type=RoutingType(data["routingType"]),
                efficiency=float(data["efficiency"]),
                handle_combination=str(data["handleCombination"]),
            )
        except (KeyError, TypeError, ValueError):
            return None


__all__ = [
    "AXIS_EPSILON",
    "Point",
    "Side",
    "HandleType",
    "RoutingType",
    "Direction",
    "HandleInfo",
    "NodeBounds",
    "NodeInfo",
    "PathSegment",
    "ControlPoint",
    "OrthogonalPath",
    "HandleCombination",
    "RoutingMetrics",
]
