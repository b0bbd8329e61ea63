"""
connector-routing: Orthogonal connector routing for diagram editors.

This package computes the axis-aligned connectors drawn between nodes of a
visual diagram editor.

Available components:
- routing: handle selection, path generation and the caching routing engine
- editing: segment drags, waypoint upkeep and orthogonality checks
- collision: pushes connector corners out of node bodies
- persistence: stored connector records and their re-routing
"""

__version__ = "0.1.0"

# Control-point collision resolution
from .collision import CollisionAdjustment, CollisionResolver

# Interactive editing
from .editing import (
    ConnectionAnalysis,
    EdgeSegment,
    OrthogonalValidation,
    OrthogonalWaypointManager,
    SegmentDragHandler,
    SegmentDragState,
    WaypointInsertionResult,
    enforce_orthogonal_path,
    validate_orthogonal_path,
)

# Distance utilities
from .geometry import (
    euclidean_distance,
    handle_manhattan_distance,
    manhattan_distance,
    routing_efficiency,
)

# Persistence boundary
from .persistence import (
    ConnectorRecord,
    RoutingState,
    SelectedHandles,
    assess_routing_state,
    route_connector,
)

# Routing
from .routing import (
    ORTHOGONAL_ALIGNMENT_TOLERANCE,
    CacheStats,
    HandleEvaluation,
    HandleSelectionService,
    OrthogonalRoutingEngine,
    RoutingComparison,
    RoutingOptions,
    create_orthogonal_path,
    create_perpendicular_path,
    create_self_loop_path,
)
from .types import (
    ControlPoint,
    Direction,
    HandleCombination,
    HandleInfo,
    HandleType,
    NodeBounds,
    NodeInfo,
    OrthogonalPath,
    PathSegment,
    Point,
    RoutingMetrics,
    RoutingType,
    Side,
)

# Validation utilities
from .validation import (
    CollisionResolutionWarning,
    InvalidSegmentError,
    NoValidHandlesError,
    RoutingError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
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
    # Distance utilities
    "manhattan_distance",
    "handle_manhattan_distance",
    "euclidean_distance",
    "routing_efficiency",
    # Routing
    "OrthogonalRoutingEngine",
    "RoutingOptions",
    "RoutingComparison",
    "CacheStats",
    "HandleSelectionService",
    "HandleEvaluation",
    "ORTHOGONAL_ALIGNMENT_TOLERANCE",
    "create_orthogonal_path",
    "create_perpendicular_path",
    "create_self_loop_path",
    # Editing
    "OrthogonalWaypointManager",
    "ConnectionAnalysis",
    "WaypointInsertionResult",
    "SegmentDragHandler",
    "SegmentDragState",
    "EdgeSegment",
    "OrthogonalValidation",
    "validate_orthogonal_path",
    "enforce_orthogonal_path",
    # Collision resolution
    "CollisionResolver",
    "CollisionAdjustment",
    # Persistence
    "ConnectorRecord",
    "SelectedHandles",
    "RoutingState",
    "assess_routing_state",
    "route_connector",
    # Validation
    "ValidationError",
    "InvalidSegmentError",
    "RoutingError",
    "NoValidHandlesError",
    "CollisionResolutionWarning",
]
