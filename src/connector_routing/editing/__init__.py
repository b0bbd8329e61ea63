"""Interactive editing: segment drags, waypoint upkeep and orthogonality checks."""

from .constraints import (
    ConstraintValidationResult,
    DragAxis,
    MovementConstraint,
    OrthogonalValidation,
    SegmentCorrection,
    apply_movement_constraints,
    calculate_segment_constraints,
    check_path_intersections,
    enforce_orthogonal_path,
    is_orthogonal_segment,
    validate_orthogonal_path,
    validate_segment_movement,
)
from .segments import (
    EdgeSegment,
    SegmentDragHandler,
    SegmentDragState,
    calculate_segments,
    calculate_updated_control_points,
    find_target_segment,
)
from .waypoints import ConnectionAnalysis, OrthogonalWaypointManager, WaypointInsertionResult

__all__ = [
    # Waypoints
    "OrthogonalWaypointManager",
    "ConnectionAnalysis",
    "WaypointInsertionResult",
    # Segments
    "SegmentDragHandler",
    "SegmentDragState",
    "EdgeSegment",
    "calculate_segments",
    "calculate_updated_control_points",
    "find_target_segment",
    # Constraints
    "DragAxis",
    "MovementConstraint",
    "ConstraintValidationResult",
    "SegmentCorrection",
    "OrthogonalValidation",
    "is_orthogonal_segment",
    "validate_orthogonal_path",
    "enforce_orthogonal_path",
    "apply_movement_constraints",
    "calculate_segment_constraints",
    "validate_segment_movement",
    "check_path_intersections",
]
