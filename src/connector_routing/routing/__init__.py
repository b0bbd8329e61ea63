"""Handle selection, path generation and the caching routing engine."""

from .engine import (
    DEFAULT_CACHE_SIZE,
    CacheStats,
    OrthogonalRoutingEngine,
    RoutingComparison,
    RoutingOptions,
    handle_combination_label,
)
from .handles import HandleEvaluation, HandleSelectionService, determine_preferred_routing_type
from .paths import (
    ORTHOGONAL_ALIGNMENT_TOLERANCE,
    SEGMENT_EPSILON,
    SELF_LOOP_BUILDERS,
    apply_alignment_tolerance,
    approach_distance,
    build_orthogonal_path,
    calculate_path_length,
    compare_orthogonal_paths,
    create_orthogonal_path,
    create_perpendicular_path,
    create_self_loop_path,
    generate_control_points,
    generate_horizontal_first_path,
    generate_path,
    generate_vertical_first_path,
    self_loop_extension,
    self_loop_points,
)

__all__ = [
    # Engine
    "OrthogonalRoutingEngine",
    "RoutingOptions",
    "RoutingComparison",
    "CacheStats",
    "DEFAULT_CACHE_SIZE",
    "handle_combination_label",
    # Handle selection
    "HandleSelectionService",
    "HandleEvaluation",
    "determine_preferred_routing_type",
    # Paths
    "ORTHOGONAL_ALIGNMENT_TOLERANCE",
    "SEGMENT_EPSILON",
    "SELF_LOOP_BUILDERS",
    "apply_alignment_tolerance",
    "approach_distance",
    "build_orthogonal_path",
    "calculate_path_length",
    "compare_orthogonal_paths",
    "create_orthogonal_path",
    "create_perpendicular_path",
    "create_self_loop_path",
    "generate_control_points",
    "generate_horizontal_first_path",
    "generate_path",
    "generate_vertical_first_path",
    "self_loop_extension",
    "self_loop_points",
]
