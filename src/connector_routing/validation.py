"""
Error types and parameter validation for connector routing.

Provides a small exception hierarchy rooted at ``ValidationError`` and
centralized validators for the numeric knobs exposed by the routing
services. Raises descriptive exceptions on invalid input.
"""

from __future__ import annotations

import math


class ValidationError(ValueError):
    """Base exception for routing validation errors."""

    pass


class InvalidSegmentError(ValidationError):
    """Raised when a path segment is not axis-aligned."""

    pass


class RoutingError(ValidationError):
    """Base exception for routing failures."""

    pass


class NoValidHandlesError(RoutingError):
    """Raised when two nodes have no source/target handle pair to connect."""

    pass


class CollisionResolutionWarning(UserWarning):
    """Warning for control points still overlapping a node after resolution."""

    pass


def validate_tolerance(tolerance: float) -> float:
    """
    Validate a geometric tolerance.

    Args:
        tolerance: Tolerance in diagram units

    Returns:
        Validated tolerance as float

    Raises:
        ValidationError: If tolerance is negative or not finite
    """
    value = float(tolerance)
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"tolerance must be a finite value >= 0, got {tolerance}")
    return value


def validate_distance(distance: float) -> float:
    """
    Validate a displacement distance.

    Raises:
        ValidationError: If distance is negative or not finite
    """
    value = float(distance)
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"distance must be a finite value >= 0, got {distance}")
    return value


def validate_iterations(iterations: int) -> int:
    """
    Validate iteration count is positive.

    Args:
        iterations: Number of iterations

    Returns:
        Validated iteration count

    Raises:
        ValidationError: If iterations < 1
    """
    if iterations < 1:
        raise ValidationError(f"iterations must be >= 1, got {iterations}")
    return int(iterations)


def validate_cache_size(size: int) -> int:
    """
    Validate a cache capacity.

    Raises:
        ValidationError: If size < 1
    """
    if size < 1:
        raise ValidationError(f"cache size must be >= 1, got {size}")
    return int(size)


def validate_segment_index(index: int, segment_count: int) -> int:
    """
    Clamp a segment index into ``[0, segment_count - 1]``.

    Interactive callers may hand over an index computed against a path that
    has since been simplified, so out-of-range values are clamped rather
    than rejected.

    Raises:
        ValidationError: If the path has no segments
    """
    if segment_count < 1:
        raise ValidationError("path has no segments")
    return min(max(0, int(index)), segment_count - 1)


__all__ = [
    "ValidationError",
    "InvalidSegmentError",
    "RoutingError",
    "NoValidHandlesError",
    "CollisionResolutionWarning",
    "validate_tolerance",
    "validate_distance",
    "validate_iterations",
    "validate_cache_size",
    "validate_segment_index",
]
