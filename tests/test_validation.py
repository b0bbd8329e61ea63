"""Tests for input validation module."""

import math

import pytest

from connector_routing.validation import (
    InvalidSegmentError,
    NoValidHandlesError,
    RoutingError,
    ValidationError,
    validate_cache_size,
    validate_distance,
    validate_iterations,
    validate_segment_index,
    validate_tolerance,
)


class TestToleranceValidation:
    """Tests for tolerance validation."""

    def test_valid_tolerance(self):
        """Valid tolerance is returned as float."""
        assert validate_tolerance(5) == 5.0

    def test_zero_tolerance(self):
        """Zero tolerance is allowed."""
        assert validate_tolerance(0) == 0.0

    def test_negative_raises(self):
        """Negative tolerance raises ValidationError."""
        with pytest.raises(ValidationError, match="tolerance must be"):
            validate_tolerance(-1)

    def test_nan_raises(self):
        """NaN tolerance raises ValidationError."""
        with pytest.raises(ValidationError):
            validate_tolerance(math.nan)


class TestDistanceValidation:
    """Tests for distance validation."""

    def test_valid_distance(self):
        """Valid distance is returned as float."""
        assert validate_distance(50) == 50.0

    def test_negative_raises(self):
        """Negative distance raises ValidationError."""
        with pytest.raises(ValidationError, match="distance must be"):
            validate_distance(-0.5)

    def test_infinite_raises(self):
        """Infinite distance raises ValidationError."""
        with pytest.raises(ValidationError):
            validate_distance(math.inf)


class TestIterationsValidation:
    """Tests for iterations validation."""

    def test_valid_iterations(self):
        """Valid iterations returns value."""
        assert validate_iterations(100) == 100

    def test_one_iteration(self):
        """Single iteration is valid."""
        assert validate_iterations(1) == 1

    def test_zero_raises(self):
        """Zero iterations raises ValidationError."""
        with pytest.raises(ValidationError, match="iterations must be >= 1"):
            validate_iterations(0)

    def test_negative_raises(self):
        """Negative iterations raises ValidationError."""
        with pytest.raises(ValidationError, match="iterations must be >= 1"):
            validate_iterations(-5)


class TestCacheSizeValidation:
    """Tests for cache capacity validation."""

    def test_valid_size(self):
        """Positive capacity is accepted."""
        assert validate_cache_size(16) == 16

    def test_zero_raises(self):
        """Zero capacity raises ValidationError."""
        with pytest.raises(ValidationError, match="cache size must be >= 1"):
            validate_cache_size(0)


class TestSegmentIndexValidation:
    """Tests for segment index clamping."""

    def test_in_range(self):
        """In-range index is returned unchanged."""
        assert validate_segment_index(2, 4) == 2

    def test_negative_clamped(self):
        """Negative index clamps to the first segment."""
        assert validate_segment_index(-3, 4) == 0

    def test_past_end_clamped(self):
        """Index past the end clamps to the last segment."""
        assert validate_segment_index(10, 4) == 3

    def test_empty_path_raises(self):
        """A path without segments has no valid index."""
        with pytest.raises(ValidationError, match="no segments"):
            validate_segment_index(0, 0)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_validation_error_is_value_error(self):
        """ValidationError inherits from ValueError."""
        assert issubclass(ValidationError, ValueError)

    def test_segment_error_is_validation_error(self):
        """InvalidSegmentError inherits from ValidationError."""
        assert issubclass(InvalidSegmentError, ValidationError)

    def test_routing_errors(self):
        """NoValidHandlesError is a RoutingError."""
        assert issubclass(RoutingError, ValidationError)
        assert issubclass(NoValidHandlesError, RoutingError)

    def test_can_catch_as_value_error(self):
        """Validation errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_iterations(0)
