"""Tests for exploration Value Objects (construction-time validation)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from domain.exploration.errors import RoadSnapError
from domain.exploration.value_objects import (
    AnnulusSpec,
    Coordinate,
    PathSpec,
    SamplingResult,
    Snapped,
    Unavailable,
)


# ===========================================================================
# Coordinate
# ===========================================================================
@pytest.mark.parametrize(
    "latitude, longitude",
    [(-90.0, -180.0), (90.0, 180.0), (0.0, 0.0), (31.23, 121.47)],
)
def test_coordinate_accepts_valid_range(latitude, longitude):
    point = Coordinate(latitude=latitude, longitude=longitude)
    assert point.latitude == latitude
    assert point.longitude == longitude


@pytest.mark.parametrize(
    "latitude, longitude",
    [(90.1, 0.0), (-90.1, 0.0), (0.0, 180.1), (0.0, -180.1), (float("nan"), 0.0)],
)
def test_coordinate_rejects_out_of_range(latitude, longitude):
    with pytest.raises(ValidationError):
        Coordinate(latitude=latitude, longitude=longitude)


def test_coordinate_is_immutable_and_compared_by_value():
    point = Coordinate(latitude=1.0, longitude=2.0)
    assert point == Coordinate(latitude=1.0, longitude=2.0)
    assert hash(point) == hash(Coordinate(latitude=1.0, longitude=2.0))
    with pytest.raises(ValidationError):
        point.latitude = 3.0


def test_coordinate_lon_lat_format():
    point = Coordinate(latitude=31.23, longitude=121.47)
    assert point.as_lon_lat() == "121.470000,31.230000"


# ===========================================================================
# AnnulusSpec
# ===========================================================================
def test_annulus_accepts_equal_radii(shanghai):
    spec = AnnulusSpec(center=shanghai, min_radius_km=5, max_radius_km=5)
    assert spec.min_radius_km == spec.max_radius_km


def test_annulus_rejects_inverted_radii(shanghai):
    with pytest.raises(ValidationError, match="must not exceed"):
        AnnulusSpec(center=shanghai, min_radius_km=50, max_radius_km=10)


def test_annulus_rejects_negative_radius(shanghai):
    with pytest.raises(ValidationError):
        AnnulusSpec(center=shanghai, min_radius_km=-1, max_radius_km=10)


def test_annulus_rejects_infinite_radius(shanghai):
    with pytest.raises(ValidationError, match="finite"):
        AnnulusSpec(center=shanghai, min_radius_km=0, max_radius_km=float("inf"))


def test_validation_error_is_value_error(shanghai):
    """Callers at the boundary can treat invalid input as ValueError."""
    with pytest.raises(ValueError):
        AnnulusSpec(center=shanghai, min_radius_km=3, max_radius_km=1)


# ===========================================================================
# PathSpec / SnapOutcome / SamplingResult
# ===========================================================================
def test_path_allows_identical_endpoints(shanghai):
    path = PathSpec(start=shanghai, end=shanghai)
    assert path.start == path.end


def test_snap_outcomes_are_distinct_types(shanghai):
    assert isinstance(Snapped(coordinate=shanghai), Snapped)
    assert Unavailable().reason == "unavailable"
    assert Unavailable(reason="no_roads").reason == "no_roads"


def test_sampling_result_unsnapped_requires_raw_point(shanghai):
    other = Coordinate(latitude=0.0, longitude=0.0)
    with pytest.raises(ValidationError, match="point == candidate"):
        SamplingResult(point=other, attempts=1, snapped=False, candidate=shanghai)


def test_sampling_result_requires_positive_attempts(shanghai):
    with pytest.raises(ValidationError):
        SamplingResult(point=shanghai, attempts=0, snapped=False, candidate=shanghai)


def test_road_snap_error_message(shanghai):
    error = RoadSnapError(shanghai, "no_roads")
    assert error.point == shanghai
    assert error.reason == "no_roads"
    assert "31.230000" in str(error)
    assert "no_roads" in str(error)
