"""Exploration Bounded Context - Value Objects.

Immutable data structures for random destination and waypoint generation.
All validation occurs at construction time via Pydantic, so coordinates parsed
from external responses are range-checked on ingestion.
"""

from __future__ import annotations

import math
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------
class Coordinate(BaseModel):
    """Geographic coordinate in WGS84 decimal degrees (Value Object).

    Invariants:
        latitude in [-90, 90]
        longitude in [-180, 180]

    Pydantic frozen models compare by value, so two Coordinates with the same
    latitude and longitude are equal and hash identically.
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    model_config = ConfigDict(frozen=True)

    def as_lon_lat(self) -> str:
        """Format as ``"longitude,latitude"`` (the order most map APIs expect)."""
        return f"{self.longitude:.6f},{self.latitude:.6f}"


# ---------------------------------------------------------------------------
# AnnulusSpec
# ---------------------------------------------------------------------------
class AnnulusSpec(BaseModel):
    """Ring-shaped search region around a center point (Value Object).

    Invariants:
        0 <= min_radius_km <= max_radius_km
        both radii finite
    """

    center: Coordinate
    min_radius_km: float = Field(ge=0)
    max_radius_km: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_radii(self) -> "AnnulusSpec":
        if not (math.isfinite(self.min_radius_km) and math.isfinite(self.max_radius_km)):
            raise ValueError(
                f"Radii must be finite: min={self.min_radius_km}, max={self.max_radius_km}"
            )
        if self.min_radius_km > self.max_radius_km:
            raise ValueError(
                f"min_radius_km ({self.min_radius_km}) must not exceed "
                f"max_radius_km ({self.max_radius_km})"
            )
        return self


# ---------------------------------------------------------------------------
# PathSpec
# ---------------------------------------------------------------------------
class PathSpec(BaseModel):
    """Route between two points used to place intermediate waypoints."""

    start: Coordinate
    end: Coordinate

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# SnapOutcome
# ---------------------------------------------------------------------------
class Snapped(BaseModel):
    """Road snapping succeeded; ``coordinate`` lies on the nearest known road."""

    coordinate: Coordinate

    model_config = ConfigDict(frozen=True)


class Unavailable(BaseModel):
    """Road snapping produced nothing usable; callers keep the raw point."""

    reason: str = "unavailable"

    model_config = ConfigDict(frozen=True)


SnapOutcome = Union[Snapped, Unavailable]


# ---------------------------------------------------------------------------
# SamplingResult
# ---------------------------------------------------------------------------
class SamplingResult(BaseModel):
    """Outcome of one sampling operation (Value Object).

    Fields:
        point: Coordinate returned to the caller (snapped when possible)
        attempts: Number of candidate proposals made (>= 1)
        snapped: True if ``point`` came from the road snapper
        rejected: True if the retry budget was exhausted and the fallback used
        candidate: The pre-snap coordinate that was handed to the snapper
    """

    point: Coordinate
    attempts: int = Field(ge=1)
    snapped: bool
    rejected: bool = False
    candidate: Coordinate

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_snap_consistency(self) -> "SamplingResult":
        # An unsnapped result is the raw candidate itself
        if not self.snapped and self.point != self.candidate:
            raise ValueError("snapped=False requires point == candidate")
        return self
