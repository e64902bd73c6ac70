"""Exploration Bounded Context - Domain Services.

Pure domain logic for random destination and waypoint generation.
NO I/O operations - road snapping and visit lookups are reached only through
the ports in `domain/exploration/repositories.py`.

Distances use a flat-earth equirectangular approximation (1 degree of
latitude ~ 111 km) that is only meaningful over short distances.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator

import numpy as np
from pyproj import Geod

from domain.exploration.errors import InvalidSamplingError
from domain.exploration.repositories import NeverVisited, RoadSnapper, VisitedPredicate
from domain.exploration.value_objects import (
    AnnulusSpec,
    Coordinate,
    PathSpec,
    SamplingResult,
    Snapped,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
KM_PER_DEGREE = 111.0  # Planar approximation for one degree of latitude
MIN_LONGITUDE_SCALE = 1e-6  # Floor for |cos(latitude)| near the poles

DEFAULT_MAX_ATTEMPTS = 20
WAYPOINT_PROGRESS_RANGE = (0.2, 0.8)  # Fraction of the path for the base point
WAYPOINT_DEVIATION_KM = (1.0, 3.0)  # Radius of the local deviation

# WGS84 ellipsoid, used only to measure (never to generate)
_geod = Geod(ellps="WGS84")


# ---------------------------------------------------------------------------
# Planar Geometry Helpers
# ---------------------------------------------------------------------------
def longitude_scale(latitude: float) -> float:
    """Return |cos(latitude)| floored at MIN_LONGITUDE_SCALE."""
    return max(abs(math.cos(math.radians(latitude))), MIN_LONGITUDE_SCALE)


def _wrap_longitude(longitude: float) -> float:
    if -180.0 <= longitude <= 180.0:
        return longitude
    return ((longitude + 180.0) % 360.0) - 180.0


def _clamp_latitude(latitude: float) -> float:
    return max(-90.0, min(90.0, latitude))


def planar_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Distance in km under the same equirectangular approximation as `offset`.

    The longitude scale is taken at ``a`` so that
    ``planar_distance_km(origin, offset(origin, d, d)) == d`` away from the
    poles and the antimeridian.
    """
    d_lat_km = (b.latitude - a.latitude) * KM_PER_DEGREE
    d_lon_km = (b.longitude - a.longitude) * KM_PER_DEGREE * longitude_scale(a.latitude)
    return math.hypot(d_lat_km, d_lon_km)


def geodesic_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Calculate WGS84 geodesic distance between two points in kilometres."""
    _, _, distance_m = _geod.inv(a.longitude, a.latitude, b.longitude, b.latitude)
    return float(abs(distance_m)) / 1000.0


def interpolate(start: Coordinate, end: Coordinate, fraction: float) -> Coordinate:
    """Linearly interpolate latitude and longitude independently.

    Valid for short paths that do not cross the antimeridian.
    """
    return Coordinate(
        latitude=start.latitude + (end.latitude - start.latitude) * fraction,
        longitude=start.longitude + (end.longitude - start.longitude) * fraction,
    )


# ---------------------------------------------------------------------------
# GeoOffset
# ---------------------------------------------------------------------------
def offset(
    origin: Coordinate,
    min_km: float,
    max_km: float,
    rng: np.random.Generator | None = None,
) -> Coordinate:
    """Return a random point at a uniform bearing and range from ``origin``.

    Bearing is drawn from [0, 360) degrees and distance from [min_km, max_km]
    (fixed when both are equal).

    Polar handling:
        The longitude scale cos(latitude) is floored at MIN_LONGITUDE_SCALE.
        The resulting latitude is clamped to [-90, 90] and the longitude is
        wrapped into [-180, 180], so the output is always a finite, valid
        Coordinate.

    Args:
        origin: Center of the offset
        min_km: Minimum distance in km (>= 0)
        max_km: Maximum distance in km (>= min_km)
        rng: Random generator; a fresh default generator if None

    Returns:
        Offset Coordinate

    Raises:
        ValueError: If the range is negative, inverted or non-finite
    """
    if not (math.isfinite(min_km) and math.isfinite(max_km)):
        raise ValueError(f"Distance range must be finite: [{min_km}, {max_km}]")
    if min_km < 0 or min_km > max_km:
        raise ValueError(f"Invalid distance range: [{min_km}, {max_km}]")

    if rng is None:
        rng = np.random.default_rng()

    bearing = math.radians(float(rng.uniform(0.0, 360.0)))
    distance_km = min_km if min_km == max_km else float(rng.uniform(min_km, max_km))

    d_lat = distance_km * math.cos(bearing) / KM_PER_DEGREE
    d_lon = (
        distance_km
        * math.sin(bearing)
        / (KM_PER_DEGREE * longitude_scale(origin.latitude))
    )

    return Coordinate(
        latitude=_clamp_latitude(origin.latitude + d_lat),
        longitude=_wrap_longitude(origin.longitude + d_lon),
    )


# ---------------------------------------------------------------------------
# Snapping Helper
# ---------------------------------------------------------------------------
def snap_or_passthrough(snapper: RoadSnapper, point: Coordinate) -> tuple[Coordinate, bool]:
    """Snap ``point`` to a road, falling back to ``point`` itself.

    Returns:
        Tuple of (coordinate, snapped)
    """
    outcome = snapper.snap(point)
    if isinstance(outcome, Snapped):
        return (outcome.coordinate, True)
    return (point, False)


# ---------------------------------------------------------------------------
# WaypointSampler
# ---------------------------------------------------------------------------
def waypoint_candidates(
    path: PathSpec,
    max_attempts: int,
    rng: np.random.Generator,
) -> Iterator[tuple[int, Coordinate]]:
    """Lazily propose up to ``max_attempts`` waypoint candidates.

    Each candidate is a random deviation of 1-3 km around a base point placed
    between 20% and 80% of the way along ``path``.

    Yields:
        Tuples of (attempt, candidate), attempt counting from 1
    """
    low, high = WAYPOINT_PROGRESS_RANGE
    dev_low, dev_high = WAYPOINT_DEVIATION_KM
    for attempt in range(1, max_attempts + 1):
        progress = float(rng.uniform(low, high))
        base = interpolate(path.start, path.end, progress)
        deviation_km = float(rng.uniform(dev_low, dev_high))
        yield attempt, offset(base, 0.0, deviation_km, rng)


def sample_waypoint(
    path: PathSpec,
    snapper: RoadSnapper,
    visited: VisitedPredicate | None = None,
    use_visited_filter: bool = True,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: np.random.Generator | None = None,
) -> SamplingResult:
    """Pick an intermediate waypoint along ``path`` by rejection sampling.

    Candidates are filtered with ``visited`` before the road snapper is
    called, so the expensive external lookup happens at most once per call:
    on the accepted candidate, or on the fallback.

    Fallback:
        If every candidate is flagged as visited, ``path.start`` is snapped
        (or passed through) and returned with rejected=True and
        attempts=max_attempts.

    Args:
        path: Start and end of the route
        snapper: RoadSnapper port
        visited: VisitedPredicate port; NeverVisited if None
        use_visited_filter: If False, ``visited`` is never consulted
        max_attempts: Retry budget (>= 1)
        rng: Random generator; a fresh default generator if None

    Returns:
        SamplingResult for the accepted candidate or the fallback

    Raises:
        InvalidSamplingError: If max_attempts < 1
    """
    if max_attempts < 1:
        raise InvalidSamplingError(f"max_attempts must be >= 1, got {max_attempts}")

    if visited is None:
        visited = NeverVisited()
    if rng is None:
        rng = np.random.default_rng()

    for attempt, candidate in waypoint_candidates(path, max_attempts, rng):
        if use_visited_filter and visited.is_visited(candidate):
            logger.debug(
                "Waypoint attempt %d/%d: (%.6f, %.6f) already visited",
                attempt,
                max_attempts,
                candidate.latitude,
                candidate.longitude,
            )
            continue

        point, snapped = snap_or_passthrough(snapper, candidate)
        return SamplingResult(
            point=point,
            attempts=attempt,
            snapped=snapped,
            rejected=False,
            candidate=candidate,
        )

    # TODO: revisit whether the fallback should use the last candidate instead
    # of path.start once the visited-track store is live.
    logger.info(
        "No unvisited waypoint after %d attempts; falling back to path start",
        max_attempts,
    )
    point, snapped = snap_or_passthrough(snapper, path.start)
    return SamplingResult(
        point=point,
        attempts=max_attempts,
        snapped=snapped,
        rejected=True,
        candidate=path.start,
    )


# ---------------------------------------------------------------------------
# RandomPointGenerator
# ---------------------------------------------------------------------------
def sample_random_point(
    spec: AnnulusSpec,
    snapper: RoadSnapper,
    rng: np.random.Generator | None = None,
) -> SamplingResult:
    """Pick a random destination inside the annulus and snap it to a road.

    Single shot: one offset, one snap call, no retry and no visited filtering.

    Example:
        >>> spec = AnnulusSpec(
        ...     center=Coordinate(latitude=31.23, longitude=121.47),
        ...     min_radius_km=10,
        ...     max_radius_km=50,
        ... )
        >>> result = sample_random_point(spec, snapper)
        >>> print(result.point, result.snapped)
    """
    candidate = offset(spec.center, spec.min_radius_km, spec.max_radius_km, rng)
    point, snapped = snap_or_passthrough(snapper, candidate)
    return SamplingResult(
        point=point,
        attempts=1,
        snapped=snapped,
        rejected=False,
        candidate=candidate,
    )
