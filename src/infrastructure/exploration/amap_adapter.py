"""Amap reverse-geocoding adapter for RoadSnapper.

Implements road snapping by calling the Amap Web-service ``regeo`` endpoint
with ``extensions=all`` (which includes nearby roads) and taking the first
road as the nearest one.

Lifecycle of one snap:
1) Format the point as "longitude,latitude" (Amap expects longitude first)
2) HTTP GET with key, location, radius, extensions and roadlevel
3) Validate HTTP status, then the Amap ``status`` flag ("1" = success)
4) Take ``regeocode.roads[0].location`` and parse "longitude,latitude"
5) Build a Coordinate (range-checked by the Value Object)

Any failure along the way becomes ``Unavailable``; ``snap`` never raises.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from domain.exploration.errors import RoadSnapError
from domain.exploration.value_objects import (
    Coordinate,
    Snapped,
    SnapOutcome,
    Unavailable,
)

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

DEFAULT_REGEO_URL = "https://restapi.amap.com/v3/geocode/regeo"
_AMAP_OK = "1"


def parse_lon_lat(location: Any) -> tuple[float, float]:
    """Parse an Amap ``"longitude,latitude"`` string.

    Returns:
        Tuple of (longitude, latitude)

    Raises:
        ValueError: If the string does not hold exactly two numbers
    """
    if not isinstance(location, str):
        raise ValueError(f"Location must be a string, got {type(location).__name__}")
    parts = location.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected 'lon,lat', got {location!r}")
    return (float(parts[0].strip()), float(parts[1].strip()))


class AmapRoadSnapper:
    """Infrastructure adapter snapping coordinates to roads via Amap.

    Parameters
    ----------
    api_key: str
        Amap Web-service key (not a JS API key).
    base_url: str
        Reverse-geocoding endpoint.
    radius_m: int
        Search radius around the point, in meters.
    timeout_s: float
        Timeout for the HTTP request, in seconds.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_REGEO_URL,
        radius_m: int = 1000,
        timeout_s: float = 3.0,
    ) -> None:
        if not api_key:
            raise ValueError("Amap API key is required")
        self.api_key = api_key
        self.base_url = base_url
        self.radius_m = radius_m
        self.timeout_s = timeout_s

    def snap(self, point: Coordinate) -> SnapOutcome:
        """Return the nearest road coordinate, or Unavailable on any failure."""
        try:
            payload = self._request(point)
            road = self._nearest_road(point, payload)
        except RoadSnapError as e:
            logger.warning("Road snapping unavailable: %s", e)
            return Unavailable(reason=e.reason)
        except requests.RequestException as e:
            # Timeouts and connection errors; never log the URL (it holds the key)
            logger.warning(
                "Road snapping request failed for (%.6f, %.6f): %s",
                point.latitude,
                point.longitude,
                type(e).__name__,
            )
            return Unavailable(reason="request_failed")

        logger.debug(
            "Snapped (%.6f, %.6f) -> (%.6f, %.6f)",
            point.latitude,
            point.longitude,
            road.latitude,
            road.longitude,
        )
        return Snapped(coordinate=road)

    def _request(self, point: Coordinate) -> dict[str, Any]:
        response = requests.get(
            self.base_url,
            params={
                "key": self.api_key,
                "location": point.as_lon_lat(),
                "radius": self.radius_m,
                "extensions": "all",  # "all" includes pois and roads
                "roadlevel": 0,
            },
            timeout=self.timeout_s,
        )
        if response.status_code != 200:
            raise RoadSnapError(point, f"http_{response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise RoadSnapError(point, "invalid_json") from e
        if not isinstance(payload, dict):
            raise RoadSnapError(point, "invalid_json")

        if payload.get("status") != _AMAP_OK:
            # infocode/info describe the failure (quota, bad key, ...)
            raise RoadSnapError(
                point,
                f"amap_status_{payload.get('status')}:{payload.get('infocode', 'unknown')}",
            )
        return payload

    def _nearest_road(self, point: Coordinate, payload: dict[str, Any]) -> Coordinate:
        # Amap encodes empty objects/lists as [] so check types explicitly
        regeocode = payload.get("regeocode")
        if not isinstance(regeocode, dict):
            raise RoadSnapError(point, "no_regeocode")

        roads = regeocode.get("roads")
        if not isinstance(roads, list) or not roads:
            raise RoadSnapError(point, "no_roads")

        nearest = roads[0]
        if not isinstance(nearest, dict):
            raise RoadSnapError(point, "malformed_road")

        try:
            lon, lat = parse_lon_lat(nearest.get("location"))
            return Coordinate(latitude=lat, longitude=lon)
        except ValidationError as e:
            raise RoadSnapError(point, "road_out_of_range") from e
        except ValueError as e:
            raise RoadSnapError(point, "malformed_location") from e


class DisabledRoadSnapper:
    """RoadSnapper used when no Amap key is configured.

    Every snap is Unavailable, so callers receive raw candidates.
    """

    def snap(self, point: Coordinate) -> SnapOutcome:
        return Unavailable(reason="disabled")
