"""Visited-track adapters for the VisitedPredicate port.

Two implementations:
- TrackProximityStore: in-memory track, "visited" means within a proximity
  threshold (WGS84 geodesic distance) of any recorded track point.
- FailOpenVisitedPredicate: wraps any predicate with a timeout and reports
  "not visited" when the delegate errors or is too slow.

Nothing here persists data; tracks are supplied by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import numpy as np
from pyproj import Geod

from domain.exploration.repositories import VisitedPredicate
from domain.exploration.value_objects import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_PROXIMITY_M = 500.0

# WGS84 ellipsoid for geodesic calculations (same as GPS, EPSG:4326)
_geod = Geod(ellps="WGS84")


class TrackProximityStore:
    """VisitedPredicate backed by an in-memory sequence of track points.

    Track coordinates are stored as two read-only float64 arrays so that one
    vectorised ``Geod.inv`` call measures the distance to every point.
    """

    def __init__(
        self,
        track: Iterable[Coordinate],
        proximity_m: float = DEFAULT_PROXIMITY_M,
    ) -> None:
        if proximity_m <= 0:
            raise ValueError("proximity_m must be positive")
        points = list(track)
        self.proximity_m = proximity_m
        self._lats = np.array([p.latitude for p in points], dtype=np.float64)
        self._lons = np.array([p.longitude for p in points], dtype=np.float64)
        self._lats.flags.writeable = False
        self._lons.flags.writeable = False

    def __len__(self) -> int:
        return int(self._lats.size)

    def is_visited(self, point: Coordinate) -> bool:
        if self._lats.size == 0:
            return False
        _, _, distances = _geod.inv(
            np.full_like(self._lons, point.longitude),
            np.full_like(self._lats, point.latitude),
            self._lons,
            self._lats,
        )
        return bool(np.any(np.abs(distances) <= self.proximity_m))


class FailOpenVisitedPredicate:
    """Guard a VisitedPredicate with a timeout; errors mean "not visited".

    Blocking exploration on this check is worse than an occasional re-visit,
    so a slow or failing delegate never stalls the sampling loop.

    Parameters
    ----------
    delegate: VisitedPredicate
        The predicate to guard.
    timeout_s: float
        Maximum time to wait for the delegate per call.
    """

    def __init__(self, delegate: VisitedPredicate, timeout_s: float = 1.0) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        self.delegate = delegate
        self.timeout_s = timeout_s
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="visited-check"
        )

    def is_visited(self, point: Coordinate) -> bool:
        future = self._executor.submit(self.delegate.is_visited, point)
        try:
            return bool(future.result(timeout=self.timeout_s))
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                "Visited check timed out after %.2fs for (%.6f, %.6f); assuming not visited",
                self.timeout_s,
                point.latitude,
                point.longitude,
            )
        except Exception as e:  # fail open on any delegate failure
            logger.warning(
                "Visited check failed for (%.6f, %.6f): %s; assuming not visited",
                point.latitude,
                point.longitude,
                e,
            )
        return False

    def close(self) -> None:
        """Release the worker thread without waiting for a hung delegate."""
        self._executor.shutdown(wait=False)
