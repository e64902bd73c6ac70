"""Infrastructure adapters for the exploration bounded context.

This module provides the infrastructure layer implementations for the
exploration ports: road snapping through Amap reverse geocoding and
visited-track lookups.

Adapters exported for simplified imports.
"""

from .amap_adapter import AmapRoadSnapper, DisabledRoadSnapper
from .visited_store import FailOpenVisitedPredicate, TrackProximityStore

__all__ = [
    "AmapRoadSnapper",
    "DisabledRoadSnapper",
    "FailOpenVisitedPredicate",
    "TrackProximityStore",
]
