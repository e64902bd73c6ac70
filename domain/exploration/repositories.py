"""Domain Port(s) for exploration I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from typing import Protocol

from .value_objects import Coordinate, SnapOutcome


class RoadSnapper(Protocol):
    """Port for correcting a coordinate to the nearest known road.

    Implementations live in infrastructure (e.g., Amap reverse-geocoding
    adapter). ``snap`` must never raise: every failure is reported as
    ``Unavailable``.
    """

    def snap(self, point: Coordinate) -> SnapOutcome:
        """Return the nearest road coordinate, or Unavailable."""
        ...


class VisitedPredicate(Protocol):
    """Port for the historical-track store.

    Implementations must be side-effect free, enforce their own timeout and
    fail open (report "not visited") when the backing store misbehaves.
    """

    def is_visited(self, point: Coordinate) -> bool:
        """Return True if ``point`` lies near a recorded visit."""
        ...


class NeverVisited:
    """Default VisitedPredicate while no track store is wired in."""

    def is_visited(self, point: Coordinate) -> bool:
        return False
