"""Exploration Bounded Context - Error Hierarchy.

Custom exceptions for point generation and road snapping.

``RoadSnapError`` is raised only inside road-snapping adapters, which catch it
and return ``Unavailable`` instead; domain services never see it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.exploration.value_objects import Coordinate


class ExplorationError(Exception):
    """Base error for exploration operations."""


class InvalidSamplingError(ExplorationError):
    """Sampler parameters are invalid (e.g. a retry budget below one)."""


class RoadSnapError(ExplorationError):
    """A road-snapping response could not be turned into a coordinate.

    Attributes:
        point: The coordinate that was being snapped
        reason: Short machine-readable description of the failure
    """

    def __init__(self, point: "Coordinate", reason: str) -> None:
        self.point = point
        self.reason = reason
        super().__init__(
            f"Cannot snap ({point.latitude:.6f}, {point.longitude:.6f}): {reason}"
        )
