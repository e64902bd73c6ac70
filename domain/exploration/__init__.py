"""Exploration Bounded Context.

Responsible for choosing somewhere random to go:
- Value Objects: Coordinate, AnnulusSpec, PathSpec, SamplingResult, SnapOutcome
- Ports: RoadSnapper, VisitedPredicate
- Services: offset (GeoOffset), sample_waypoint, sample_random_point
"""
