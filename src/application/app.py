"""HTTP application exposing the exploration services.

Thin layer only: it validates query parameters, builds Value Objects, calls
the domain services and shapes the response. Response keys keep the camelCase
names the web client already consumes (destLat, wayLat, ...).
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from application.settings import Settings, settings as default_settings
from domain.exploration.repositories import NeverVisited, RoadSnapper, VisitedPredicate
from domain.exploration.services import sample_random_point, sample_waypoint
from domain.exploration.value_objects import AnnulusSpec, Coordinate, PathSpec
from infrastructure.exploration import (
    AmapRoadSnapper,
    DisabledRoadSnapper,
    FailOpenVisitedPredicate,
    TrackProximityStore,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response / Request Models
# ---------------------------------------------------------------------------
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RandomPointResponse(_CamelModel):
    dest_lat: float
    dest_lon: float
    snapped: bool
    is_fog_cleared: bool = False  # no visit lookup in this mode yet


class WaypointResponse(_CamelModel):
    way_lat: float
    way_lon: float
    attempts: int
    rejected: bool
    snapped: bool


class WaypointRequest(_CamelModel):
    start_lat: float = Field(ge=-90, le=90)
    start_lon: float = Field(ge=-180, le=180)
    end_lat: float = Field(ge=-90, le=90)
    end_lon: float = Field(ge=-180, le=180)
    use_gpx: bool = True
    track: list[Coordinate] = Field(default_factory=list)


class HealthResponse(_CamelModel):
    status: str
    road_snapping: bool


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------
def build_road_snapper(config: Settings) -> RoadSnapper:
    """Return the Amap snapper, or a disabled one when no key is configured."""
    if not config.AMAP_WEB_KEY:
        logger.warning("AMAP_WEB_KEY not set; road snapping disabled")
        return DisabledRoadSnapper()
    return AmapRoadSnapper(
        api_key=config.AMAP_WEB_KEY,
        base_url=config.AMAP_REGEO_URL,
        radius_m=config.SNAP_RADIUS_M,
        timeout_s=config.SNAP_TIMEOUT_S,
    )


def create_app(
    config: Settings | None = None,
    snapper: RoadSnapper | None = None,
    visited: VisitedPredicate | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings; the module-level settings if None
        snapper: RoadSnapper override (tests inject fakes here)
        visited: VisitedPredicate for the GET waypoint endpoint; NeverVisited
            if None. Each request wraps it in its own fail-open timeout guard,
            so a hung check cannot starve later requests.
    """
    if config is None:
        config = default_settings
    if snapper is None:
        snapper = build_road_snapper(config)
    if visited is None:
        visited = NeverVisited()

    app = FastAPI(title="Wild Pointer", version="0.1.0")

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            status="ok", road_snapping=not isinstance(snapper, DisabledRoadSnapper)
        )

    @app.get("/api/generate-random", response_model=RandomPointResponse)
    def generate_random(
        lat: float = Query(..., ge=-90, le=90),
        lon: float = Query(..., ge=-180, le=180),
        min_radius: float = Query(..., alias="minRadius", ge=0),
        max_radius: float = Query(..., alias="maxRadius", ge=0),
        # Accepted for client compatibility; this mode does not filter visits yet
        use_gpx: bool = Query(False, alias="useGpx"),
    ):
        if max_radius > config.MAX_RADIUS_KM:
            raise HTTPException(
                status_code=400,
                detail=f"maxRadius must not exceed {config.MAX_RADIUS_KM} km",
            )
        try:
            spec = AnnulusSpec(
                center=Coordinate(latitude=lat, longitude=lon),
                min_radius_km=min_radius,
                max_radius_km=max_radius,
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=_first_error(e)) from e

        result = sample_random_point(spec, snapper)
        return RandomPointResponse(
            dest_lat=result.point.latitude,
            dest_lon=result.point.longitude,
            snapped=result.snapped,
        )

    @app.get("/api/generate-waypoint", response_model=WaypointResponse)
    def generate_waypoint(
        start_lat: float = Query(..., alias="startLat", ge=-90, le=90),
        start_lon: float = Query(..., alias="startLon", ge=-180, le=180),
        end_lat: float = Query(..., alias="endLat", ge=-90, le=90),
        end_lon: float = Query(..., alias="endLon", ge=-180, le=180),
        use_gpx: bool = Query(True, alias="useGpx"),
    ):
        path = PathSpec(
            start=Coordinate(latitude=start_lat, longitude=start_lon),
            end=Coordinate(latitude=end_lat, longitude=end_lon),
        )
        return _guarded_waypoint(path, visited, use_gpx)

    @app.post("/api/generate-waypoint", response_model=WaypointResponse)
    def generate_waypoint_with_track(req: WaypointRequest):
        path = PathSpec(
            start=Coordinate(latitude=req.start_lat, longitude=req.start_lon),
            end=Coordinate(latitude=req.end_lat, longitude=req.end_lon),
        )
        if len(req.track) > config.MAX_TRACK_POINTS:
            raise HTTPException(
                status_code=422,
                detail=f"track must not exceed {config.MAX_TRACK_POINTS} points",
            )
        store = TrackProximityStore(req.track, proximity_m=config.VISITED_PROXIMITY_M)
        return _guarded_waypoint(path, store, req.use_gpx)

    def _guarded_waypoint(
        path: PathSpec, delegate: VisitedPredicate, use_gpx: bool
    ) -> WaypointResponse:
        guard = FailOpenVisitedPredicate(delegate, timeout_s=config.VISITED_TIMEOUT_S)
        try:
            return _waypoint(path, guard, use_gpx)
        finally:
            guard.close()

    def _waypoint(
        path: PathSpec, visited_predicate: VisitedPredicate, use_gpx: bool
    ) -> WaypointResponse:
        result = sample_waypoint(
            path,
            snapper,
            visited=visited_predicate,
            use_visited_filter=use_gpx,
            max_attempts=config.WAYPOINT_MAX_ATTEMPTS,
        )
        return WaypointResponse(
            way_lat=result.point.latitude,
            way_lon=result.point.longitude,
            attempts=result.attempts,
            rejected=result.rejected,
            snapped=result.snapped,
        )

    return app


def _first_error(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    return str(errors[0].get("msg", error))
