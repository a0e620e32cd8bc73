"""
Route drawing API router.

Drives the route planner state machine and serves analysis and exports
of the current route:

    POST   /api/route/start        enter drawing mode
    POST   /api/route/waypoints    append a waypoint (drawing mode only)
    POST   /api/route/stop         leave drawing mode, keep the route
    DELETE /api/route              clear the route
    GET    /api/route/analysis     ice along the route for a day
    GET    /api/route/export.gpx   GPX 1.1 download

Domain errors (off-water points, edits outside drawing mode) are mapped
to HTTP status codes by the exception handlers in api.main.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from api.routers.ice import require_dataset
from api.schemas import (
    AddWaypointResponse,
    LegModel,
    Position,
    RouteAnalysisModel,
    RouteAnalysisResponse,
    RouteStateResponse,
    WaypointModel,
)
from api.state import ApplicationState, get_app_state
from iceroute.grid.dataset import GridDataset
from iceroute.routing.gpx import (
    DEFAULT_ROUTE_NAME,
    build_gpx,
    format_coordinates,
    gpx_filename,
    name_waypoints,
    parse_gpx_string,
    waypoint_name,
)

logger = logging.getLogger(__name__)

# GPX files from chart plotters are small; refuse anything larger
MAX_GPX_SIZE_BYTES = 1 * 1024 * 1024

router = APIRouter(prefix="/api/route", tags=["Route"])


def _optional_dataset(state: ApplicationState, day: Optional[int]) -> Optional[GridDataset]:
    return require_dataset(state, day) if day is not None else None


def _route_state(state: ApplicationState) -> RouteStateResponse:
    planner = state.planner
    waypoints = planner.snapshot()
    legs = planner.legs()
    return RouteStateResponse(
        state=planner.state.value,
        waypoints=[
            WaypointModel(index=i, name=wp.name, lat=wp.lat, lon=wp.lon)
            for i, wp in enumerate(name_waypoints(waypoints))
        ],
        legs=[
            LegModel(
                index=leg.index,
                distance_km=round(leg.distance_km, 2),
                bearing_deg=round(leg.bearing_deg, 1),
                midpoint=leg.midpoint,
            )
            for leg in legs
        ],
        length_km=round(sum(leg.distance_km for leg in legs), 2),
    )


@router.get("", response_model=RouteStateResponse)
async def get_route():
    """Current drawing mode, named waypoints and per-leg geometry."""
    return _route_state(get_app_state())


@router.post("/start", response_model=RouteStateResponse)
async def start_drawing():
    state = get_app_state()
    state.planner.start_drawing()
    return _route_state(state)


@router.post("/stop", response_model=RouteStateResponse)
async def stop_drawing():
    """Leave drawing mode; the route is kept for analysis and export."""
    state = get_app_state()
    state.planner.stop_drawing()
    return _route_state(state)


@router.delete("", response_model=RouteStateResponse)
async def clear_route():
    state = get_app_state()
    state.planner.clear()
    return _route_state(state)


@router.post("/waypoints", response_model=AddWaypointResponse)
async def add_waypoint(position: Position, day: Optional[int] = Query(None, ge=1)):
    """
    Append a waypoint to the route being drawn.

    The point is checked against the water heuristic using the given
    day's grid (or only the static tables when no day is given).

    Returns 409 outside drawing mode and 422 for points on land.
    """
    state = get_app_state()
    dataset = _optional_dataset(state, day)
    count = state.planner.add_waypoint(position.lat, position.lon, dataset)
    return AddWaypointResponse(
        count=count,
        waypoint=WaypointModel(
            index=count - 1,
            name=waypoint_name(count - 1, count),
            lat=position.lat,
            lon=position.lon,
        ),
    )


@router.get("/analysis", response_model=RouteAnalysisResponse)
async def analyze_route(day: int = Query(..., ge=1)):
    """
    Ice conditions along the route for a day.

    analysis is null when the route has fewer than two waypoints or
    every sample fell on a no-data cell.
    """
    state = get_app_state()
    dataset = require_dataset(state, day)
    waypoints = state.planner.snapshot()
    result = state.planner.analyze(dataset)
    return RouteAnalysisResponse(
        day=day,
        waypoint_count=len(waypoints),
        analysis=RouteAnalysisModel(**result.to_dict()) if result else None,
    )


@router.get("/coordinates", response_class=PlainTextResponse)
async def route_coordinates(fmt: str = Query("decimal", pattern="^(decimal|dms)$")):
    """Waypoints as 'Name: lat, lon' lines, in decimal degrees or DMS."""
    return format_coordinates(get_app_state().planner.snapshot(), fmt)


@router.get("/export.gpx")
async def export_gpx(
    day: int = Query(..., ge=1),
    name: str = Query(DEFAULT_ROUTE_NAME, max_length=100),
):
    """
    Download the route as GPX 1.1.

    Every waypoint is re-checked against the day's grid first: the active
    day may have changed since a point was added.
    """
    state = get_app_state()
    dataset = require_dataset(state, day)
    if len(state.planner) < 2:
        raise HTTPException(status_code=400, detail="Route must have at least 2 waypoints to export")

    waypoints = state.planner.validate_for_export(dataset)
    gpx = build_gpx(waypoints, name=name)
    return Response(
        content=gpx,
        media_type="application/gpx+xml",
        headers={"Content-Disposition": f'attachment; filename="{gpx_filename()}"'},
    )


@router.post("/import.gpx", response_model=RouteStateResponse)
async def import_gpx(request: Request, day: Optional[int] = Query(None, ge=1)):
    """
    Replace the route with the points of a GPX document (request body).

    Maximum size: 1 MB. Points on land reject the whole import.
    """
    state = get_app_state()
    dataset = _optional_dataset(state, day)

    content = await request.body()
    if len(content) > MAX_GPX_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_GPX_SIZE_BYTES // (1024 * 1024)} MB",
        )
    if len(content) == 0:
        raise HTTPException(status_code=400, detail="Empty file")

    try:
        route_name, waypoints = parse_gpx_string(content.decode("utf-8"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.warning(f"GPX import failed: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid GPX file: {e}")

    state.planner.replace([(wp.lat, wp.lon) for wp in waypoints], dataset)
    logger.info(f"Imported GPX route '{route_name}' ({len(waypoints)} waypoints)")
    return _route_state(state)
