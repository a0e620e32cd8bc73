"""
Ice data API router.

Point lookups, overlay images, timeline resolution, reference points and
the water check, all against the resident per-day datasets.

    GET /api/ice/{day}/overlay.png

The overlay is one image for the whole grid, georeferenced by the
dataset bounds (also returned in the X-Ice-Bounds header as
south,west,north,east).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response

from api.schemas import (
    ChokepointModel,
    ChokepointsResponse,
    DayInfo,
    DaysResponse,
    IcebreakerModel,
    IcePointResponse,
    LegendStop,
    OverlayInfo,
    TimelineResponse,
    WaterResponse,
)
from api.state import ApplicationState, get_app_state
from iceroute.data.reference_points import CHOKEPOINTS, ICEBREAKERS, assess_chokepoints
from iceroute.grid.dataset import GridDataset
from iceroute.grid.locator import locate
from iceroute.render.colors import clamp_concentration, color_for, hover_text, is_visible_ice, legend_stops
from iceroute.temporal import day_label, resolve_day

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Ice"])


def require_dataset(state: ApplicationState, day: int) -> GridDataset:
    """Dataset for a day, or 404 if it is not loaded."""
    dataset = state.dataset(day)
    if dataset is None:
        raise HTTPException(
            status_code=404,
            detail=f"No ice data for day {day}. Loaded days: {state.catalog.days}",
        )
    return dataset


@router.get("/days", response_model=DaysResponse)
async def list_days():
    """Loaded forecast days with their grid geometry."""
    state = get_app_state()
    return DaysResponse(days=[
        DayInfo(**state.catalog[day].summary())
        for day in state.catalog.days
    ])


@router.get("/ice/{day}/point", response_model=IcePointResponse)
async def ice_at_point(
    day: int,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
):
    """
    Ice concentration at a point on a given day.

    value is the raw grid value (null for no-data cells); concentration is
    the same value clamped to [0, 100], which is what display and hover
    text use.
    """
    dataset = require_dataset(get_app_state(), day)
    value = locate(dataset, lat, lon)
    color = color_for(value)
    return IcePointResponse(
        day=day,
        lat=lat,
        lon=lon,
        value=value,
        concentration=clamp_concentration(value),
        visible=is_visible_ice(value),
        hover_text=hover_text(value),
        color=color.to_rgba_string() if color else None,
    )


@router.get("/ice/{day}/overlay.png")
async def ice_overlay_png(day: int):
    """RGBA overlay of a day's grid, rendered once and cached."""
    state = get_app_state()
    dataset = require_dataset(state, day)
    png = state.raster_cache.get_png(dataset)
    b = dataset.bounds
    return Response(
        content=png,
        media_type="image/png",
        headers={
            "Cache-Control": "public, max-age=3600",
            "X-Ice-Bounds": f"{b.south},{b.west},{b.north},{b.east}",
        },
    )


@router.get("/ice/{day}/overlay", response_model=OverlayInfo)
async def ice_overlay_info(day: int):
    """Image size, georeferencing corners and legend for a day's overlay."""
    dataset = require_dataset(get_app_state(), day)
    b = dataset.bounds
    return OverlayInfo(
        day=day,
        width=dataset.width,
        height=dataset.height,
        bounds=b.to_dict(),
        corners=((b.south, b.west), (b.north, b.east)),
        legend=[LegendStop(**stop) for stop in legend_stops()],
    )


@router.get("/timeline/resolve", response_model=TimelineResponse)
async def resolve_timeline(position: float = Query(..., ge=1.0)):
    """Day shown for a continuous slider position."""
    state = get_app_state()
    days_available = len(state.catalog)
    if days_available < 1:
        raise HTTPException(status_code=503, detail="No ice data loaded")

    position = min(position, float(days_available))
    return TimelineResponse(
        position=position,
        day=resolve_day(position, days_available, state.core_settings.steps_per_day),
        label=day_label(position),
        days_available=days_available,
    )


@router.get("/chokepoints", response_model=ChokepointsResponse)
async def chokepoints(day: int = Query(1, ge=1)):
    """Chokepoints with the ice hazard at each on the given day."""
    dataset = require_dataset(get_app_state(), day)
    results = []
    for status in assess_chokepoints(dataset, CHOKEPOINTS):
        point = status.chokepoint
        results.append(ChokepointModel(
            id=point.id,
            name=point.name,
            lat=point.position[0],
            lon=point.position[1],
            type=point.type,
            importance=point.importance,
            description=point.description,
            radius_m=point.radius_m,
            concentration=status.concentration,
            hazard=status.hazard.value,
            hazard_color=status.hazard.color,
        ))
    return ChokepointsResponse(day=day, chokepoints=results)


@router.get("/icebreakers", response_model=List[IcebreakerModel])
async def icebreakers():
    """Icebreaker fleet and winter stations."""
    return [
        IcebreakerModel(
            id=ship.id,
            name=ship.name,
            lat=ship.position[0],
            lon=ship.position[1],
            callsign=ship.callsign,
            vessel_class=ship.vessel_class,
            length=ship.length,
            displacement=ship.displacement,
            operation=ship.operation,
            mission=ship.mission,
        )
        for ship in ICEBREAKERS
    ]


@router.get("/water", response_model=WaterResponse)
async def water_check(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    day: Optional[int] = Query(None, ge=1),
):
    """Whether a point is navigable water, and which rule decided it."""
    state = get_app_state()
    dataset = require_dataset(state, day) if day is not None else None
    rule = state.classifier.classify(lat, lon, dataset)
    return WaterResponse(lat=lat, lon=lon, day=day, is_water=rule is not None, rule=rule)
