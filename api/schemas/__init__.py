"""
ICEROUTE API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import Position, IcePointResponse, ...
"""

# Common
from .common import Position, WaypointModel, HealthResponse  # noqa: F401

# Ice grid and reference points
from .ice import (  # noqa: F401
    DayInfo,
    DaysResponse,
    IcePointResponse,
    TimelineResponse,
    ChokepointModel,
    ChokepointsResponse,
    IcebreakerModel,
    WaterResponse,
    LegendStop,
    OverlayInfo,
)

# Route
from .route import (  # noqa: F401
    LegModel,
    RouteStateResponse,
    AddWaypointResponse,
    RouteAnalysisModel,
    RouteAnalysisResponse,
)
