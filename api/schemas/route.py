"""Route drawing and analysis API schemas."""

from typing import List, Optional, Tuple

from pydantic import BaseModel

from .common import WaypointModel


class LegModel(BaseModel):
    index: int
    distance_km: float
    bearing_deg: float
    midpoint: Tuple[float, float]


class RouteStateResponse(BaseModel):
    """Current route and drawing mode."""
    state: str
    waypoints: List[WaypointModel]
    legs: List[LegModel]
    length_km: float


class AddWaypointResponse(BaseModel):
    count: int
    waypoint: WaypointModel


class RouteAnalysisModel(BaseModel):
    avg_ice: float
    max_ice: float
    high_ice_samples: int
    severity: str
    color: str
    length_km: float
    sample_count: int
    valid_sample_count: int


class RouteAnalysisResponse(BaseModel):
    """Analysis is null when the route is too short or every sample hit no-data."""
    day: int
    waypoint_count: int
    analysis: Optional[RouteAnalysisModel] = None
