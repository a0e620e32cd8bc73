"""Ice grid, timeline and reference-point API schemas."""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel


class DayInfo(BaseModel):
    """One loaded forecast day."""
    day: int
    dimensions: Dict[str, int]
    bounds: Dict[str, float]
    regular: bool
    valid_cells: int


class DaysResponse(BaseModel):
    days: List[DayInfo]


class IcePointResponse(BaseModel):
    """Concentration looked up at a point; value is null on no-data cells."""
    day: int
    lat: float
    lon: float
    value: Optional[float] = None
    concentration: Optional[float] = None  # clamped to [0, 100]
    visible: bool
    hover_text: Optional[str] = None
    color: Optional[str] = None  # rgba() string, null when transparent


class TimelineResponse(BaseModel):
    position: float
    day: int
    label: str
    days_available: int


class ChokepointModel(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    type: str
    importance: str
    description: str
    radius_m: float
    concentration: Optional[float] = None
    hazard: str
    hazard_color: str


class ChokepointsResponse(BaseModel):
    day: int
    chokepoints: List[ChokepointModel]


class IcebreakerModel(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    callsign: str
    vessel_class: str
    length: str
    displacement: Optional[str] = None
    operation: Optional[str] = None
    mission: str


class WaterResponse(BaseModel):
    lat: float
    lon: float
    day: Optional[int] = None
    is_water: bool
    rule: Optional[str] = None  # "grid", "waterway:<name>", "lake"


class LegendStop(BaseModel):
    label: str
    value: float
    color: Optional[str] = None


class OverlayInfo(BaseModel):
    """Georeferencing for an overlay image."""
    day: int
    width: int
    height: int
    bounds: Dict[str, float]
    corners: Tuple[Tuple[float, float], Tuple[float, float]]  # (south, west), (north, east)
    legend: List[LegendStop]
