"""Common shared schemas used across multiple domains."""

from typing import Dict, List

from pydantic import BaseModel, Field


class Position(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class WaypointModel(BaseModel):
    index: int
    name: str
    lat: float
    lon: float


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    days_loaded: List[int]
    raster_cache: Dict[str, int]
    route_state: str
    uptime_seconds: float
