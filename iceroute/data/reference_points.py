"""
Static reference data for the Great Lakes operating area.

Chokepoints, icebreakers, waterway corridors and lake centres are plain
read-only records. They are grouped into an OperatingRegion so the water
heuristic and hazard lookups can be pointed at a different area (or a
test fixture) without touching the algorithms.

Chokepoint coordinates follow NOAA charts; icebreaker positions reflect
the usual winter stations of the USCG Great Lakes fleet.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from iceroute.grid.dataset import GridDataset, is_no_data
from iceroute.grid.locator import locate
from iceroute.render.colors import clamp_concentration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chokepoint:
    """A named navigational constriction."""
    id: str
    name: str
    position: Tuple[float, float]  # (lat, lon)
    type: str
    importance: str  # "CRITICAL" or "HIGH"
    description: str
    color: str
    radius_m: float  # Danger zone radius


@dataclass(frozen=True)
class Icebreaker:
    """An icebreaking vessel and its station."""
    id: str
    name: str
    position: Tuple[float, float]
    callsign: str
    vessel_class: str
    length: str
    displacement: Optional[str] = None
    operation: Optional[str] = None
    mission: str = ""


@dataclass(frozen=True)
class Waterway:
    """Circular tolerance zone around a narrow channel the grid may not resolve."""
    name: str
    center: Tuple[float, float]
    radius_deg: float


@dataclass(frozen=True)
class OperatingRegion:
    """Everything the water heuristic needs to know about an area."""
    name: str
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float
    waterways: Tuple[Waterway, ...] = field(default_factory=tuple)
    lake_centers: Tuple[Tuple[float, float], ...] = field(default_factory=tuple)

    def contains(self, lat: float, lon: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lon_min <= lon <= self.lon_max


# ---------------------------------------------------------------------------
# Great Lakes tables
# ---------------------------------------------------------------------------
CHOKEPOINTS: List[Chokepoint] = [
    Chokepoint(
        id="soo-locks",
        name="Soo Locks",
        position=(46.5063, -84.3475),
        type="Lock System",
        importance="CRITICAL",
        description="Only passage between Lake Superior and lower Great Lakes. Handles 80M+ tons annually.",
        color="#D32F2F",
        radius_m=8000,
    ),
    Chokepoint(
        id="straits-mackinac",
        name="Straits of Mackinac",
        position=(45.8174, -84.7278),
        type="Strait",
        importance="CRITICAL",
        description="Connects Lake Michigan and Lake Huron under Mackinac Bridge. Major shipping corridor.",
        color="#F57C00",
        radius_m=12000,
    ),
    Chokepoint(
        id="detroit-river",
        name="Detroit River",
        position=(42.3188, -83.0458),
        type="River Channel",
        importance="CRITICAL",
        description="Busiest Great Lakes waterway. Connects Lake Huron to Lake Erie via St. Clair system.",
        color="#FBC02D",
        radius_m=10000,
    ),
    Chokepoint(
        id="welland-canal",
        name="Welland Canal",
        position=(43.0594, -79.2036),
        type="Canal System",
        importance="CRITICAL",
        description="Bypasses Niagara Falls with 8-lock system. Lake Erie to Lake Ontario passage.",
        color="#0288D1",
        radius_m=8000,
    ),
    Chokepoint(
        id="duluth-harbor",
        name="Duluth-Superior Harbor",
        position=(46.7833, -92.1064),
        type="Major Port",
        importance="HIGH",
        description="Westernmost Great Lakes port. Primary iron ore and grain shipping terminal.",
        color="#7B1FA2",
        radius_m=6000,
    ),
]

ICEBREAKERS: List[Icebreaker] = [
    Icebreaker(
        id="mackinaw",
        name="USCGC Mackinaw",
        position=(45.8174, -84.7278),  # Straits of Mackinac
        callsign="WAGB-83",
        vessel_class="Heavy Icebreaker",
        length="240 ft",
        displacement="5,000 tons",
        operation="Operation Taconite",
        mission="Primary heavy icebreaker for the Great Lakes. Escorts commercial vessels "
                "and maintains tracks through the Straits of Mackinac.",
    ),
    Icebreaker(
        id="bristol-bay",
        name="USCGC Bristol Bay",
        position=(46.5063, -84.3475),  # Soo Locks / St. Mary's River
        callsign="WTGB-102",
        vessel_class="Bay-class Ice Breaking Tug",
        length="140 ft",
        displacement="662 tons",
        operation="Operation Taconite",
        mission="Maintains St. Mary's River passage and escorts iron ore carriers "
                "through the Soo Locks during winter operations.",
    ),
    Icebreaker(
        id="neah-bay",
        name="USCGC Neah Bay",
        position=(42.3188, -83.0458),  # Detroit River
        callsign="WTGB-105",
        vessel_class="Bay-class Ice Breaking Tug",
        length="140 ft",
        displacement="662 tons",
        operation="Operation Coal Shovel",
        mission="Maintains shipping lanes in the Detroit River and St. Clair River system.",
    ),
]

WATERWAYS: Tuple[Waterway, ...] = (
    Waterway("St. Mary's River", (46.5063, -84.3475), 0.15),
    Waterway("Straits of Mackinac", (45.8174, -84.7278), 0.12),
    Waterway("Detroit River", (42.3188, -83.0458), 0.08),
    Waterway("St. Clair River", (42.8, -82.5), 0.08),
    Waterway("Welland Canal", (43.0594, -79.2036), 0.06),
    Waterway("St. Mary's River corridor", (46.55, -84.4), 0.2),
    Waterway("Detroit River corridor", (42.3, -83.0), 0.15),
)

LAKE_CENTERS: Tuple[Tuple[float, float], ...] = (
    (46.5, -87.0),  # Superior
    (44.7, -82.4),  # Huron
    (43.7, -79.4),  # Ontario
    (42.2, -81.2),  # Erie
    (44.0, -87.0),  # Michigan
)

GREAT_LAKES = OperatingRegion(
    name="Great Lakes",
    lat_min=41.0,
    lat_max=49.0,
    lon_min=-93.0,
    lon_max=-75.0,
    waterways=WATERWAYS,
    lake_centers=LAKE_CENTERS,
)

CHOKEPOINT_BY_ID: Dict[str, Chokepoint] = {c.id: c for c in CHOKEPOINTS}


# ---------------------------------------------------------------------------
# Chokepoint hazard
# ---------------------------------------------------------------------------

class HazardLevel(Enum):
    """Ice hazard at a fixed point."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    MINIMAL = "MINIMAL"
    UNKNOWN = "UNKNOWN"  # no measurement at the point

    @property
    def color(self) -> str:
        return HAZARD_COLORS[self]


HAZARD_COLORS: Dict[HazardLevel, str] = {
    HazardLevel.HIGH: "#c62828",
    HazardLevel.MEDIUM: "#e65100",
    HazardLevel.LOW: "#f57f17",
    HazardLevel.MINIMAL: "#2e7d32",
    HazardLevel.UNKNOWN: "#757575",
}


def classify_hazard(value: Optional[float]) -> HazardLevel:
    """Hazard level for a point concentration; NO_DATA is UNKNOWN, not MINIMAL."""
    if is_no_data(value):
        return HazardLevel.UNKNOWN
    pct = clamp_concentration(value)
    if pct > 70:
        return HazardLevel.HIGH
    if pct > 40:
        return HazardLevel.MEDIUM
    if pct > 15:
        return HazardLevel.LOW
    return HazardLevel.MINIMAL


@dataclass
class ChokepointStatus:
    """Hazard assessment of one chokepoint for one day."""
    chokepoint: Chokepoint
    concentration: Optional[float]  # clamped, None when no data
    hazard: HazardLevel


def assess_chokepoints(
    dataset: Optional[GridDataset],
    chokepoints: Sequence[Chokepoint] = CHOKEPOINTS,
) -> List[ChokepointStatus]:
    """Look up each chokepoint on the grid and classify its hazard."""
    results = []
    for point in chokepoints:
        lat, lon = point.position
        value = locate(dataset, lat, lon)
        results.append(ChokepointStatus(
            chokepoint=point,
            concentration=clamp_concentration(value),
            hazard=classify_hazard(value),
        ))
    if dataset is not None:
        high = [r.chokepoint.id for r in results if r.hazard == HazardLevel.HIGH]
        if high:
            logger.info(f"Day {dataset.day}: high ice hazard at {', '.join(high)}")
    return results
