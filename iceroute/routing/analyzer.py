"""
Route ice analysis.

Samples ice concentration along a multi-segment route and classifies how
hard the route is to traverse. The result is a pure function of the
waypoints and the active day's grid.

Severity by mean sampled concentration:
    mean > 70        BLOCKED
    50 < mean <= 70  DIFFICULT
    30 < mean <= 50  MODERATE
    mean <= 30       CLEAR
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from iceroute.errors import OffWaterError
from iceroute.geo.geodesy import LatLon, bearing_deg, distance_km, interpolate, midpoint
from iceroute.geo.water import WaterClassifier
from iceroute.grid.dataset import GridDataset
from iceroute.grid.locator import locate
from iceroute.render.colors import clamp_concentration

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_PER_SEGMENT = 6
HIGH_ICE_THRESHOLD = 70.0


class Severity(Enum):
    """Route traversal difficulty."""
    CLEAR = "CLEAR"
    MODERATE = "MODERATE"
    DIFFICULT = "DIFFICULT"
    BLOCKED = "BLOCKED"

    @property
    def color(self) -> str:
        return SEVERITY_COLORS[self]


SEVERITY_COLORS = {
    Severity.CLEAR: "#4CAF50",
    Severity.MODERATE: "#FBC02D",
    Severity.DIFFICULT: "#F57C00",
    Severity.BLOCKED: "#D32F2F",
}


def classify_severity(mean_concentration: float) -> Severity:
    """Severity for a mean sampled concentration (percent)."""
    if mean_concentration > 70:
        return Severity.BLOCKED
    if mean_concentration > 50:
        return Severity.DIFFICULT
    if mean_concentration > 30:
        return Severity.MODERATE
    return Severity.CLEAR


@dataclass
class RouteLeg:
    """Geometry of one segment between consecutive waypoints."""
    index: int
    start: LatLon
    end: LatLon
    distance_km: float
    bearing_deg: float
    midpoint: LatLon


@dataclass
class RouteAnalysis:
    """Aggregate ice conditions along a route."""
    avg_ice: float
    max_ice: float
    high_ice_samples: int  # samples above 70%
    severity: Severity
    length_km: float
    sample_count: int
    valid_sample_count: int
    legs: List[RouteLeg] = field(default_factory=list)

    @property
    def color(self) -> str:
        return self.severity.color

    def to_dict(self) -> dict:
        return {
            "avg_ice": round(self.avg_ice, 1),
            "max_ice": round(self.max_ice, 1),
            "high_ice_samples": self.high_ice_samples,
            "severity": self.severity.value,
            "color": self.color,
            "length_km": round(self.length_km, 1),
            "sample_count": self.sample_count,
            "valid_sample_count": self.valid_sample_count,
        }


def route_legs(waypoints: Sequence[LatLon]) -> List[RouteLeg]:
    """Per-segment distance, bearing and label position."""
    legs = []
    for i in range(len(waypoints) - 1):
        p1 = tuple(waypoints[i])
        p2 = tuple(waypoints[i + 1])
        legs.append(RouteLeg(
            index=i,
            start=p1,
            end=p2,
            distance_km=distance_km(p1, p2),
            bearing_deg=bearing_deg(p1, p2),
            midpoint=midpoint(p1, p2),
        ))
    return legs


def sample_points(
    waypoints: Sequence[LatLon],
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> List[LatLon]:
    """
    Evenly spaced points along each segment, both endpoints included.

    Interior waypoints are sampled once per adjoining segment.
    """
    if samples_per_segment < 2:
        raise ValueError(f"samples_per_segment must be >= 2, got {samples_per_segment}")

    points: List[LatLon] = []
    last = samples_per_segment - 1
    for i in range(len(waypoints) - 1):
        p1 = tuple(waypoints[i])
        p2 = tuple(waypoints[i + 1])
        for j in range(samples_per_segment):
            points.append(interpolate(p1, p2, j / last))
    return points


def analyze(
    route: Sequence[LatLon],
    dataset: Optional[GridDataset],
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> Optional[RouteAnalysis]:
    """
    Analyze ice along a route.

    Args:
        route: Ordered (lat, lon) waypoints
        dataset: Active day's grid
        samples_per_segment: Samples per segment including both endpoints

    Returns:
        RouteAnalysis, or None when the route has fewer than 2 waypoints,
        no dataset is loaded, or every sample landed on a no-data cell.
    """
    if dataset is None or len(route) < 2:
        return None

    samples = sample_points(route, samples_per_segment)
    values: List[float] = []
    for lat, lon in samples:
        value = clamp_concentration(locate(dataset, lat, lon))
        if value is not None:
            values.append(value)

    if not values:
        logger.debug(f"Route analysis: all {len(samples)} samples hit no-data cells")
        return None

    avg_ice = sum(values) / len(values)
    legs = route_legs(route)
    analysis = RouteAnalysis(
        avg_ice=avg_ice,
        max_ice=max(values),
        high_ice_samples=sum(1 for v in values if v > HIGH_ICE_THRESHOLD),
        severity=classify_severity(avg_ice),
        length_km=sum(leg.distance_km for leg in legs),
        sample_count=len(samples),
        valid_sample_count=len(values),
        legs=legs,
    )
    logger.info(
        f"Route analysis day={dataset.day}: {len(route)} waypoints, "
        f"{analysis.length_km:.1f} km, avg ice {avg_ice:.1f}% -> {analysis.severity.value}"
    )
    return analysis


def find_off_water(
    route: Sequence[LatLon],
    dataset: Optional[GridDataset],
    classifier: Optional[WaterClassifier] = None,
) -> List[Tuple[float, float]]:
    """Waypoints the water heuristic no longer accepts."""
    classifier = classifier or WaterClassifier()
    return [tuple(p) for p in route if not classifier.is_water(p[0], p[1], dataset)]


def validate_for_export(
    route: Sequence[LatLon],
    dataset: Optional[GridDataset],
    classifier: Optional[WaterClassifier] = None,
) -> None:
    """
    Re-check every waypoint (not the samples) before export.

    The active day may have changed since a point was added.

    Raises:
        OffWaterError: listing the waypoints now classified as land
    """
    off_water = find_off_water(route, dataset, classifier)
    if off_water:
        logger.warning(f"Export rejected: {len(off_water)} waypoint(s) on land")
        raise OffWaterError(
            off_water,
            f"Cannot export route: {len(off_water)} point(s) are on land",
        )
