"""
Navigable-water heuristic for waypoint validation.

Provides is_water(lat, lon, dataset) to check whether a picked point is
plausibly on water inside the operating region. Decision order, first
match wins:

1. Outside the region's coarse bounding box → land
2. Any measured grid cell within the search radius → water. A 0% cell
   still counts: only lake surfaces carry a value, land cells are NaN.
3. Inside a known waterway corridor (straits, rivers, canals too narrow
   for the grid) → water
4. Within the lake radius of a known lake centre → water
5. Otherwise → land

This is best-effort, not authoritative hydrography. False negatives near
grid edges are expected.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from iceroute.data.reference_points import GREAT_LAKES, OperatingRegion
from iceroute.grid.dataset import GridDataset

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS_DEG = 0.3  # ~33 km
DEFAULT_SCAN_STRIDE = 10
DEFAULT_LAKE_RADIUS_DEG = 1.0  # ~100 km


def _planar_dist(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return math.sqrt((lat1 - lat2) ** 2 + (lon1 - lon2) ** 2)


def has_nearby_data(
    dataset: GridDataset,
    lat: float,
    lon: float,
    radius_deg: float = DEFAULT_SEARCH_RADIUS_DEG,
    stride: int = DEFAULT_SCAN_STRIDE,
) -> bool:
    """True if a measured cell lies within radius_deg, scanning every stride-th cell."""
    stride = max(1, stride)
    conc = dataset.concentration[::stride]
    lats = dataset.latitude[::stride]
    lons = dataset.longitude[::stride]

    measured = ~np.isnan(conc) & np.isfinite(lats) & np.isfinite(lons)
    if not measured.any():
        return False
    dist = np.sqrt((lats[measured] - lat) ** 2 + (lons[measured] - lon) ** 2)
    return bool((dist < radius_deg).any())


@dataclass
class WaterClassifier:
    """
    Configured water heuristic.

    Usage:
        classifier = WaterClassifier()
        classifier.is_water(45.0, -84.0, dataset)
    """
    region: OperatingRegion = GREAT_LAKES
    search_radius_deg: float = DEFAULT_SEARCH_RADIUS_DEG
    scan_stride: int = DEFAULT_SCAN_STRIDE
    lake_radius_deg: float = DEFAULT_LAKE_RADIUS_DEG

    def classify(self, lat: float, lon: float, dataset: Optional[GridDataset] = None) -> Optional[str]:
        """
        Name the rule that accepts the point as water, or None for land.

        Returns one of "grid", "waterway:<name>", "lake" or None.
        """
        if not self.region.contains(lat, lon):
            return None

        if dataset is not None and has_nearby_data(
            dataset, lat, lon, self.search_radius_deg, self.scan_stride
        ):
            return "grid"

        for waterway in self.region.waterways:
            c_lat, c_lon = waterway.center
            if _planar_dist(lat, lon, c_lat, c_lon) < waterway.radius_deg:
                return f"waterway:{waterway.name}"

        for c_lat, c_lon in self.region.lake_centers:
            if _planar_dist(lat, lon, c_lat, c_lon) < self.lake_radius_deg:
                return "lake"

        return None

    def is_water(self, lat: float, lon: float, dataset: Optional[GridDataset] = None) -> bool:
        """Check if a point is navigable water."""
        if math.isnan(lat) or math.isnan(lon):
            return False
        rule = self.classify(lat, lon, dataset)
        logger.debug(f"is_water({lat:.4f}, {lon:.4f}) -> {rule or 'land'}")
        return rule is not None


_default_classifier = WaterClassifier()


def is_water(
    lat: float,
    lon: float,
    dataset: Optional[GridDataset] = None,
    region: Optional[OperatingRegion] = None,
) -> bool:
    """
    Check if a point is navigable water.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        dataset: Active day's grid, if any
        region: Operating region tables (defaults to the Great Lakes)

    Returns:
        True if the point is classified as water
    """
    if region is None:
        return _default_classifier.is_water(lat, lon, dataset)
    return WaterClassifier(region=region).is_water(lat, lon, dataset)
