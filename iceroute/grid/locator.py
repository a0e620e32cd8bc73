"""
Nearest-cell lookup on a GridDataset.

Regular grids resolve a coordinate in O(1) from the bounds and spacing.
Grids that are only grid-aligned (rows share a latitude, columns share a
longitude, spacing uneven) fall back to two independent line searches:
column 0 for the row, row 0 for the column. The full cell array is never
scanned.

Queries outside the grid bounds resolve to the nearest edge cell, and a
query exactly between two cells resolves to the northern row and the
western column.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from iceroute.grid.dataset import NO_DATA, GridDataset

logger = logging.getLogger(__name__)


def _axis_index(ratio: float, size: int) -> int:
    """Nearest index for a fractional grid position; ties go to the lower index."""
    ratio = max(0.0, min(float(size - 1), ratio))
    return int(math.ceil(ratio - 0.5))


def regular_index(dataset: GridDataset, lat: float, lon: float) -> Tuple[int, int]:
    """(row, col) from the regular-grid formula, clamped to the grid."""
    b = dataset.bounds
    row = _axis_index((b.north - lat) / dataset.row_spacing, dataset.height) if dataset.row_spacing > 0 else 0
    col = _axis_index((lon - b.west) / dataset.col_spacing, dataset.width) if dataset.col_spacing > 0 else 0
    return row, col


def _nearest(line: np.ndarray, target: float) -> int:
    if math.isinf(target):
        if np.isnan(line).all():
            return 0
        return int(np.nanargmax(line) if target > 0 else np.nanargmin(line))
    dist = np.abs(line - target)
    if np.isnan(dist).all():
        return 0
    return int(np.nanargmin(dist))


def line_search_index(dataset: GridDataset, lat: float, lon: float) -> Tuple[int, int]:
    """
    (row, col) by nearest latitude along column 0 and nearest longitude along row 0.

    Correct for grid-aligned but unevenly spaced grids. O(width + height).
    """
    w = dataset.width
    column0_lats = dataset.latitude[::w]
    row0_lons = dataset.longitude[:w]
    return _nearest(column0_lats, lat), _nearest(row0_lons, lon)


def locate_index(
    dataset: GridDataset,
    lat: float,
    lon: float,
    force_line_search: bool = False,
) -> Tuple[int, int]:
    """Nearest cell (row, col) for a coordinate."""
    if dataset.is_regular and not force_line_search:
        return regular_index(dataset, lat, lon)
    return line_search_index(dataset, lat, lon)


def locate(
    dataset: Optional[GridDataset],
    lat: float,
    lon: float,
    force_line_search: bool = False,
) -> Optional[float]:
    """
    Concentration of the nearest grid cell.

    Args:
        dataset: Active day's grid (None when no day is loaded)
        lat, lon: Query coordinate in degrees
        force_line_search: Skip the O(1) formula even on regular grids

    Returns:
        Raw (unclamped) concentration, or NO_DATA when the cell holds no
        measurement or no dataset is given.
    """
    if dataset is None:
        return NO_DATA
    if math.isnan(lat) or math.isnan(lon):
        return NO_DATA
    row, col = locate_index(dataset, lat, lon, force_line_search=force_line_search)
    return dataset.value_at(row * dataset.width + col)
