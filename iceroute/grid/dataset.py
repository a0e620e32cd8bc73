"""
Per-day ice concentration grid.

A GridDataset holds one forecast day's flat, row-major arrays of ice
concentration and cell coordinates. Row 0 is the northernmost row and
column 0 the westernmost column. Missing measurements are stored as NaN
and surfaced to callers as ``NO_DATA`` (``None``), never as 0%.

Datasets are validated once at construction and are immutable afterwards:
the backing numpy arrays are flagged read-only.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from iceroute.errors import MalformedGridError

logger = logging.getLogger(__name__)

# Sentinel returned by lookups when a cell holds no measurement
NO_DATA = None

# Max deviation of a cell coordinate from the ideal evenly spaced line,
# as a fraction of the spacing, for the grid to count as regular
REGULARITY_TOLERANCE = 0.1

DEFAULT_BOUNDS_EPSILON = 1e-6


def is_no_data(value: Optional[float]) -> bool:
    """True for the NO_DATA sentinel and for NaN, including numpy NaN scalars."""
    return value is None or (isinstance(value, numbers.Real) and math.isnan(value))


@dataclass(frozen=True)
class Bounds:
    """Rectangular geographic extent in degrees."""
    south: float
    north: float
    west: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def to_dict(self) -> Dict[str, float]:
        return {"south": self.south, "north": self.north, "west": self.west, "east": self.east}


@dataclass(frozen=True)
class Dimensions:
    """Grid size in cells."""
    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


def _readonly(values: Any, name: str) -> np.ndarray:
    try:
        arr = np.array(values, dtype=np.float64).ravel()
    except (TypeError, ValueError) as e:
        raise MalformedGridError(f"{name} is not a numeric sequence: {e}") from e
    arr.flags.writeable = False
    return arr


class GridDataset:
    """
    Immutable ice concentration grid for a single forecast day.

    Args:
        concentration: Flat row-major concentration values (0-100, NaN/None = no data)
        latitude: Per-cell latitude, same length and indexing
        longitude: Per-cell longitude, same length and indexing
        dimensions: Grid width and height
        bounds: Extent covering all cells
        day: Optional forecast day this grid belongs to
        epsilon: Tolerance (degrees) when checking coordinates against bounds

    Raises:
        MalformedGridError: If array lengths disagree with dimensions, or the
            bounds do not contain the coordinate arrays.
    """

    def __init__(
        self,
        concentration: Sequence[Optional[float]],
        latitude: Sequence[Optional[float]],
        longitude: Sequence[Optional[float]],
        dimensions: Dimensions,
        bounds: Bounds,
        day: Optional[int] = None,
        epsilon: float = DEFAULT_BOUNDS_EPSILON,
    ):
        if dimensions.width <= 0 or dimensions.height <= 0:
            raise MalformedGridError(
                f"Dimensions must be positive, got {dimensions.width}x{dimensions.height}"
            )

        self._concentration = _readonly(concentration, "ice_concentration")
        self._latitude = _readonly(latitude, "latitude")
        self._longitude = _readonly(longitude, "longitude")
        self._dimensions = dimensions
        self._bounds = bounds
        self.day = day

        expected = dimensions.size
        for name, arr in (
            ("ice_concentration", self._concentration),
            ("latitude", self._latitude),
            ("longitude", self._longitude),
        ):
            if arr.size != expected:
                raise MalformedGridError(
                    f"{name} has {arr.size} values, expected "
                    f"{dimensions.width}x{dimensions.height}={expected}"
                )

        if bounds.south > bounds.north or bounds.west > bounds.east:
            raise MalformedGridError(f"Bounds are inverted: {bounds}")

        self._check_bounds(epsilon)

        self._row_spacing = (
            (bounds.north - bounds.south) / (dimensions.height - 1)
            if dimensions.height > 1 else 0.0
        )
        self._col_spacing = (
            (bounds.east - bounds.west) / (dimensions.width - 1)
            if dimensions.width > 1 else 0.0
        )
        self._is_regular = self._check_regularity()

        if not self._is_regular:
            logger.warning(
                f"Grid for day {day} is not regular; lookups fall back to line search"
            )
        logger.debug(
            f"GridDataset day={day} {dimensions.width}x{dimensions.height} "
            f"bounds={bounds.to_dict()} regular={self._is_regular}"
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        day: Optional[int] = None,
        epsilon: float = DEFAULT_BOUNDS_EPSILON,
    ) -> "GridDataset":
        """
        Build a dataset from an ingestion record.

        The record carries ``ice_concentration``, ``latitude`` and
        ``longitude`` flat arrays plus ``dimensions: {width, height}`` and
        ``bounds: {south, north, west, east}``.
        """
        missing = [
            key for key in ("ice_concentration", "latitude", "longitude", "dimensions", "bounds")
            if record.get(key) is None
        ]
        if missing:
            raise MalformedGridError(f"Record is missing {', '.join(missing)}")

        try:
            dims = Dimensions(
                width=int(record["dimensions"]["width"]),
                height=int(record["dimensions"]["height"]),
            )
            b = record["bounds"]
            bounds = Bounds(
                south=float(b["south"]),
                north=float(b["north"]),
                west=float(b["west"]),
                east=float(b["east"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedGridError(f"Invalid dimensions or bounds: {e}") from e

        return cls(
            concentration=record["ice_concentration"],
            latitude=record["latitude"],
            longitude=record["longitude"],
            dimensions=dims,
            bounds=bounds,
            day=day,
            epsilon=epsilon,
        )

    def _check_bounds(self, epsilon: float) -> None:
        lats = self._latitude[np.isfinite(self._latitude)]
        lons = self._longitude[np.isfinite(self._longitude)]
        if lats.size == 0 or lons.size == 0:
            raise MalformedGridError("Coordinate arrays contain no finite values")

        b = self._bounds
        if (lats.min() < b.south - epsilon or lats.max() > b.north + epsilon
                or lons.min() < b.west - epsilon or lons.max() > b.east + epsilon):
            raise MalformedGridError(
                f"Bounds {b.to_dict()} do not contain coordinates "
                f"lat [{lats.min()}, {lats.max()}] lon [{lons.min()}, {lons.max()}]"
            )

    def _check_regularity(self) -> bool:
        """Rows share a latitude, columns share a longitude, both evenly spaced from the bounds."""
        h, w = self.height, self.width
        lat2d = self._latitude.reshape(h, w)
        lon2d = self._longitude.reshape(h, w)
        if not (np.isfinite(lat2d).all() and np.isfinite(lon2d).all()):
            return False

        ideal_lats = self._bounds.north - np.arange(h) * self._row_spacing
        ideal_lons = self._bounds.west + np.arange(w) * self._col_spacing
        lat_tol = REGULARITY_TOLERANCE * self._row_spacing if h > 1 else 1e-9
        lon_tol = REGULARITY_TOLERANCE * self._col_spacing if w > 1 else 1e-9

        if np.abs(lat2d - ideal_lats[:, np.newaxis]).max() > lat_tol:
            return False
        if np.abs(lon2d - ideal_lons[np.newaxis, :]).max() > lon_tol:
            return False
        return True

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def concentration(self) -> np.ndarray:
        return self._concentration

    @property
    def latitude(self) -> np.ndarray:
        return self._latitude

    @property
    def longitude(self) -> np.ndarray:
        return self._longitude

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def width(self) -> int:
        return self._dimensions.width

    @property
    def height(self) -> int:
        return self._dimensions.height

    @property
    def size(self) -> int:
        return self._dimensions.size

    @property
    def row_spacing(self) -> float:
        """Degrees of latitude between consecutive rows."""
        return self._row_spacing

    @property
    def col_spacing(self) -> float:
        """Degrees of longitude between consecutive columns."""
        return self._col_spacing

    @property
    def is_regular(self) -> bool:
        return self._is_regular

    def index_of(self, row: int, col: int) -> int:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Cell ({row}, {col}) outside {self.width}x{self.height} grid")
        return row * self.width + col

    def value_at(self, index: int) -> Optional[float]:
        """Concentration at a flat index, or NO_DATA."""
        value = float(self._concentration[index])
        return NO_DATA if math.isnan(value) else value

    def value_at_cell(self, row: int, col: int) -> Optional[float]:
        return self.value_at(self.index_of(row, col))

    def coordinate_at(self, row: int, col: int) -> Tuple[float, float]:
        """(lat, lon) of a cell."""
        idx = self.index_of(row, col)
        return float(self._latitude[idx]), float(self._longitude[idx])

    def valid_mask(self) -> np.ndarray:
        """Boolean mask of cells holding a measurement."""
        return ~np.isnan(self._concentration)

    def summary(self) -> Dict[str, Any]:
        valid = self.valid_mask()
        return {
            "day": self.day,
            "dimensions": self._dimensions.to_dict(),
            "bounds": self._bounds.to_dict(),
            "regular": self._is_regular,
            "valid_cells": int(valid.sum()),
        }

    def __repr__(self) -> str:
        return f"GridDataset(day={self.day}, {self.width}x{self.height}, regular={self._is_regular})"
