"""
Exception types raised by the ICEROUTE core.

NoData is deliberately not an exception: lookups return the ``NO_DATA``
sentinel from ``iceroute.grid.dataset`` instead.
"""

from typing import List, Sequence, Tuple


class IceRouteError(Exception):
    """Base class for all ICEROUTE errors."""


class MalformedGridError(IceRouteError):
    """A grid dataset violates its structural invariants at construction."""


class OffWaterError(IceRouteError):
    """One or more waypoints are not classified as navigable water."""

    def __init__(self, points: Sequence[Tuple[float, float]], message: str = ""):
        self.points: List[Tuple[float, float]] = [tuple(p) for p in points]
        if not message:
            if len(self.points) == 1:
                lat, lon = self.points[0]
                message = f"Point ({lat:.4f}, {lon:.4f}) appears to be on land"
            else:
                message = f"{len(self.points)} point(s) appear to be on land"
        super().__init__(message)


class DrawingInactiveError(IceRouteError):
    """A route edit was attempted while the planner is not in drawing mode."""
