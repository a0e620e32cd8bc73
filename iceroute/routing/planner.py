"""
Interactive route drawing state machine.

    IDLE --start_drawing--> DRAWING --stop_drawing--> IDLE
    any  --clear----------> IDLE (empty route)

Waypoints are only appended while DRAWING and only when the water
heuristic accepts them; a rejected edit leaves the route unchanged.
Edits are serialised by a lock (single writer); readers take immutable
snapshots.
"""

import logging
import threading
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from iceroute.errors import DrawingInactiveError, OffWaterError
from iceroute.geo.geodesy import LatLon
from iceroute.geo.water import WaterClassifier
from iceroute.grid.dataset import GridDataset
from iceroute.routing.analyzer import (
    DEFAULT_SAMPLES_PER_SEGMENT,
    RouteAnalysis,
    RouteLeg,
    analyze,
    route_legs,
    validate_for_export,
)

logger = logging.getLogger(__name__)


class DrawingState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class RoutePlanner:
    """
    Route being drawn by a user.

    Args:
        classifier: Water heuristic used to gate new waypoints
        samples_per_segment: Sampling density for analysis
    """

    def __init__(
        self,
        classifier: Optional[WaterClassifier] = None,
        samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
    ):
        self.classifier = classifier or WaterClassifier()
        self.samples_per_segment = samples_per_segment
        self._state = DrawingState.IDLE
        self._waypoints: List[LatLon] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> DrawingState:
        with self._lock:
            return self._state

    @property
    def is_drawing(self) -> bool:
        return self.state == DrawingState.DRAWING

    def snapshot(self) -> Tuple[LatLon, ...]:
        """Immutable copy of the current waypoints."""
        with self._lock:
            return tuple(self._waypoints)

    def __len__(self) -> int:
        with self._lock:
            return len(self._waypoints)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_drawing(self) -> None:
        with self._lock:
            self._state = DrawingState.DRAWING
        logger.debug("Route drawing started")

    def stop_drawing(self) -> None:
        """Leave drawing mode, keeping the route for analysis and export."""
        with self._lock:
            self._state = DrawingState.IDLE
        logger.debug("Route drawing stopped")

    def clear(self) -> None:
        with self._lock:
            self._waypoints = []
            self._state = DrawingState.IDLE
        logger.debug("Route cleared")

    def add_waypoint(self, lat: float, lon: float, dataset: Optional[GridDataset] = None) -> int:
        """
        Append a waypoint.

        Returns:
            New number of waypoints

        Raises:
            DrawingInactiveError: if not in drawing mode
            OffWaterError: if the point is not classified as water
        """
        with self._lock:
            if self._state != DrawingState.DRAWING:
                raise DrawingInactiveError("Start drawing before adding waypoints")
            if not self.classifier.is_water(lat, lon, dataset):
                logger.info(f"Rejected waypoint on land: ({lat:.4f}, {lon:.4f})")
                raise OffWaterError([(lat, lon)])
            self._waypoints.append((float(lat), float(lon)))
            return len(self._waypoints)

    def replace(self, points: Sequence[LatLon], dataset: Optional[GridDataset] = None) -> int:
        """
        Load a whole route (e.g. an imported GPX file), leaving drawing mode.

        All points are checked first; if any is on land nothing changes.

        Raises:
            OffWaterError: listing every rejected point
        """
        points = [(float(lat), float(lon)) for lat, lon in points]
        with self._lock:
            rejected = [p for p in points if not self.classifier.is_water(p[0], p[1], dataset)]
            if rejected:
                raise OffWaterError(rejected)
            self._waypoints = points
            self._state = DrawingState.IDLE
        logger.info(f"Route replaced with {len(points)} waypoints")
        return len(points)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def legs(self) -> List[RouteLeg]:
        return route_legs(self.snapshot())

    def analyze(self, dataset: Optional[GridDataset]) -> Optional[RouteAnalysis]:
        return analyze(self.snapshot(), dataset, self.samples_per_segment)

    def validate_for_export(self, dataset: Optional[GridDataset]) -> Tuple[LatLon, ...]:
        """Snapshot of the route after re-checking every waypoint is on water."""
        waypoints = self.snapshot()
        validate_for_export(waypoints, dataset, self.classifier)
        return waypoints
