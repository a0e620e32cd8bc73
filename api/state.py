"""
Thread-safe state management for ICEROUTE API.

Holds the resident per-day datasets, the overlay raster cache and the
route being drawn. Datasets are immutable once loaded; the route planner
serialises its own edits, so readers never block on a writer for long.
"""
import threading
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from iceroute.config import Settings as CoreSettings, get_settings as get_core_settings
from iceroute.geo.water import WaterClassifier
from iceroute.grid.catalog import DatasetCatalog
from iceroute.grid.dataset import GridDataset
from iceroute.render.rasterizer import RasterCache
from iceroute.routing.planner import RoutePlanner

logger = logging.getLogger(__name__)


class ApplicationState:
    """
    Application state shared by all requests.

    Use get_app_state() to access the process-wide instance; tests build
    their own with an in-memory catalog and install it via set_app_state().
    """

    def __init__(
        self,
        catalog: Optional[DatasetCatalog] = None,
        core_settings: Optional[CoreSettings] = None,
    ):
        self._lock = threading.RLock()
        self.core_settings = core_settings or get_core_settings()
        self._catalog = catalog if catalog is not None else DatasetCatalog()
        self.classifier = WaterClassifier(
            search_radius_deg=self.core_settings.water_search_radius_deg,
            scan_stride=self.core_settings.water_scan_stride,
            lake_radius_deg=self.core_settings.lake_radius_deg,
        )
        self.raster_cache = RasterCache(enabled=self.core_settings.raster_cache_enabled)
        self.planner = RoutePlanner(
            classifier=self.classifier,
            samples_per_segment=self.core_settings.samples_per_segment,
        )
        self._startup_time = datetime.now(timezone.utc)

        logger.info(f"Application state initialized with {len(self._catalog)} day(s)")

    @classmethod
    def from_settings(cls) -> "ApplicationState":
        """Load the day catalog as configured by environment."""
        from api.config import settings

        core = get_core_settings()
        try:
            catalog = DatasetCatalog.from_directory(
                data_dir=settings.ice_data_dir,
                day_count=settings.ice_day_count,
                settings=core,
            )
        except FileNotFoundError as e:
            if not settings.allow_missing_data:
                raise
            logger.warning(f"Starting without ice data: {e}")
            catalog = DatasetCatalog()
        return cls(catalog=catalog, core_settings=core)

    @property
    def catalog(self) -> DatasetCatalog:
        with self._lock:
            return self._catalog

    def replace_catalog(self, catalog: DatasetCatalog) -> None:
        """Swap in freshly loaded days and drop every cached overlay."""
        with self._lock:
            self._catalog = catalog
            self.raster_cache.invalidate()
        logger.info(f"Ice catalog replaced: days {catalog.days}")

    def dataset(self, day: int) -> Optional[GridDataset]:
        return self.catalog.get(day)

    @property
    def uptime_seconds(self) -> float:
        """Get application uptime in seconds."""
        return (datetime.now(timezone.utc) - self._startup_time).total_seconds()

    def health_check(self) -> Dict[str, Any]:
        """
        Summarise component health.

        Returns:
            Dict with health status of each component
        """
        days = self.catalog.days
        return {
            "status": "healthy" if days else "degraded",
            "days_loaded": days,
            "raster_cache": self.raster_cache.stats(),
            "route_state": self.planner.state.value,
            "uptime_seconds": self.uptime_seconds,
        }


_app_state: Optional[ApplicationState] = None
_state_lock = threading.Lock()


def get_app_state() -> ApplicationState:
    """
    Get the application state, loading it on first use.

    Returns:
        ApplicationState: The shared application state instance
    """
    global _app_state
    if _app_state is None:
        with _state_lock:
            # Double-check locking
            if _app_state is None:
                _app_state = ApplicationState.from_settings()
    return _app_state


def set_app_state(state: Optional[ApplicationState]) -> None:
    """Install (or with None, reset) the shared application state."""
    global _app_state
    with _state_lock:
        _app_state = state
