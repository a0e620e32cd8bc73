"""
ICEROUTE Configuration Module.

Centralized configuration management using environment variables.
Supports .env files for local development.

Usage:
    from iceroute.config import settings

    print(settings.data_dir)
    print(settings.day_count)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
import logging

from dotenv import load_dotenv

# Load .env file if present
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def get_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


@dataclass
class Settings:
    """Core settings loaded from environment."""

    # Dataset ingestion
    data_dir: str = field(default_factory=lambda: os.getenv("ICEROUTE_DATA_DIR", "data"))
    day_count: int = field(default_factory=lambda: get_int("ICEROUTE_DAY_COUNT", 4))
    dataset_pattern: str = field(
        default_factory=lambda: os.getenv("ICEROUTE_DATASET_PATTERN", "ice_data_day_{day}.json")
    )
    bounds_epsilon_deg: float = field(
        default_factory=lambda: get_float("ICEROUTE_BOUNDS_EPSILON_DEG", 1e-6)
    )

    # Water heuristic
    water_search_radius_deg: float = field(
        default_factory=lambda: get_float("ICEROUTE_WATER_SEARCH_RADIUS_DEG", 0.3)
    )
    water_scan_stride: int = field(default_factory=lambda: get_int("ICEROUTE_WATER_SCAN_STRIDE", 10))
    lake_radius_deg: float = field(default_factory=lambda: get_float("ICEROUTE_LAKE_RADIUS_DEG", 1.0))

    # Route analysis
    samples_per_segment: int = field(
        default_factory=lambda: get_int("ICEROUTE_SAMPLES_PER_SEGMENT", 6)
    )

    # Timeline playback
    steps_per_day: int = field(default_factory=lambda: get_int("ICEROUTE_STEPS_PER_DAY", 5))

    # Raster cache
    raster_cache_enabled: bool = field(
        default_factory=lambda: get_bool("ICEROUTE_RASTER_CACHE_ENABLED", True)
    )

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.day_count < 1:
            logging.warning(f"Day count {self.day_count} is not positive, using 4")
            self.day_count = 4

        # Both segment endpoints are always sampled
        if self.samples_per_segment < 2:
            logging.warning(
                f"Samples per segment {self.samples_per_segment} below 2, using 6"
            )
            self.samples_per_segment = 6

        if self.water_scan_stride < 1:
            self.water_scan_stride = 1

        if self.steps_per_day < 1:
            self.steps_per_day = 5

    def dataset_path(self, day: int) -> Path:
        """Path of the ingestion record for a forecast day."""
        return Path(self.data_dir) / self.dataset_pattern.format(day=day)


# Singleton instance
settings = Settings()


# Convenience function for testing
def get_settings() -> Settings:
    """Get the settings instance (useful for dependency injection)."""
    return settings
