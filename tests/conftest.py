"""
Shared pytest fixtures for ICEROUTE tests.

Environment must be set before any api.* import: api.config reads it
at import time.
"""

import os

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from iceroute.config import Settings  # noqa: E402
from iceroute.grid.catalog import DatasetCatalog  # noqa: E402
from iceroute.grid.dataset import GridDataset  # noqa: E402

# ---------------------------------------------------------------------------
# Section 2: Grid record builders
# ---------------------------------------------------------------------------

# 5x4 grid over 42-45N, 88-84W at 1 degree spacing. Row 0 is 45N.
# None marks land / no measurement.
SMALL_VALUES = [
    None, 10.0, 20.0, 30.0, None,     # 45N
    0.0, 50.0, 60.0, 70.0, 0.5,       # 44N
    5.0, 80.0, 90.0, 100.0, 150.0,    # 43N
    None, -5.0, 40.0, 75.0, None,     # 42N
]
SMALL_BOUNDS = {"south": 42.0, "north": 45.0, "west": -88.0, "east": -84.0}


def build_record(values, width=5, height=4, bounds=None, lats=None, lons=None):
    """Ingestion record with evenly spaced cell coordinates unless lats/lons are given."""
    bounds = dict(bounds or SMALL_BOUNDS)
    row_step = (bounds["north"] - bounds["south"]) / (height - 1) if height > 1 else 0.0
    col_step = (bounds["east"] - bounds["west"]) / (width - 1) if width > 1 else 0.0
    row_lats = lats or [bounds["north"] - r * row_step for r in range(height)]
    col_lons = lons or [bounds["west"] + c * col_step for c in range(width)]
    return {
        "ice_concentration": list(values),
        "latitude": [row_lats[r] for r in range(height) for _ in range(width)],
        "longitude": [col_lons[c] for _ in range(height) for c in range(width)],
        "dimensions": {"width": width, "height": height},
        "bounds": bounds,
    }


def uniform_record(value, width=5, height=4, bounds=None):
    return build_record([value] * (width * height), width, height, bounds)


@pytest.fixture
def record_factory():
    return build_record


@pytest.fixture
def small_record():
    return build_record(SMALL_VALUES)


@pytest.fixture
def small_dataset(small_record):
    return GridDataset.from_record(small_record, day=1)


@pytest.fixture
def heavy_ice_dataset():
    """80% everywhere."""
    return GridDataset.from_record(uniform_record(80.0), day=2)


@pytest.fixture
def no_data_dataset():
    return GridDataset.from_record(uniform_record(None), day=3)


@pytest.fixture
def irregular_dataset():
    """Grid-aligned but unevenly spaced rows: lookups must use line search."""
    record = build_record(SMALL_VALUES, lats=[45.0, 44.5, 43.0, 42.0])
    return GridDataset.from_record(record, day=1)


# ---------------------------------------------------------------------------
# Section 3: API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog():
    """Day 1: mixed grid, day 2: 80% everywhere, day 3: 10% everywhere."""
    return DatasetCatalog.from_records({
        1: build_record(SMALL_VALUES),
        2: uniform_record(80.0),
        3: uniform_record(10.0),
    })


@pytest.fixture
def app_state(catalog):
    from api.state import ApplicationState

    return ApplicationState(catalog=catalog, core_settings=Settings())


@pytest.fixture
def client(app_state):
    """FastAPI TestClient backed by the in-memory catalog."""
    from api.main import app
    from api.state import set_app_state

    set_app_state(app_state)
    with TestClient(app) as test_client:
        yield test_client
    set_app_state(None)
