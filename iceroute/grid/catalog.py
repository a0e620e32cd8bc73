"""
Per-day dataset catalog.

Loads the forecast-day ingestion records (``ice_data_day_{n}.json`` by
default) once, validates them into GridDatasets and serves them by day
id. The number of days is configurable; nothing assumes exactly four.

All requested days are resident before first use: the core never loads
data mid-query.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Union

from iceroute.config import Settings, get_settings
from iceroute.errors import MalformedGridError
from iceroute.grid.dataset import DEFAULT_BOUNDS_EPSILON, GridDataset

logger = logging.getLogger(__name__)


class DatasetCatalog:
    """
    Resident per-day grids keyed by 1-based day id.

    Usage:
        catalog = DatasetCatalog.from_directory("data", day_count=4)
        dataset = catalog.get(2)
    """

    def __init__(self, datasets: Optional[Mapping[int, GridDataset]] = None):
        self._datasets: Dict[int, GridDataset] = dict(datasets or {})

    @classmethod
    def from_records(
        cls,
        records: Mapping[int, Mapping],
        epsilon: float = DEFAULT_BOUNDS_EPSILON,
    ) -> "DatasetCatalog":
        """Validate in-memory ingestion records, one per day."""
        datasets = {}
        for day, record in sorted(records.items()):
            datasets[int(day)] = GridDataset.from_record(record, day=int(day), epsilon=epsilon)
        return cls(datasets)

    @classmethod
    def from_directory(
        cls,
        data_dir: Union[str, Path, None] = None,
        day_count: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> "DatasetCatalog":
        """
        Load days 1..day_count from JSON files.

        Raises:
            FileNotFoundError: If a day's file is missing
            MalformedGridError: If a day's record fails validation
        """
        settings = settings or get_settings()
        data_dir = Path(data_dir) if data_dir is not None else Path(settings.data_dir)
        day_count = day_count or settings.day_count

        datasets = {}
        for day in range(1, day_count + 1):
            path = data_dir / settings.dataset_pattern.format(day=day)
            datasets[day] = load_dataset_file(path, day=day, epsilon=settings.bounds_epsilon_deg)

        logger.info(f"Loaded {len(datasets)} ice datasets from {data_dir}")
        return cls(datasets)

    def get(self, day: int) -> Optional[GridDataset]:
        return self._datasets.get(day)

    def __getitem__(self, day: int) -> GridDataset:
        return self._datasets[day]

    def __contains__(self, day: object) -> bool:
        return day in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._datasets))

    @property
    def days(self) -> List[int]:
        return sorted(self._datasets)


def load_dataset_file(
    path: Union[str, Path],
    day: Optional[int] = None,
    epsilon: float = DEFAULT_BOUNDS_EPSILON,
) -> GridDataset:
    """Read and validate one day's JSON record."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ice data file not found: {path}")

    try:
        record = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise MalformedGridError(f"{path.name} is not valid JSON: {e}") from e

    try:
        dataset = GridDataset.from_record(record, day=day, epsilon=epsilon)
    except MalformedGridError as e:
        logger.error(f"Rejected ice data for day {day} ({path.name}): {e}")
        raise

    logger.info(
        f"Loaded day {day}: {dataset.width}x{dataset.height} grid, "
        f"{int(dataset.valid_mask().sum())} measured cells"
    )
    return dataset
