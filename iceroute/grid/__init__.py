"""Ice concentration grids: per-day datasets, nearest-cell lookup and the day catalog."""

from .dataset import NO_DATA, Bounds, Dimensions, GridDataset, is_no_data
from .locator import locate, locate_index
from .catalog import DatasetCatalog, load_dataset_file

__all__ = [
    "NO_DATA",
    "Bounds",
    "Dimensions",
    "GridDataset",
    "is_no_data",
    "locate",
    "locate_index",
    "DatasetCatalog",
    "load_dataset_file",
]
