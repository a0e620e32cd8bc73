"""
Unit tests for loading per-day ice data files.
"""

import json

import pytest

from conftest import SMALL_VALUES, build_record, uniform_record
from iceroute.config import Settings
from iceroute.errors import MalformedGridError
from iceroute.grid.catalog import DatasetCatalog, load_dataset_file


def _write_day(directory, day, record):
    path = directory / f"ice_data_day_{day}.json"
    path.write_text(json.dumps(record))
    return path


@pytest.fixture
def data_dir(tmp_path):
    _write_day(tmp_path, 1, build_record(SMALL_VALUES))
    _write_day(tmp_path, 2, uniform_record(80.0))
    return tmp_path


class TestLoadFile:

    def test_load(self, data_dir):
        dataset = load_dataset_file(data_dir / "ice_data_day_1.json", day=1)
        assert dataset.day == 1
        assert dataset.value_at(0) is None  # JSON null
        assert dataset.value_at(6) == 50.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_dataset_file(tmp_path / "ice_data_day_9.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "ice_data_day_1.json"
        path.write_text("{not json")
        with pytest.raises(MalformedGridError, match="not valid JSON"):
            load_dataset_file(path)

    def test_malformed_record(self, tmp_path):
        record = build_record(SMALL_VALUES)
        record["ice_concentration"] = record["ice_concentration"][:5]
        path = _write_day(tmp_path, 1, record)
        with pytest.raises(MalformedGridError):
            load_dataset_file(path, day=1)


class TestCatalog:

    def test_from_directory(self, data_dir):
        catalog = DatasetCatalog.from_directory(data_dir, day_count=2, settings=Settings())
        assert catalog.days == [1, 2]
        assert len(catalog) == 2
        assert catalog.get(2).value_at(0) == 80.0

    def test_day_count_from_settings(self, data_dir):
        settings = Settings(data_dir=str(data_dir), day_count=1)
        catalog = DatasetCatalog.from_directory(settings=settings)
        assert catalog.days == [1]

    def test_missing_day_file(self, data_dir):
        with pytest.raises(FileNotFoundError):
            DatasetCatalog.from_directory(data_dir, day_count=3, settings=Settings())

    def test_custom_pattern(self, tmp_path):
        (tmp_path / "lakes-1.json").write_text(json.dumps(uniform_record(5.0)))
        settings = Settings(data_dir=str(tmp_path), day_count=1, dataset_pattern="lakes-{day}.json")
        assert DatasetCatalog.from_directory(settings=settings).days == [1]

    def test_unknown_day(self):
        catalog = DatasetCatalog.from_records({1: uniform_record(5.0)})
        assert catalog.get(4) is None
        assert 4 not in catalog
        with pytest.raises(KeyError):
            catalog[4]

    def test_from_records_sets_day(self):
        catalog = DatasetCatalog.from_records({2: uniform_record(5.0), 1: uniform_record(6.0)})
        assert list(catalog) == [1, 2]
        assert catalog[2].day == 2
