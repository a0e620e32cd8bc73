"""
Unit tests for request log context and structured log lines.
"""

import json
import logging

import pytest

from api.middleware import StructuredLogger, request_context


class TestRequestContext:

    @pytest.mark.parametrize("path,query,expected", [
        ("/api/ice/3/overlay.png", {}, {"area": "ice", "day": 3}),
        ("/api/ice/2/point", {"lat": "44.0"}, {"area": "ice", "day": 2}),
        ("/api/chokepoints", {"day": "4"}, {"area": "ice", "day": 4}),
        ("/api/route/analysis", {"day": "1"}, {"area": "route", "day": 1}),
        ("/api/route", {}, {"area": "route", "day": None}),
        ("/api/health", {}, {"area": "system", "day": None}),
        ("/", {}, {"area": "system", "day": None}),
    ])
    def test_context(self, path, query, expected):
        assert request_context(path, query) == expected

    def test_non_numeric_day_ignored(self):
        assert request_context("/api/water", {"day": "two"})["day"] is None


class TestStructuredLogger:

    def test_json_line_drops_empty_fields(self, caplog):
        log = StructuredLogger("iceroute.test.structured")
        with caplog.at_level(logging.INFO, logger="iceroute.test.structured"):
            log.info("Request completed", day=2, upload_bytes=None)

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["message"] == "Request completed"
        assert entry["service"] == "iceroute-api"
        assert entry["day"] == 2
        assert "upload_bytes" not in entry
        assert "request_id" not in entry

    def test_disabled_level_skipped(self, caplog):
        log = StructuredLogger("iceroute.test.quiet")
        with caplog.at_level(logging.WARNING, logger="iceroute.test.quiet"):
            log.info("ignored")
        assert not caplog.records
