"""
Integration tests for ICEROUTE API.

Fixtures (catalog, app_state, client) provided by tests/conftest.py:
day 1 is the mixed 5x4 grid, day 2 is 80% everywhere, day 3 is 10%.
"""

import io
import json
import logging

import pytest
from PIL import Image


LAKE_MICHIGAN = {"lat": 44.0, "lon": -87.0}
LAKE_MICHIGAN_EAST = {"lat": 44.5, "lon": -86.5}
INLAND = {"lat": 42.0, "lon": -92.0}


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "ICEROUTE API"
    assert data["version"] == "1.0.0"
    assert data["status"] == "operational"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["days_loaded"] == [1, 2, 3]
    assert data["route_state"] == "idle"
    assert "timestamp" in data


def test_request_id_echoed(client):
    response = client.get("/api/days", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_response_time_header(client):
    response = client.get("/api/days")
    assert float(response.headers["X-Response-Time"]) >= 0.0


def test_unknown_day_logged_as_warning(client, caplog):
    with caplog.at_level(logging.INFO, logger="iceroute.api.requests"):
        client.get("/api/ice/9/point", params=LAKE_MICHIGAN)

    entries = [
        (record.levelno, json.loads(record.getMessage()))
        for record in caplog.records
        if record.name == "iceroute.api.requests"
    ]
    level, entry = entries[-1]
    assert level == logging.WARNING
    assert entry["status_code"] == 404
    assert entry["area"] == "ice"
    assert entry["day"] == 9


def test_cors_preflight_uses_configured_methods(client):
    headers = {"Origin": "http://localhost:5173", "Access-Control-Request-Method": "DELETE"}
    response = client.options("/api/route", headers=headers)
    assert response.status_code == 200
    assert "DELETE" in response.headers["access-control-allow-methods"]

    headers["Access-Control-Request-Method"] = "PUT"
    assert client.options("/api/route", headers=headers).status_code == 400


# ============================================================================
# Ice Data Tests
# ============================================================================

def test_list_days(client):
    response = client.get("/api/days")
    assert response.status_code == 200
    days = response.json()["days"]
    assert [d["day"] for d in days] == [1, 2, 3]
    assert days[0]["dimensions"] == {"width": 5, "height": 4}
    assert days[0]["valid_cells"] == 16
    assert days[0]["regular"] is True


def test_point_lookup(client):
    response = client.get("/api/ice/1/point", params=LAKE_MICHIGAN)
    assert response.status_code == 200
    data = response.json()
    assert data["value"] == 50.0
    assert data["visible"] is True
    assert data["hover_text"] == "Ice: 50.0%"
    assert data["color"].startswith("rgba(100, 135, 227")


def test_point_lookup_no_data(client):
    response = client.get("/api/ice/1/point", params={"lat": 45.0, "lon": -88.0})
    data = response.json()
    assert data["value"] is None
    assert data["concentration"] is None
    assert data["visible"] is False
    assert data["hover_text"] is None


def test_point_lookup_clamps_display(client):
    data = client.get("/api/ice/1/point", params={"lat": 43.0, "lon": -84.0}).json()
    assert data["value"] == 150.0
    assert data["concentration"] == 100.0
    assert data["hover_text"] == "Ice: 100.0%"


def test_point_lookup_unknown_day(client):
    response = client.get("/api/ice/9/point", params=LAKE_MICHIGAN)
    assert response.status_code == 404


def test_point_lookup_invalid_latitude(client):
    response = client.get("/api/ice/1/point", params={"lat": 95.0, "lon": -87.0})
    assert response.status_code == 422


def test_overlay_png(client):
    response = client.get("/api/ice/1/overlay.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["X-Ice-Bounds"] == "42.0,-88.0,45.0,-84.0"
    img = Image.open(io.BytesIO(response.content))
    assert img.size == (5, 4)


def test_overlay_png_cached(client, app_state):
    client.get("/api/ice/2/overlay.png")
    client.get("/api/ice/2/overlay.png")
    stats = app_state.raster_cache.stats()
    assert stats["misses"] == 1
    assert stats["hits"] >= 1


def test_overlay_info(client):
    data = client.get("/api/ice/1/overlay").json()
    assert data["corners"] == [[42.0, -88.0], [45.0, -84.0]]
    assert len(data["legend"]) == 5


def test_overlay_unknown_day(client):
    assert client.get("/api/ice/0/overlay.png").status_code == 404


# ============================================================================
# Timeline, Reference Points and Water
# ============================================================================

@pytest.mark.parametrize("position,day", [(1.0, 1), (2.2, 2), (2.99, 3), (7.0, 3)])
def test_timeline_resolve(client, position, day):
    response = client.get("/api/timeline/resolve", params={"position": position})
    assert response.status_code == 200
    data = response.json()
    assert data["day"] == day
    assert data["days_available"] == 3


def test_timeline_label(client):
    data = client.get("/api/timeline/resolve", params={"position": 2.2}).json()
    assert data["label"] == "Day 2.2"


def test_chokepoints_heavy_ice(client):
    response = client.get("/api/chokepoints", params={"day": 2})
    assert response.status_code == 200
    points = response.json()["chokepoints"]
    assert len(points) == 5
    assert {p["hazard"] for p in points} == {"HIGH"}
    assert points[0]["hazard_color"] == "#c62828"


def test_chokepoints_light_ice(client):
    points = client.get("/api/chokepoints", params={"day": 3}).json()["chokepoints"]
    assert {p["hazard"] for p in points} == {"MINIMAL"}


def test_icebreakers(client):
    response = client.get("/api/icebreakers")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == ["mackinaw", "bristol-bay", "neah-bay"]


def test_water_lake(client):
    data = client.get("/api/water", params=LAKE_MICHIGAN).json()
    assert data["is_water"] is True
    assert data["rule"] == "lake"


def test_water_land(client):
    data = client.get("/api/water", params={**INLAND, "day": 1}).json()
    assert data["is_water"] is False
    assert data["rule"] is None


def test_water_unknown_day(client):
    assert client.get("/api/water", params={**LAKE_MICHIGAN, "day": 8}).status_code == 404


# ============================================================================
# Route Drawing Tests
# ============================================================================

def _draw(client, *points, day=2):
    client.post("/api/route/start")
    for point in points:
        response = client.post("/api/route/waypoints", json=point, params={"day": day})
        assert response.status_code == 200, response.text
    client.post("/api/route/stop")


def test_add_waypoint_requires_drawing(client):
    response = client.post("/api/route/waypoints", json=LAKE_MICHIGAN)
    assert response.status_code == 409


def test_add_land_waypoint_rejected(client):
    client.post("/api/route/start")
    response = client.post("/api/route/waypoints", json=INLAND, params={"day": 1})
    assert response.status_code == 422
    assert response.json()["points"] == [[42.0, -92.0]]
    assert client.get("/api/route").json()["waypoints"] == []


def test_add_waypoint_invalid_body(client):
    client.post("/api/route/start")
    response = client.post("/api/route/waypoints", json={"lat": 44.0})
    assert response.status_code == 422


def test_draw_route(client):
    client.post("/api/route/start")
    first = client.post("/api/route/waypoints", json=LAKE_MICHIGAN).json()
    assert first["count"] == 1
    assert first["waypoint"]["name"] == "Start"

    client.post("/api/route/waypoints", json=LAKE_MICHIGAN_EAST)
    data = client.post("/api/route/stop").json()
    assert data["state"] == "idle"
    assert [w["name"] for w in data["waypoints"]] == ["Start", "End"]
    assert len(data["legs"]) == 1
    assert data["length_km"] > 0


def test_analysis(client):
    _draw(client, LAKE_MICHIGAN, LAKE_MICHIGAN_EAST)
    response = client.get("/api/route/analysis", params={"day": 2})
    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert analysis["severity"] == "BLOCKED"
    assert analysis["avg_ice"] == 80.0
    assert analysis["color"] == "#D32F2F"


def test_analysis_follows_day(client):
    _draw(client, LAKE_MICHIGAN, LAKE_MICHIGAN_EAST)
    analysis = client.get("/api/route/analysis", params={"day": 3}).json()["analysis"]
    assert analysis["severity"] == "CLEAR"


def test_analysis_short_route(client):
    _draw(client, LAKE_MICHIGAN)
    data = client.get("/api/route/analysis", params={"day": 2}).json()
    assert data["analysis"] is None
    assert data["waypoint_count"] == 1


def test_clear_route(client):
    _draw(client, LAKE_MICHIGAN, LAKE_MICHIGAN_EAST)
    client.delete("/api/route")
    data = client.delete("/api/route").json()
    assert data["state"] == "idle"
    assert data["waypoints"] == []


def test_coordinates_text(client):
    _draw(client, LAKE_MICHIGAN, LAKE_MICHIGAN_EAST)
    response = client.get("/api/route/coordinates", params={"fmt": "decimal"})
    assert response.text.splitlines() == [
        "Start: 44.000000, -87.000000",
        "End: 44.500000, -86.500000",
    ]


# ============================================================================
# GPX Export / Import
# ============================================================================

def test_export_gpx(client):
    _draw(client, LAKE_MICHIGAN, LAKE_MICHIGAN_EAST)
    response = client.get("/api/route/export.gpx", params={"day": 2, "name": "Test Run"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/gpx+xml")
    assert "attachment" in response.headers["content-disposition"]
    assert response.text.count("<rtept ") == 2
    assert "<name>Test Run</name>" in response.text


def test_export_needs_two_waypoints(client):
    _draw(client, LAKE_MICHIGAN)
    response = client.get("/api/route/export.gpx", params={"day": 2})
    assert response.status_code == 400


def test_import_gpx_replaces_route(client):
    gpx = """<?xml version="1.0"?>
<gpx xmlns="http://www.topografix.com/GPX/1/1" version="1.1">
  <rte><name>Imported</name>
    <rtept lat="44.5" lon="-86.5"><name>A</name></rtept>
    <rtept lat="44.0" lon="-87.0"><name>B</name></rtept>
  </rte>
</gpx>"""
    response = client.post("/api/route/import.gpx", content=gpx, params={"day": 2})
    assert response.status_code == 200
    data = response.json()
    assert [(w["lat"], w["lon"]) for w in data["waypoints"]] == [(44.5, -86.5), (44.0, -87.0)]


def test_import_gpx_with_land_point(client):
    gpx = """<gpx version="1.1"><wpt lat="44.0" lon="-87.0"/><wpt lat="42.0" lon="-92.0"/></gpx>"""
    response = client.post("/api/route/import.gpx", content=gpx)
    assert response.status_code == 422
    assert client.get("/api/route").json()["waypoints"] == []


def test_import_gpx_invalid(client):
    response = client.post("/api/route/import.gpx", content="<gpx><rte/></gpx>")
    assert response.status_code == 400
    assert client.post("/api/route/import.gpx", content="").status_code == 400


# ============================================================================
# State Management
# ============================================================================

def test_replace_catalog_drops_overlays(client, app_state):
    from conftest import uniform_record
    from iceroute.grid.catalog import DatasetCatalog

    client.get("/api/ice/1/overlay.png")
    assert len(app_state.raster_cache) == 1

    app_state.replace_catalog(DatasetCatalog.from_records({1: uniform_record(55.0)}))
    assert len(app_state.raster_cache) == 0
    assert client.get("/api/days").json()["days"][0]["valid_cells"] == 20
    assert client.get("/api/ice/2/overlay.png").status_code == 404
