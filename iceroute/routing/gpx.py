"""
GPX route exchange.

Writes planned routes as GPX 1.1 documents for marine GPS units and
navigation apps (OpenCPN, qtVlm, OpenSeaMap trip planner), and reads
them back. A document holds one <rte> with ordered <rtept> children plus
an independent <wpt> per point.

Waypoints are named "Start", "Waypoint i" and "End" by position.

Security Note:
    Parsing uses defusedxml to prevent XXE (XML External Entity) attacks.
    Never use standard xml.etree.ElementTree for untrusted input.
"""

import logging
import math
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

import defusedxml.ElementTree as ET

logger = logging.getLogger(__name__)

GPX_NS = "http://www.topografix.com/GPX/1/1"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
GPX_CREATOR = "ICEROUTE Ice Prediction"
DEFAULT_ROUTE_NAME = "Icebreaker Route"


@dataclass
class NamedWaypoint:
    """A waypoint with its display name."""
    name: str
    lat: float
    lon: float


def waypoint_name(index: int, count: int) -> str:
    """'Start' for the first point, 'End' for the last, 'Waypoint i' between."""
    if index == 0:
        return "Start"
    if index == count - 1:
        return "End"
    return f"Waypoint {index}"


def name_waypoints(points: Sequence[Tuple[float, float]]) -> List[NamedWaypoint]:
    return [
        NamedWaypoint(name=waypoint_name(i, len(points)), lat=lat, lon=lon)
        for i, (lat, lon) in enumerate(points)
    ]


def to_dms(coord: float, is_lat: bool) -> str:
    """Degrees-minutes-seconds with hemisphere, e.g. 45°49'2.64"N."""
    if is_lat:
        hemi = "N" if coord >= 0 else "S"
    else:
        hemi = "E" if coord >= 0 else "W"
    abs_coord = abs(coord)
    degrees = math.floor(abs_coord)
    minutes = math.floor((abs_coord - degrees) * 60)
    seconds = (abs_coord - degrees - minutes / 60) * 3600
    return f"{degrees}°{minutes}'{seconds:.2f}\"{hemi}"


def format_coordinates(points: Sequence[Tuple[float, float]], fmt: str = "decimal") -> str:
    """
    One line per waypoint, 'Name: lat, lon'.

    Args:
        points: Ordered (lat, lon) waypoints
        fmt: "decimal" (6 places) or "dms"
    """
    if fmt not in ("decimal", "dms"):
        raise ValueError(f"Unknown coordinate format: {fmt}")

    lines = []
    for wp in name_waypoints(points):
        if fmt == "decimal":
            lines.append(f"{wp.name}: {wp.lat:.6f}, {wp.lon:.6f}")
        else:
            lines.append(f"{wp.name}: {to_dms(wp.lat, True)}, {to_dms(wp.lon, False)}")
    return "\n".join(lines)


def _describe(wp: NamedWaypoint) -> str:
    ns = "N" if wp.lat >= 0 else "S"
    ew = "E" if wp.lon >= 0 else "W"
    return f"{wp.name} - {abs(wp.lat):.6f}°{ns}, {abs(wp.lon):.6f}°{ew}"


def _point_element(tag: str, wp: NamedWaypoint) -> ElementTree.Element:
    elem = ElementTree.Element(tag, {"lat": str(float(wp.lat)), "lon": str(float(wp.lon))})
    ElementTree.SubElement(elem, "name").text = wp.name
    ElementTree.SubElement(elem, "desc").text = _describe(wp)
    return elem


def build_gpx(
    points: Sequence[Tuple[float, float]],
    name: str = DEFAULT_ROUTE_NAME,
    created: Optional[datetime] = None,
) -> str:
    """
    Serialize a route as a GPX 1.1 document.

    Args:
        points: Ordered (lat, lon) waypoints
        name: Route name
        created: Metadata timestamp (defaults to now, UTC)

    Returns:
        GPX XML text with an XML declaration
    """
    created = created or datetime.now(timezone.utc)
    named = name_waypoints(points)

    root = ElementTree.Element("gpx", {
        "version": "1.1",
        "creator": GPX_CREATOR,
        "xmlns": GPX_NS,
        "xmlns:xsi": XSI_NS,
        "xsi:schemaLocation": f"{GPX_NS} {GPX_NS}/gpx.xsd",
    })

    metadata = ElementTree.SubElement(root, "metadata")
    ElementTree.SubElement(metadata, "name").text = name
    ElementTree.SubElement(metadata, "time").text = created.isoformat()
    ElementTree.SubElement(metadata, "desc").text = "Route planned with ice concentration analysis"

    rte = ElementTree.SubElement(root, "rte")
    ElementTree.SubElement(rte, "name").text = name
    ElementTree.SubElement(rte, "desc").text = f"Route with {len(named)} waypoints"
    for wp in named:
        rte.append(_point_element("rtept", wp))

    for wp in named:
        root.append(_point_element("wpt", wp))

    ElementTree.indent(root, space="  ")
    body = ElementTree.tostring(root, encoding="unicode")
    logger.info(f"Built GPX route '{name}' with {len(named)} waypoints")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"


def gpx_filename(created: Optional[datetime] = None) -> str:
    created = created or datetime.now(timezone.utc)
    return f"icebreaker_route_{created.date().isoformat()}.gpx"


def parse_gpx_string(gpx_content: str) -> Tuple[str, List[NamedWaypoint]]:
    """
    Parse GPX content from string.

    Reads the first route's <rtept> elements, falling back to top-level
    <wpt> elements when the document has no route or the route is empty.

    Returns:
        (route name, ordered waypoints)

    Raises:
        ValueError: If the document holds no points
    """
    root = ET.fromstring(gpx_content)
    ns = {"gpx": GPX_NS}

    def find_all(parent, tag):
        found = parent.findall(f"gpx:{tag}", ns)
        return found if found else parent.findall(tag)

    def child_text(parent, tag) -> Optional[str]:
        elem = parent.find(f"gpx:{tag}", ns)
        if elem is None:
            elem = parent.find(tag)
        return elem.text if elem is not None else None

    route_name = DEFAULT_ROUTE_NAME
    elements = []
    rtes = find_all(root, "rte")
    if rtes:
        route_name = child_text(rtes[0], "name") or route_name
        elements = find_all(rtes[0], "rtept")
    if not elements:
        elements = find_all(root, "wpt")

    waypoints = []
    for i, elem in enumerate(elements):
        lat = float(elem.get("lat"))
        lon = float(elem.get("lon"))
        name = child_text(elem, "name") or waypoint_name(i, len(elements))
        waypoints.append(NamedWaypoint(name=name, lat=lat, lon=lon))

    if not waypoints:
        raise ValueError("No waypoints found in GPX content")

    logger.info(f"Parsed GPX route '{route_name}' with {len(waypoints)} waypoints")
    return route_name, waypoints
