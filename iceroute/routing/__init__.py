"""Route drawing, ice analysis along routes, and GPX exchange."""

from .analyzer import RouteAnalysis, Severity, analyze, validate_for_export
from .planner import DrawingState, RoutePlanner

__all__ = [
    "RouteAnalysis",
    "Severity",
    "analyze",
    "validate_for_export",
    "DrawingState",
    "RoutePlanner",
]
