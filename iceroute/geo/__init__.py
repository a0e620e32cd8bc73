"""Spherical-Earth geodesy and the navigable-water heuristic."""

from .geodesy import bearing_deg, distance_km
from .water import WaterClassifier, is_water

__all__ = ["bearing_deg", "distance_km", "WaterClassifier", "is_water"]
