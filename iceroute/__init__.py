"""ICEROUTE core: ice-concentration grids, overlays, water heuristics and route analysis."""

__version__ = "1.0.0"
