"""Concentration colour mapping and overlay rasterization."""

from .colors import TRANSPARENT, VISIBILITY_THRESHOLD, IceColor, clamp_concentration, color_for, hover_text
from .rasterizer import RasterCache, rasterize, to_png

__all__ = [
    "TRANSPARENT",
    "VISIBILITY_THRESHOLD",
    "IceColor",
    "clamp_concentration",
    "color_for",
    "hover_text",
    "RasterCache",
    "rasterize",
    "to_png",
]
