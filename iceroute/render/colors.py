"""
Concentration colour mapping.

Single source of truth for how an ice concentration value is displayed:
the overlay rasterizer, hover text and legend all derive from the clamped
value computed here, so rendered colour and displayed percentage never
disagree.

Gradient runs from light blue at 1% to dark blue at 100%:
    r = floor(200 * (1 - v))
    g = floor(220 - 170 * v)
    b = floor(255 - 55 * v)
    alpha = 0.4 + 0.6 * v          with v = clamped / 100
"""

import math
from typing import List, NamedTuple, Optional

from iceroute.grid.dataset import is_no_data

# Anything below 1% is treated as visually "no ice"
VISIBILITY_THRESHOLD = 1.0

MIN_CONCENTRATION = 0.0
MAX_CONCENTRATION = 100.0


class IceColor(NamedTuple):
    """RGB channels (0-255) plus alpha (0-1)."""
    r: int
    g: int
    b: int
    alpha: float

    @property
    def alpha_byte(self) -> int:
        """Alpha scaled to 0-255 as stored in an 8-bit RGBA pixel."""
        return int(round(self.alpha * 255))

    def to_rgba_string(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.alpha})"

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


# Returned for no data and for values under the visibility threshold
TRANSPARENT = None


def clamp_concentration(value: Optional[float]) -> Optional[float]:
    """Clamp to [0, 100]; NO_DATA and NaN stay NO_DATA."""
    if is_no_data(value):
        return None
    return max(MIN_CONCENTRATION, min(MAX_CONCENTRATION, float(value)))


def is_visible_ice(value: Optional[float]) -> bool:
    clamped = clamp_concentration(value)
    if clamped is None:
        return False
    return clamped >= VISIBILITY_THRESHOLD


def color_for(value: Optional[float]) -> Optional[IceColor]:
    """Display colour for a concentration, or TRANSPARENT."""
    clamped = clamp_concentration(value)
    if clamped is None or clamped < VISIBILITY_THRESHOLD:
        return TRANSPARENT

    v = clamped / 100.0
    return IceColor(
        r=int(math.floor(200 * (1 - v))),
        g=int(math.floor(220 - 170 * v)),
        b=int(math.floor(255 - 55 * v)),
        alpha=0.4 + 0.6 * v,
    )


def hover_text(value: Optional[float]) -> Optional[str]:
    """Hover label for a looked-up value; None when there is nothing to show."""
    clamped = clamp_concentration(value)
    if clamped is None:
        return None
    if clamped < VISIBILITY_THRESHOLD:
        return "Ice: 0.0% (not visible)"
    return f"Ice: {clamped:.1f}%"


def legend_stops(steps: int = 4) -> List[dict]:
    """Evenly spaced legend entries from 0% to 100%."""
    stops = []
    for i in range(steps + 1):
        pct = 100.0 * i / steps
        color = color_for(pct)
        stops.append({
            "label": f"{pct:.0f}%",
            "value": pct,
            "color": color.to_rgba_string() if color else None,
        })
    return stops
