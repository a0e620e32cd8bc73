"""
Overlay rasterizer: converts a whole GridDataset into an RGBA pixel buffer.

Pixel (col, row) of the output is cell (row, col) of the grid: row 0
(north) is the top of the image and column 0 (west) the left edge, so no
flips are applied. The image is georeferenced by the dataset bounds.

Colours are computed with the same formula as ``colors.color_for``,
vectorised with numpy. Rasterizing a 1024x1024 grid is done once per
dataset; RasterCache memoises the result by dataset identity.
"""

import io
import logging
import threading
import weakref
from typing import Dict, Optional

import numpy as np
from PIL import Image

from iceroute.grid.dataset import GridDataset
from iceroute.render.colors import MAX_CONCENTRATION, MIN_CONCENTRATION, VISIBILITY_THRESHOLD

logger = logging.getLogger(__name__)


def colorize(values: np.ndarray) -> np.ndarray:
    """
    Vectorised concentration → RGBA lookup.

    Parameters
    ----------
    values : float array of any shape (NaN = no data)

    Returns
    -------
    uint8 array of shape (*values.shape, 4); transparent cells are all zero.
    """
    values = np.asarray(values, dtype=np.float64)
    rgba = np.zeros((*values.shape, 4), dtype=np.uint8)

    visible = ~np.isnan(values)
    clamped = np.clip(np.where(visible, values, 0.0), MIN_CONCENTRATION, MAX_CONCENTRATION)
    visible &= clamped >= VISIBILITY_THRESHOLD
    if not visible.any():
        return rgba

    v = clamped[visible] / 100.0
    rgba[visible, 0] = np.floor(200 * (1 - v)).astype(np.uint8)
    rgba[visible, 1] = np.floor(220 - 170 * v).astype(np.uint8)
    rgba[visible, 2] = np.floor(255 - 55 * v).astype(np.uint8)
    rgba[visible, 3] = np.rint((0.4 + 0.6 * v) * 255).astype(np.uint8)
    return rgba


def rasterize(dataset: GridDataset) -> np.ndarray:
    """
    Render a dataset to an RGBA buffer of shape (height, width, 4).

    Buffer[row, col] is the colour of concentration[row * width + col].
    """
    grid = dataset.concentration.reshape(dataset.height, dataset.width)
    rgba = colorize(grid)
    logger.debug(
        f"Rasterized day={dataset.day} {dataset.width}x{dataset.height}: "
        f"{int((rgba[..., 3] > 0).sum())} visible cells"
    )
    return rgba


def to_png(rgba: np.ndarray) -> bytes:
    """Encode an RGBA buffer as PNG bytes."""
    img = Image.fromarray(rgba, "RGBA")
    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=False)
    return buf.getvalue()


class RasterCache:
    """
    Memoised rasterization keyed by dataset identity.

    Entries are held through weak references to the dataset, so dropping
    or replacing a day's dataset invalidates its overlay automatically.
    Thread-safe for concurrent readers.

    Usage:
        cache = RasterCache()
        rgba = cache.get(dataset)
        png = cache.get_png(dataset)
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._buffers: "weakref.WeakKeyDictionary[GridDataset, np.ndarray]" = weakref.WeakKeyDictionary()
        self._pngs: "weakref.WeakKeyDictionary[GridDataset, bytes]" = weakref.WeakKeyDictionary()
        self._lock = threading.RLock()

        # Metrics
        self._hits = 0
        self._misses = 0

    def get(self, dataset: GridDataset) -> np.ndarray:
        """RGBA buffer for a dataset, rendered on first request."""
        if not self.enabled:
            return rasterize(dataset)

        with self._lock:
            rgba = self._buffers.get(dataset)
            if rgba is not None:
                self._hits += 1
                return rgba

            self._misses += 1
            rgba = rasterize(dataset)
            rgba.flags.writeable = False
            self._buffers[dataset] = rgba
            return rgba

    def get_png(self, dataset: GridDataset) -> bytes:
        """PNG-encoded overlay for a dataset."""
        if not self.enabled:
            return to_png(rasterize(dataset))

        with self._lock:
            png = self._pngs.get(dataset)
            if png is not None:
                self._hits += 1
                return png

            png = to_png(self.get(dataset))
            self._pngs[dataset] = png
            return png

    def invalidate(self, dataset: Optional[GridDataset] = None) -> None:
        """Drop one dataset's overlay, or everything."""
        with self._lock:
            if dataset is None:
                self._buffers.clear()
                self._pngs.clear()
            else:
                self._buffers.pop(dataset, None)
                self._pngs.pop(dataset, None)

    def __len__(self) -> int:
        return len(self._buffers)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._buffers),
                "hits": self._hits,
                "misses": self._misses,
            }
