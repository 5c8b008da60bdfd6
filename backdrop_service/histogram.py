"""
Color histogram over a pixel buffer, used to estimate the background color.

Colors are keyed by RGB only (alpha is ignored). The dominant color is the
most frequent key; ties go to whichever color appears first in row-major
scan order, so the result never depends on container iteration order.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Dict, Tuple

import numpy as np

from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


def _pack_rgb(data: np.ndarray) -> np.ndarray:
    """Flatten an (H, W, 4) raster into one uint32 key per pixel: r<<16 | g<<8 | b."""
    rgb = data[..., :3].reshape(-1, 3).astype(np.uint32)
    return (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]


def _unpack_rgb(key: int) -> RGB:
    key = int(key)
    return (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF


@dataclass(frozen=True, eq=False)
class ColorHistogram:
    keys: np.ndarray  # packed RGB, sorted ascending
    totals: np.ndarray  # occurrences per key
    first_index: np.ndarray  # row-major index of the first pixel with that key

    def __len__(self) -> int:
        return int(self.keys.size)

    def count(self, rgb: RGB) -> int:
        key = (int(rgb[0]) << 16) | (int(rgb[1]) << 8) | int(rgb[2])
        pos = int(np.searchsorted(self.keys, key))
        if pos < self.keys.size and int(self.keys[pos]) == key:
            return int(self.totals[pos])
        return 0

    def counts(self) -> Dict[RGB, int]:
        """RGB -> count, ordered by first occurrence in the scan."""
        order = np.argsort(self.first_index, kind="stable")
        return OrderedDict((_unpack_rgb(self.keys[i]), int(self.totals[i])) for i in order)

    def dominant(self) -> RGB:
        best = self.totals.max()
        candidates = np.flatnonzero(self.totals == best)
        # Earliest first occurrence wins ties.
        winner = candidates[np.argmin(self.first_index[candidates])]
        return _unpack_rgb(self.keys[winner])


def build_histogram(buffer: PixelBuffer) -> ColorHistogram:
    """Count every pixel's RGB value exactly once."""
    packed = _pack_rgb(buffer.data)
    keys, first_index, counts = np.unique(packed, return_index=True, return_counts=True)
    return ColorHistogram(keys=keys, totals=counts, first_index=first_index)


def dominant_color(buffer: PixelBuffer) -> RGB:
    histogram = build_histogram(buffer)
    color = histogram.dominant()
    logger.debug(
        "histogram: %d distinct colors over %dx%d, dominant=%s",
        len(histogram),
        buffer.width,
        buffer.height,
        color,
    )
    return color
