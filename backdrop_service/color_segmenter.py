"""
Deterministic color-distance background removal.

The most frequent RGB value is taken as the background color; every pixel
within ``tolerance`` (Euclidean RGB distance, alpha excluded) of it becomes
fully transparent. Each pixel is decided independently in a single pass.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from .histogram import dominant_color
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 40.0
# floor(sqrt(3 * 255**2)); any tolerance at or above this clears the whole image.
MAX_RGB_DISTANCE = 441


def color_distance(a: Sequence[int], b: Sequence[int]) -> float:
    """Euclidean distance over the first three channels."""
    return math.sqrt(sum((int(x) - int(y)) ** 2 for x, y in zip(a[:3], b[:3])))


def background_mask(buffer: PixelBuffer, tolerance: float = DEFAULT_TOLERANCE) -> np.ndarray:
    """Boolean (H, W) mask, True where the pixel is classified as background."""
    if tolerance < 0:
        raise ValueError("tolerance must be non-negative")

    if tolerance >= MAX_RGB_DISTANCE:
        return np.ones((buffer.height, buffer.width), dtype=bool)

    target = np.array(dominant_color(buffer), dtype=np.int32)
    diff = buffer.data[..., :3].astype(np.int32) - target
    dist_sq = np.sum(diff * diff, axis=2)
    # Integer squared distances avoid sqrt rounding at the threshold.
    return dist_sq <= tolerance * tolerance


def remove_dominant_color(buffer: PixelBuffer, tolerance: float = DEFAULT_TOLERANCE) -> PixelBuffer:
    """
    Clear the alpha of every pixel close to the dominant color.

    The buffer is modified in place and returned. Pixels outside the
    tolerance keep their original RGBA values, alpha included.
    """
    mask = background_mask(buffer, tolerance)
    buffer.data[..., 3][mask] = 0
    logger.debug(
        "color segmenter: tolerance=%.1f cleared %d/%d pixels",
        tolerance,
        int(mask.sum()),
        mask.size,
    )
    return buffer
