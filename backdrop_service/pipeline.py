"""
High-level background removal and compositing pipeline.

`remove_background` is the main entry point used by both the HTTP API and the
local CLI helper. It keeps orchestration simple:
bytes in -> AI segmenter (or color-distance fallback) -> RGBA PNG bytes out.
The remaining entry points composite or tint already cut-out images.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

from . import config
from .ai_segmenter import Segmenter, get_segmenter, run_segmenter
from .color_segmenter import DEFAULT_TOLERANCE, remove_dominant_color
from .compositor import DEFAULT_TINT_COLOR, DEFAULT_TINT_FACTOR, TintSpec, composite, tint
from .errors import AISegmentationFailed, EmptyResultError
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class RemovalMode(str, enum.Enum):
    ROBUST = "robust"
    AI = "ai"
    SIMPLE = "simple"


def _ensure_output(data: Optional[bytes], stage: str) -> bytes:
    if not data:
        raise EmptyResultError(f"{stage} produced an empty buffer")
    return data


def _remove_with_color_distance(image_bytes: bytes, tolerance: float) -> bytes:
    buffer = PixelBuffer.decode(image_bytes)
    remove_dominant_color(buffer, tolerance)
    return _ensure_output(buffer.encode(), "color-distance removal")


def remove_background(
    image_bytes: bytes,
    mode: RemovalMode = RemovalMode.ROBUST,
    segmenter: Optional[Segmenter] = None,
    tolerance: Optional[float] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Strip the background from an encoded image and return RGBA PNG bytes.

    Robust mode tries the AI segmenter once and falls back to the
    color-distance segmenter on failure. AI mode never falls back; simple
    mode never calls the AI segmenter.

    Raises:
        DecodeError: when the fallback cannot decode the input.
        AISegmentationFailed: in AI mode when the segmenter fails.
        EmptyResultError: when a stage returns no data.
    """
    mode = RemovalMode(mode)
    if mode is RemovalMode.SIMPLE:
        if tolerance is None:
            tolerance = config.get_settings().default_tolerance
        return _remove_with_color_distance(image_bytes, tolerance)

    if tolerance is None or timeout is None:
        settings = config.get_settings()
        tolerance = settings.default_tolerance if tolerance is None else tolerance
        timeout = settings.ai_timeout_seconds if timeout is None else timeout

    segmenter = segmenter or get_segmenter()
    try:
        return run_segmenter(segmenter, image_bytes, timeout=timeout)
    except AISegmentationFailed as exc:
        if mode is RemovalMode.AI:
            logger.error("AI background removal failed: %s", exc)
            raise
        logger.warning("AI method failed (%s), trying simple color-based method", exc)

    return _remove_with_color_distance(image_bytes, tolerance)


def remove_background_robust(image_bytes: bytes, segmenter: Optional[Segmenter] = None) -> bytes:
    return remove_background(image_bytes, RemovalMode.ROBUST, segmenter=segmenter)


def remove_background_ai(image_bytes: bytes, segmenter: Optional[Segmenter] = None) -> bytes:
    return remove_background(image_bytes, RemovalMode.AI, segmenter=segmenter)


def remove_background_simple(image_bytes: bytes) -> bytes:
    return _remove_with_color_distance(image_bytes, DEFAULT_TOLERANCE)


def apply_background(foreground_bytes: bytes, background_bytes: bytes) -> bytes:
    """Composite a cut-out foreground over a background stretched to its size."""
    foreground = PixelBuffer.decode(foreground_bytes)
    background = PixelBuffer.decode(background_bytes)
    return _ensure_output(composite(foreground, background).encode(), "composite")


def apply_tint(
    image_bytes: bytes,
    tint_color: Sequence[int] = DEFAULT_TINT_COLOR,
    tint_factor: float = DEFAULT_TINT_FACTOR,
) -> bytes:
    spec = TintSpec(color=tuple(int(c) for c in tint_color), factor=float(tint_factor))
    buffer = PixelBuffer.decode(image_bytes)
    return _ensure_output(tint(buffer, spec).encode(), "tint")
