"""
Background removal and compositing service package.

Exposes the pixel buffer model, the color-distance fallback segmenter, the
AI segmentation adapter, and the byte-level pipeline entry points used by the
FastAPI application.
"""

from .errors import AISegmentationFailed, AssetNotFound, BackdropError, DecodeError, EmptyResultError

__all__ = [
    "AISegmentationFailed",
    "AssetNotFound",
    "BackdropError",
    "DecodeError",
    "EmptyResultError",
]
