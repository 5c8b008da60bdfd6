"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations


class BackdropError(Exception):
    """Base class for errors raised by the background pipeline."""


class DecodeError(BackdropError, ValueError):
    """Input bytes are not a decodable image."""


class AISegmentationFailed(BackdropError):
    """The external segmentation capability was unavailable, errored or timed out."""


class EmptyResultError(BackdropError):
    """A pipeline stage produced a zero-length output."""


class AssetNotFound(BackdropError, FileNotFoundError):
    """A requested background asset does not exist."""
