"""
In-memory RGBA raster used by every pipeline stage.

Buffers are decoded from encoded image bytes with Pillow, held as a
``(height, width, 4)`` uint8 numpy array, and always encoded back to PNG so
pixel values survive the round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
from typing import Iterable, List, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


@dataclass(eq=False)
class PixelBuffer:
    data: np.ndarray  # (H, W, 4) uint8, row-major

    def __post_init__(self) -> None:
        if self.data.ndim != 3 or self.data.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects an (H, W, 4) array, got shape {self.data.shape}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"PixelBuffer expects uint8 data, got {self.data.dtype}")
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise ValueError("PixelBuffer dimensions must be positive")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching Pillow's convention."""
        return self.width, self.height

    @classmethod
    def decode(cls, image_bytes: bytes) -> "PixelBuffer":
        """
        Decode encoded image bytes (PNG, JPEG, WebP, ...) into an RGBA buffer.

        Raises:
            DecodeError: when the bytes are empty, truncated, not an image, or
                declare dimensions past Pillow's decompression-bomb limit.
        """
        if not image_bytes:
            raise DecodeError("Invalid image data: empty input")
        try:
            with Image.open(BytesIO(image_bytes)) as image:
                image.load()
                rgba = image.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(f"Invalid image data: {exc}") from exc
        return cls(np.array(rgba, dtype=np.uint8))

    @classmethod
    def blank(cls, width: int, height: int, rgba: Sequence[int] = (0, 0, 0, 0)) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive")
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[...] = np.asarray(rgba, dtype=np.uint8)
        return cls(data)

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: Iterable[Sequence[int]]) -> "PixelBuffer":
        """Build a buffer from a row-major sequence of (r, g, b, a) tuples."""
        arr = np.asarray(list(pixels), dtype=np.int64)
        if arr.shape != (width * height, 4):
            raise ValueError(
                f"expected {width * height} RGBA pixels for {width}x{height}, got array of shape {arr.shape}"
            )
        if arr.min() < 0 or arr.max() > 255:
            raise ValueError("pixel channels must be within [0, 255]")
        return cls(arr.astype(np.uint8).reshape(height, width, 4))

    def encode(self) -> bytes:
        """Encode as PNG (lossless)."""
        buf = BytesIO()
        Image.fromarray(self.data).save(buf, format="PNG")
        return buf.getvalue()

    def resize(self, width: int, height: int) -> "PixelBuffer":
        """Return a new buffer resampled bilinearly to ``width`` x ``height``."""
        if width <= 0 or height <= 0:
            raise ValueError("resize dimensions must be positive")
        if (width, height) == self.size:
            return self.copy()
        resized = cv2.resize(self.data, (width, height), interpolation=cv2.INTER_LINEAR)
        logger.debug("resized buffer %dx%d -> %dx%d", self.width, self.height, width, height)
        return PixelBuffer(np.ascontiguousarray(resized, dtype=np.uint8))

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy())

    def get_pixel(self, x: int, y: int) -> RGBA:
        self._check_bounds(x, y)
        r, g, b, a = self.data[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, rgba: Sequence[int]) -> None:
        self._check_bounds(x, y)
        if len(rgba) != 4 or any(not 0 <= int(c) <= 255 for c in rgba):
            raise ValueError(f"invalid RGBA value: {rgba!r}")
        self.data[y, x] = rgba

    def pixels(self) -> List[RGBA]:
        """All pixels in row-major order."""
        return [tuple(int(c) for c in px) for px in self.data.reshape(-1, 4)]

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")


def decode(image_bytes: bytes) -> PixelBuffer:
    return PixelBuffer.decode(image_bytes)


def encode(buffer: PixelBuffer) -> bytes:
    return buffer.encode()


def resize(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    return buffer.resize(width, height)
