"""Shared builders for test images and segmenter stubs."""

from __future__ import annotations

import time
from typing import Optional, Sequence

from backdrop_service.ai_segmenter import Segmenter
from backdrop_service.pixel_buffer import PixelBuffer

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


def make_buffer(width: int, height: int, pixels: Sequence[Sequence[int]]) -> PixelBuffer:
    return PixelBuffer.from_pixels(width, height, pixels)


def make_png(width: int, height: int, pixels: Sequence[Sequence[int]]) -> bytes:
    return make_buffer(width, height, pixels).encode()


def solid_png(width: int, height: int, rgba: Sequence[int]) -> bytes:
    return PixelBuffer.blank(width, height, rgba).encode()


class StubSegmenter(Segmenter):
    """Deterministic stand-in for the AI capability."""

    name = "stub"

    def __init__(
        self,
        output: Optional[bytes] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.output = output
        self.error = error
        self.delay = delay
        self.calls = 0

    def remove(self, image_bytes: bytes) -> bytes:
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.output if self.output is not None else image_bytes
