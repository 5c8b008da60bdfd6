"""Alpha compositing of a cutout over a background, and alpha-gated tinting."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Tuple

import numpy as np

from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_TINT_COLOR = (102, 212, 255)
DEFAULT_TINT_FACTOR = 0.2


@dataclass(frozen=True)
class TintSpec:
    color: Tuple[int, int, int] = DEFAULT_TINT_COLOR
    factor: float = DEFAULT_TINT_FACTOR

    def __post_init__(self) -> None:
        if len(self.color) != 3 or any(not 0 <= int(c) <= 255 for c in self.color):
            raise ValueError(f"tint color must be an RGB triple in [0, 255], got {self.color!r}")
        if not 0.0 <= float(self.factor) <= 1.0:
            raise ValueError(f"tint factor must be within [0, 1], got {self.factor!r}")


def _round_to_u8(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp, matching integer pixel semantics."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def composite(foreground: PixelBuffer, background: PixelBuffer) -> PixelBuffer:
    """
    Place ``foreground`` over ``background`` using the "over" operator.

    The background is resized to the foreground's exact dimensions first, so
    the result always has the foreground's size.
    """
    bg = background.resize(foreground.width, foreground.height)

    fg_f = foreground.data.astype(np.float64)
    bg_f = bg.data.astype(np.float64)
    a = fg_f[..., 3:4] / 255.0
    b = bg_f[..., 3:4] / 255.0

    rgb = fg_f[..., :3] * a + bg_f[..., :3] * (1.0 - a)
    alpha = (a + b * (1.0 - a)) * 255.0

    out = np.concatenate([_round_to_u8(rgb), _round_to_u8(alpha)], axis=2)
    logger.debug(
        "composite: fg=%dx%d bg=%dx%d",
        foreground.width,
        foreground.height,
        background.width,
        background.height,
    )
    return PixelBuffer(out)


def tint(buffer: PixelBuffer, spec: TintSpec = TintSpec()) -> PixelBuffer:
    """Blend every visible pixel toward ``spec.color`` by ``spec.factor``; in place."""
    visible = buffer.data[..., 3] > 0
    if not np.any(visible) or spec.factor == 0:
        return buffer

    rgb = buffer.data[..., :3][visible].astype(np.float64)
    target = np.asarray(spec.color, dtype=np.float64)
    blended = rgb * (1.0 - spec.factor) + target * spec.factor
    buffer.data[..., :3][visible] = _round_to_u8(blended)
    return buffer
