"""
Adapter around external neural background-removal capabilities.

Every backend implements `Segmenter.remove` (encoded bytes in, encoded RGBA
bytes out). `run_segmenter` is the single call site the pipeline uses: it
time-boxes the call and folds every failure into `AISegmentationFailed`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from functools import lru_cache
import logging
from threading import Lock
from typing import Optional

import requests

from . import config
from .errors import AISegmentationFailed

logger = logging.getLogger(__name__)


class Segmenter(ABC):
    """Abstract base class for AI background removal backends."""

    name = "segmenter"

    @abstractmethod
    def remove(self, image_bytes: bytes) -> bytes:
        """
        Remove the background from an encoded image.

        Args:
            image_bytes: Encoded input image (PNG, JPEG, ...)

        Returns:
            Encoded PNG with transparency everywhere except the subject
        """


class RembgSegmenter(Segmenter):
    """Local U²-Net family models through the rembg library."""

    name = "rembg"

    def __init__(self, model_name: str = "u2net"):
        self.model_name = model_name
        self._session = None
        self._lock = Lock()

    def _get_session(self):
        # rembg downloads the model on first use; keep a single session per process.
        if self._session is not None:
            return self._session
        with self._lock:
            if self._session is None:
                from rembg import new_session

                self._session = new_session(self.model_name)
                logger.info("rembg session ready (model=%s)", self.model_name)
        return self._session

    def remove(self, image_bytes: bytes) -> bytes:
        from rembg import remove

        return remove(image_bytes, session=self._get_session())


class RemoteSegmenter(Segmenter):
    """Delegates to an HTTP service that answers a multipart upload with PNG bytes."""

    name = "remote"

    def __init__(self, url: str, timeout_seconds: float = 30.0):
        self.url = url
        self.timeout_seconds = timeout_seconds

    def remove(self, image_bytes: bytes) -> bytes:
        resp = requests.post(
            self.url,
            files={"image": ("image.png", image_bytes, "application/octet-stream")},
            timeout=(5, self.timeout_seconds or None),
        )
        resp.raise_for_status()
        return resp.content


def run_segmenter(segmenter: Segmenter, image_bytes: bytes, timeout: Optional[float] = None) -> bytes:
    """
    Call ``segmenter`` once and return its output.

    With a positive ``timeout`` the call runs in a worker thread and is
    abandoned when the deadline passes. The abandoned thread is not killed:
    it keeps running until the backend returns, and interpreter shutdown
    waits for it. Backends that can hang should carry their own deadline,
    as `RemoteSegmenter` does with its request timeout.

    Raises:
        AISegmentationFailed: on any backend error, timeout or empty output.
    """
    name = getattr(segmenter, "name", type(segmenter).__name__)
    try:
        if timeout and timeout > 0:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="segmenter")
            future = executor.submit(segmenter.remove, image_bytes)
            try:
                result = future.result(timeout=timeout)
            except FutureTimeout as exc:
                future.cancel()
                raise AISegmentationFailed(
                    f"AI background removal timed out after {timeout:g}s ({name})"
                ) from exc
            finally:
                executor.shutdown(wait=False)
        else:
            result = segmenter.remove(image_bytes)
    except AISegmentationFailed:
        raise
    except Exception as exc:  # noqa: BLE001
        raise AISegmentationFailed(f"AI background removal failed ({name}): {exc}") from exc

    if not result:
        raise AISegmentationFailed(f"AI background removal returned no data ({name})")
    return result


def build_segmenter(settings: config.Settings) -> Segmenter:
    if settings.segmenter_backend == "remote":
        return RemoteSegmenter(settings.remote_segmenter_url, timeout_seconds=settings.ai_timeout_seconds)
    return RembgSegmenter(model_name=settings.rembg_model_name)


@lru_cache()
def get_segmenter() -> Segmenter:
    """Return the process-wide segmenter configured by the environment."""
    segmenter = build_segmenter(config.get_settings())
    logger.info("Using AI segmenter backend: %s", segmenter.name)
    return segmenter
