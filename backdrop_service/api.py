"""
FastAPI layer exposing background removal and compositing.

Endpoints:
 - GET /health
 - POST /api/upload
 - POST /api/test-bg-removal
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import config
from .ai_segmenter import Segmenter, get_segmenter
from .assets import load_background
from .errors import AssetNotFound, DecodeError
from .pipeline import RemovalMode, apply_background, apply_tint, remove_background

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Background Removal Service", version="0.1.0")


class ProcessedImageResponse(BaseModel):
    processedImageUrl: str


class RemovalTestResponse(ProcessedImageResponse):
    method: str
    success: bool = True


def _to_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


def _error_response(status_code: int, error: str, exc: Exception, **extra) -> JSONResponse:
    content = {"error": error, "details": str(exc)}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _parse_method(value: Optional[str]) -> RemovalMode:
    try:
        return RemovalMode((value or "robust").lower())
    except ValueError:
        logger.warning("Unknown removal method '%s', using robust", value)
        return RemovalMode.ROBUST


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/upload", response_model=ProcessedImageResponse)
def upload(
    image: UploadFile = File(...),
    projectType: Optional[str] = Form(None),
    backgroundChoice: Optional[str] = Form(None),
    tintColor: Optional[str] = Form(None),
    tintFactor: Optional[float] = Form(None),
    segmenter: Segmenter = Depends(get_segmenter),
):
    file_bytes = image.file.read()
    if not file_bytes:
        raise HTTPException(status_code=400, detail="No file uploaded")

    tint_rgb = None
    if tintColor or tintFactor is not None:
        tint_rgb = config.parse_hex_color(tintColor) if tintColor else settings.tint_rgb
        if tint_rgb is None:
            raise HTTPException(status_code=400, detail="tintColor must look like #RRGGBB")
        if tintFactor is not None and not 0.0 <= tintFactor <= 1.0:
            raise HTTPException(status_code=400, detail="tintFactor must be within [0, 1]")

    try:
        logger.info("Removing background using robust local processing...")
        foreground = remove_background(file_bytes, RemovalMode.ROBUST, segmenter=segmenter)
        if tint_rgb is not None:
            factor = settings.default_tint_factor if tintFactor is None else tintFactor
            foreground = apply_tint(foreground, tint_rgb, factor)

        background = load_background(projectType, backgroundChoice)
        output = apply_background(foreground, background)
    except DecodeError as exc:
        logger.warning("Rejected upload: %s", exc)
        return _error_response(400, "Image processing failed", exc)
    except AssetNotFound as exc:
        logger.warning("Background lookup failed: %s", exc)
        return _error_response(404, "Image processing failed", exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Image processing failed: %s", exc)
        return _error_response(500, "Image processing failed", exc)

    logger.info("Image processing complete.")
    return ProcessedImageResponse(processedImageUrl=_to_data_url(output))


@app.post("/api/test-bg-removal", response_model=RemovalTestResponse)
def bg_removal_check(
    image: UploadFile = File(...),
    method: str = Form("robust"),
    segmenter: Segmenter = Depends(get_segmenter),
):
    file_bytes = image.file.read()
    if not file_bytes:
        raise HTTPException(status_code=400, detail="No file uploaded")

    mode = _parse_method(method)
    logger.info("Testing background removal with method: %s", mode.value)
    try:
        output = remove_background(file_bytes, mode, segmenter=segmenter)
    except DecodeError as exc:
        return _error_response(400, "Background removal failed", exc, method=mode.value, success=False)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Background removal with method '%s' failed: %s", mode.value, exc)
        return _error_response(500, "Background removal failed", exc, method=mode.value, success=False)

    logger.info("Background removal with method '%s' completed successfully.", mode.value)
    return RemovalTestResponse(processedImageUrl=_to_data_url(output), method=mode.value)
