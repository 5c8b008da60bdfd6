"""Lookup of replacement background images under ``<assets_dir>/<project_type>/``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from . import config
from .errors import AssetNotFound

logger = logging.getLogger(__name__)


def resolve_background(
    project_type: Optional[str] = None,
    choice: Optional[str] = None,
    settings: Optional[config.Settings] = None,
) -> Path:
    """
    Return the path of a background asset.

    Raises:
        AssetNotFound: when the file is missing or the names escape the assets directory.
    """
    settings = settings or config.get_settings()
    project_type = project_type or settings.default_project_type
    choice = choice or settings.default_background

    root = Path(settings.assets_dir).resolve()
    project_dir = (root / project_type).resolve()
    path = (project_dir / choice).resolve()
    if root not in project_dir.parents or path.parent != project_dir:
        raise AssetNotFound(f"Background image not found: {project_type}/{choice}")
    if not path.is_file():
        raise AssetNotFound(f"Background image not found: {path}")
    return path


def load_background(
    project_type: Optional[str] = None,
    choice: Optional[str] = None,
    settings: Optional[config.Settings] = None,
) -> bytes:
    path = resolve_background(project_type, choice, settings=settings)
    logger.info("Loading background image %s", path)
    return path.read_bytes()
