"""
Configuration loader for the background removal service.

Environment variables are centralized here to keep the rest of the code
focused on image processing and to make operational tuning clear.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Color-distance fallback
    default_tolerance: float = Field(40.0)

    # Tinting
    default_tint_color: str = Field("#66D4FF")
    default_tint_factor: float = Field(0.2)

    # AI segmentation
    segmenter_backend: str = Field("rembg")
    rembg_model_name: str = Field("u2net")
    remote_segmenter_url: Optional[str] = Field(None)
    ai_timeout_seconds: float = Field(30.0)

    # Background assets
    assets_dir: Path = Field(Path("public/assets"))
    default_project_type: str = Field("base")
    default_background: str = Field("background1.png")

    # API
    log_level: str = Field("INFO")

    @field_validator("default_tolerance")
    @classmethod
    def validate_tolerance(cls, v: float) -> float:
        if v < 0:
            raise ValueError("DEFAULT_TOLERANCE must be non-negative")
        return v

    @field_validator("default_tint_factor")
    @classmethod
    def validate_tint_factor(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("DEFAULT_TINT_FACTOR must be within [0, 1]")
        return v

    @field_validator("default_tint_color")
    @classmethod
    def validate_tint_color(cls, v: str) -> str:
        if parse_hex_color(v) is None:
            raise ValueError("DEFAULT_TINT_COLOR must look like #RRGGBB")
        return v

    @field_validator("segmenter_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in {"rembg", "remote"}:
            raise ValueError("SEGMENTER_BACKEND must be one of rembg|remote")
        return v

    @property
    def tint_rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.default_tint_color)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    settings = Settings()
    if settings.segmenter_backend == "remote" and not settings.remote_segmenter_url:
        raise ValueError("REMOTE_SEGMENTER_URL is required when SEGMENTER_BACKEND=remote")
    return settings


def parse_hex_color(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parse ``#RRGGBB`` (leading ``#`` optional) into an RGB tuple, or None."""
    if not value:
        return None
    raw = value.strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if len(raw) != 6:
        return None
    try:
        r = int(raw[0:2], 16)
        g = int(raw[2:4], 16)
        b = int(raw[4:6], 16)
    except ValueError:
        return None
    return (r, g, b)
