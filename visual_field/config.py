"""
Configuration for the visual field library.

Settings are read from environment variables with the ``VISUAL_FIELD_`` prefix.
Nested groups use a double underscore, e.g.
``VISUAL_FIELD_SEGMENTS__MAX_INNER_CONTOUR_RATIO=0.8``.
"""

import logging
from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from visual_field.core.constants import SegmentConstants, TransformConstants
from visual_field.core.enums import Interpolation

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SystemSettings(BaseModel):
    """General runtime settings."""

    log_level: str = Field(default="INFO", description="Root log level for configure_logging")


class SegmentSettings(BaseModel):
    """Defaults for segment construction from contour hierarchies."""

    max_inner_contour_ratio: float = Field(
        default=SegmentConstants.DEFAULT_MAX_INNER_CONTOUR_RATIO,
        gt=0.0,
        le=1.0,
        description="Inner contours above this fraction of the parent's area are skipped",
    )
    min_segment_area: float = Field(default=SegmentConstants.DEFAULT_MIN_SEGMENT_AREA, ge=0)
    max_segment_area: float = Field(default=SegmentConstants.DEFAULT_MAX_SEGMENT_AREA, ge=0)
    min_segment_length: float = Field(default=SegmentConstants.DEFAULT_MIN_SEGMENT_LENGTH, ge=0)
    max_segment_length: float = Field(default=SegmentConstants.DEFAULT_MAX_SEGMENT_LENGTH, ge=0)


class TransformSettings(BaseModel):
    """Resampling used when a transform changes the size of a mask or image."""

    mask_interpolation: Interpolation = Field(
        default=Interpolation(TransformConstants.DEFAULT_MASK_INTERPOLATION)
    )
    image_interpolation: Interpolation = Field(
        default=Interpolation(TransformConstants.DEFAULT_IMAGE_INTERPOLATION)
    )


class Settings(BaseSettings):
    """Top-level settings."""

    model_config = SettingsConfigDict(
        env_prefix="VISUAL_FIELD_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    segments: SegmentSettings = Field(default_factory=SegmentSettings)
    transform: TransformSettings = Field(default_factory=TransformSettings)


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """
    Configure root logging from settings.

    Args:
        settings: Settings to use (defaults to get_settings())
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.system.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
