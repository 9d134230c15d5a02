"""
visual_field - region, segment and viewing-transform geometry for visual attention.
"""

from .config import Settings, configure_logging, get_settings
from .core.segments import Segment
from .exceptions import (
    InvalidSamplingError,
    SubmatTooLargeError,
    TransformError,
    VisualFieldError,
)
from .schemas import CropOp, Point, Region, ResizeOp, Size, ViewTransform

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "configure_logging",
    "get_settings",
    "Segment",
    "VisualFieldError",
    "TransformError",
    "InvalidSamplingError",
    "SubmatTooLargeError",
    "Point",
    "Size",
    "Region",
    "ResizeOp",
    "CropOp",
    "ViewTransform",
]
