"""
Schemas Package

Pydantic value types shared across the library:
- common: Point, Size
- region: Region and the variadic intersection/union helpers
- transform: ResizeOp, CropOp and ViewTransform chains
"""

from .common import Number, Point, Size
from .region import Region, distance, intersection, union
from .transform import CropOp, ResizeOp, TransformOp, ViewTransform

__all__ = [
    "Number",
    "Point",
    "Size",
    "Region",
    "distance",
    "intersection",
    "union",
    "CropOp",
    "ResizeOp",
    "TransformOp",
    "ViewTransform",
]
