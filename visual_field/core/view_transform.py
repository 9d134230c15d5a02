"""
Viewing transforms for 2D visual input.

A viewing transform chain is built from a source (an image or its size) by
appending crop ("submat") and resize operations. The chain can then:
- sample a real image, producing the transformed view
- map geometry found in one frame into another by walking the chain
- be inverted, so geometry found in the transformed view can be mapped back
  into the original image

Every function that builds on a chain also accepts a source: a ViewTransform,
an image (np.ndarray), a Size or a (width, height) tuple.
"""

import logging
import math
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

from visual_field.config import get_settings
from visual_field.core.constants import TransformConstants
from visual_field.core.enums import Interpolation
from visual_field.core.image import processors
from visual_field.core.region_handler import RegionHandler
from visual_field.exceptions import InvalidSamplingError, SubmatTooLargeError, TransformError
from visual_field.schemas import CropOp, Point, Region, ResizeOp, Size, ViewTransform

logger = logging.getLogger(__name__)

ChainOrSource = Union[ViewTransform, np.ndarray, Size, Tuple[int, int]]


class Projection(NamedTuple):
    """Result of walking a region along a chain."""

    region: Region
    frame: Optional[Size]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def final_size(ops_or_source: ChainOrSource) -> Optional[Size]:
    """
    Size of the image at the point where the next operation would be applied.

    Args:
        ops_or_source: Chain, image, Size or (width, height)

    Returns:
        Size, or None for an empty chain with no known source size
    """
    if isinstance(ops_or_source, ViewTransform):
        return ops_or_source.final_size
    if isinstance(ops_or_source, np.ndarray):
        return processors.image_size(ops_or_source)
    return Size.of(ops_or_source)


def as_transform(ops_or_source: ChainOrSource) -> ViewTransform:
    """Return the chain itself, or an empty chain starting from the source."""
    if isinstance(ops_or_source, ViewTransform):
        return ops_or_source
    return ViewTransform(source_size=final_size(ops_or_source))


def _bounds(chain: ViewTransform) -> Size:
    bounds = chain.final_size
    if bounds is None:
        raise TransformError("Cannot add an operation to a chain with an unknown source size")
    return bounds


def sample(
    image: np.ndarray,
    view_transform: ViewTransform,
    interpolation: Optional[Interpolation] = None,
) -> np.ndarray:
    """
    Sample from an image by applying each operation of a chain in turn.

    Args:
        image: Source image
        view_transform: Chain to apply
        interpolation: Resampling for resize operations (defaults to settings)

    Returns:
        The transformed image (a new array)

    Raises:
        InvalidSamplingError: If the chain contains an inverted crop
        TransformError: If a crop does not fit on the image being sampled
    """
    interpolation = interpolation or get_settings().transform.image_interpolation
    result = image
    for op in view_transform.operations:
        if isinstance(op, ResizeOp):
            result = processors.resize(result, op.new_size, interpolation)
        elif op.is_inverted():
            raise InvalidSamplingError(op.x, op.y)
        else:
            cropped = RegionHandler.extract_region(result, op.region)
            if cropped is None:
                size = processors.image_size(result)
                raise TransformError(
                    f"Crop {op.region.to_dict()} does not fit on a "
                    f"{size.width}x{size.height} image"
                )
            result = cropped
    if result is image:
        result = image.copy()
    return result


def add_submat(
    ops_or_source: ChainOrSource, region: Region, adjust_to_fit: bool = False
) -> Optional[ViewTransform]:
    """
    Append a crop operation taking region out of the chain's current image.

    If adjust_to_fit is True, the crop is moved (never resized) so that it lies
    entirely on the current image. Otherwise it stays put and any part that
    falls off the image is clipped away.

    Args:
        ops_or_source: Chain or source
        region: Positioned rectangle in the chain's current frame
        adjust_to_fit: Move the crop instead of clipping it

    Returns:
        New chain, or None if clipping leaves nothing

    Raises:
        SubmatTooLargeError: If adjust_to_fit and the region is larger than the image
        TransformError: If region is not a positioned rectangle
    """
    chain = as_transform(ops_or_source)
    bounds = _bounds(chain)

    if not region.is_positioned_rect():
        raise TransformError(f"A crop needs x, y, width and height, got {region.to_dict()}")

    x, y = _round_half_up(region.x), _round_half_up(region.y)
    width, height = int(region.width), int(region.height)

    if adjust_to_fit:
        if width > bounds.width or height > bounds.height:
            raise SubmatTooLargeError(width, height, bounds.width, bounds.height)
        x = min(max(x, 0), bounds.width - width)
        y = min(max(y, 0), bounds.height - height)
    else:
        clipped = Region(x=x, y=y, width=width, height=height).crop(bounds)
        if clipped is None:
            logger.debug(
                f"Crop {region.to_dict()} lies outside {bounds.width}x{bounds.height} image"
            )
            return None
        x, y, width, height = clipped.geometry()

    op = CropOp(
        x=x, y=y, width=width, height=height, old_width=bounds.width, old_height=bounds.height
    )
    logger.debug(f"Adding crop {op.region.to_dict()} of {bounds.width}x{bounds.height}")
    return chain.append(op)


def add_submat_centered(
    ops_or_source: ChainOrSource,
    size: Union[Size, Tuple[int, int]],
    center: Union[Point, Tuple[float, float]],
    adjust_to_fit: bool = False,
) -> Optional[ViewTransform]:
    """
    Append a crop of the given size centered on a point.

    Args:
        ops_or_source: Chain or source
        size: Size of the crop
        center: Desired center in the chain's current frame
        adjust_to_fit: Move the crop instead of clipping it (see add_submat)

    Returns:
        New chain, or None if clipping leaves nothing
    """
    width, height = Size.of(size).as_tuple()
    cx, cy = (center.x, center.y) if isinstance(center, Point) else center
    region = Region(
        x=_round_half_up(cx - (width - 1) / 2.0),
        y=_round_half_up(cy - (height - 1) / 2.0),
        width=width,
        height=height,
    )
    return add_submat(ops_or_source, region, adjust_to_fit)


def add_resize(
    ops_or_source: ChainOrSource, new_size: Union[Size, Tuple[int, int], float]
) -> ViewTransform:
    """
    Append a resize operation.

    Args:
        ops_or_source: Chain or source
        new_size: Target size, or a factor applied to the current size
            (result truncated to integers)

    Returns:
        New chain
    """
    chain = as_transform(ops_or_source)
    bounds = _bounds(chain)

    if isinstance(new_size, (int, float)):
        target = Size(width=int(bounds.width * new_size), height=int(bounds.height * new_size))
    else:
        target = Size.of(new_size)

    op = ResizeOp(
        old_width=bounds.width,
        old_height=bounds.height,
        width=target.width,
        height=target.height,
    )
    logger.debug(
        f"Adding resize {bounds.width}x{bounds.height} -> {target.width}x{target.height}"
    )
    return chain.append(op)


def invert(view_transform: ViewTransform) -> ViewTransform:
    """Reverse the chain and invert each operation."""
    return view_transform.inverted()


def concat(*chains: ViewTransform) -> ViewTransform:
    """Join chains end to end. The chain invariant must hold across the joins."""
    result = ViewTransform()
    for chain in chains:
        result = result + chain
    return result


def get_scale(view_transform: ViewTransform) -> float:
    """
    Overall change in scale across the resize operations of a chain.

    Returns:
        Last resize's new width over the first resize's old width, or 1.0
    """
    resizes = view_transform.resizes
    if not resizes:
        return TransformConstants.IDENTITY_SCALE
    return float(resizes[-1].width / resizes[0].old_width)


def get_region(view_transform: ViewTransform) -> Optional[Region]:
    """Region of the last crop operation in a chain, if any."""
    crops = view_transform.crops
    return crops[-1].region if crops else None


def project(region: Region, view_transform: ViewTransform) -> Optional[Projection]:
    """
    Walk a region's geometry along a chain.

    Crops shift the region by their offset; resizes multiply position and
    size by their width ratio. A point counts as a 1x1 region.

    Args:
        region: Positioned region in the chain's initial frame
        view_transform: Chain to walk

    Returns:
        Projection with the integer region and the size of the final frame
        (None when the chain is empty), or None if the region has no position
    """
    x, y = region.x, region.y
    width, height = region.get_width(), region.get_height()
    if x is None or y is None or width is None or height is None:
        return None

    frame = None
    for op in view_transform.operations:
        if isinstance(op, ResizeOp):
            scale = op.scale
            x, y, width, height = x * scale, y * scale, width * scale, height * scale
        else:
            x, y = x - op.x, y - op.y
        frame = op.new_size

    return Projection(Region(x=int(x), y=int(y), width=int(width), height=int(height)), frame)


def map_region(
    region: Region, view_transform: ViewTransform, scale_factor: Optional[float] = None
) -> Optional[Region]:
    """
    Region as it appears after a chain, scaled and cropped to the final frame.

    Args:
        region: Positioned region in the chain's initial frame
        view_transform: Chain to walk
        scale_factor: Optional scale applied after the chain

    Returns:
        Mapped region, or None if it has no position or is cropped away
    """
    projection = project(region, view_transform)
    if projection is None:
        return None
    mapped = projection.region
    if scale_factor is not None:
        mapped = mapped.scale(scale_factor)
    if mapped.width <= 0 or mapped.height <= 0:
        return None
    if projection.frame is not None:
        mapped = mapped.crop(projection.frame)
    return mapped
