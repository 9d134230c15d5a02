"""
Segments - locations of interest in the 2D visual field.

A segment is a Region, optionally with a mask saying which pixels of the
region belong to it and an image holding those pixels. A segment found in a
zoomed or cropped view of the input carries the view_transform that produced
that view, so it can be mapped back into the untransformed ("base") frame.

Segments are immutable. Every operation here returns a new Segment; the only
write after construction is memoizing the base segment, which is
deterministic.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from visual_field.config import get_settings
from visual_field.core import view_transform as vt
from visual_field.core.image import processors
from visual_field.schemas import Number, Region, Size, ViewTransform
from visual_field.schemas import distance as region_distance
from visual_field.schemas import union as region_union

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Segment:
    """
    A candidate perceptual object.

    Attributes:
        region: Bounding region in the frame the segment was found in
        mask: 8-bit 0/255 matrix the size of region, marking member pixels
        image: Pixels of the input covered by region and mask
        subsegments: Nested segments (e.g. inner contours)
        view_transform: Chain that produced the frame the segment was found in
        input: Image the segment was found in
        input_size: Size of that image, when input itself is not kept
        area: Cached pixel area
        contour: Source contour points, when built from a contour
        original_segment: On a base segment, the segment it was computed from
        base_segment: Memoized segment in the untransformed frame
    """

    region: Region
    mask: Optional[np.ndarray] = None
    image: Optional[np.ndarray] = None
    subsegments: Tuple["Segment", ...] = ()
    view_transform: Optional[ViewTransform] = None
    input: Optional[np.ndarray] = None
    input_size: Optional[Size] = None
    area: Optional[Number] = None
    contour: Optional[np.ndarray] = None
    original_segment: Optional["Segment"] = field(default=None, repr=False)
    base_segment: Optional["Segment"] = field(default=None, repr=False)


def _is_degenerate(region: Region) -> bool:
    return (region.width is not None and region.width <= 0) or (
        region.height is not None and region.height <= 0
    )


def _resize_matrices(
    segment: Segment, region: Region
) -> Optional[Tuple[Optional[np.ndarray], Optional[np.ndarray]]]:
    """Resize mask and image to region's size. None if that size is unusable."""
    if segment.mask is None and segment.image is None:
        return None, None
    width, height = region.width, region.height
    if width is None or height is None or width <= 0 or height <= 0:
        logger.debug(f"Cannot resize segment matrices to {width}x{height}")
        return None

    settings = get_settings().transform
    size = (int(width), int(height))
    mask = image = None
    if segment.mask is not None:
        mask = processors.resize(segment.mask, size, settings.mask_interpolation)
    if segment.image is not None:
        image = processors.resize(segment.image, size, settings.image_interpolation)
    return mask, image


# ----------------------------------------------------------------------
# Derived fields
# ----------------------------------------------------------------------


def area(segment: Segment) -> Optional[Number]:
    """Cached area, else the mask's pixel count, else the region's area."""
    if segment.area is not None:
        return segment.area
    if segment.mask is not None:
        return processors.count_non_zero(segment.mask)
    return segment.region.get_area()


def add_area(segment: Segment) -> Segment:
    return replace(segment, area=area(segment))


def get_input_size(segment: Segment) -> Optional[Size]:
    """Size of the image the segment was found in, if known."""
    if segment.input_size is not None:
        return segment.input_size
    if segment.input is not None:
        return processors.image_size(segment.input)
    if segment.view_transform is not None:
        return segment.view_transform.final_size
    return None


def add_input_size(segment: Segment) -> Segment:
    return replace(segment, input_size=get_input_size(segment))


def prepare(
    segment: Segment,
    input: Optional[np.ndarray] = None,
    view_transform: Optional[ViewTransform] = None,
    base_segment: bool = False,
) -> Optional[Segment]:
    """
    Ready a segment produced by segmentation for use.

    Caches the region's derived values. With input, attaches it together
    with a masked copy of the pixels the segment covers; a segment running
    off the input is first cropped to it. With view_transform, attaches it.
    With base_segment, also computes the base segment.

    Args:
        segment: Segment with at least a region (and usually a mask)
        input: Image the segment was found in
        view_transform: Chain that produced input
        base_segment: Compute and attach the base segment

    Returns:
        Prepared segment, or None if the segment lies entirely off input
    """
    if input is not None and segment.region.crop(processors.image_size(input)) != segment.region:
        segment = crop_to_input(segment, input)
        if segment is None:
            return None

    result = replace(segment, region=segment.region.prepare())
    if input is not None:
        pixels = processors.copy_masked(processors.submat(input, segment.region), segment.mask)
        result = replace(result, input=input, image=pixels)
    if view_transform is not None:
        result = replace(result, view_transform=view_transform, base_segment=None)
    if base_segment:
        result = add_base_segment(result)
    return result


# ----------------------------------------------------------------------
# Cropping and the chain walk
# ----------------------------------------------------------------------


def crop_to_input(segment: Segment, image_size: vt.ChainOrSource) -> Optional[Segment]:
    """
    Crop a segment so that it fits on an image of the given size.

    The mask and image are cut to match the new region.

    Returns:
        Cropped segment, or None if the region is cropped away entirely
    """
    old = segment.region
    new = old.crop(vt.final_size(image_size))
    if new is None:
        return None

    mask, image = segment.mask, segment.image
    if (mask is not None or image is not None) and new.is_positioned_rect():
        local = Region(
            x=int(new.x - old.x), y=int(new.y - old.y), width=int(new.width), height=int(new.height)
        )
        if mask is not None:
            mask = processors.submat(mask, local).copy()
        if image is not None:
            image = processors.submat(image, local).copy()

    return replace(segment, region=new, mask=mask, image=image, area=None, base_segment=None)


def _apply_chain(
    segment: Segment, view_transform: ViewTransform, scale_factor: Optional[float] = None
) -> Optional[Segment]:
    """
    Walk a segment along a chain.

    The region follows the chain (and the optional final scale); mask and
    image are resized to the resulting size and then cropped to the chain's
    final frame.
    """
    projection = vt.project(segment.region, view_transform)
    if projection is None:
        return None

    region = projection.region
    if scale_factor is not None:
        region = region.scale(scale_factor)
    if _is_degenerate(region):
        return None

    matrices = _resize_matrices(segment, region)
    if matrices is None:
        return None

    result = Segment(region=region, mask=matrices[0], image=matrices[1])
    if projection.frame is not None:
        result = crop_to_input(result, projection.frame)
    return None if result is None else prepare(result)


def _geometry_only(segment: Segment, keep_mask: bool = False) -> Segment:
    """Copy of segment carrying only what the chain walk needs."""
    base = segment.base_segment
    if base is not None:
        base = Segment(region=base.region, mask=base.mask if keep_mask else None)
    return Segment(
        region=segment.region,
        mask=segment.mask if keep_mask else None,
        view_transform=segment.view_transform,
        base_segment=base,
    )


# ----------------------------------------------------------------------
# Viewing transforms
# ----------------------------------------------------------------------


def base_segment(segment: Segment) -> Optional[Segment]:
    """
    The segment as it appears in the untransformed input.

    A segment without a view_transform is already a base segment. Otherwise
    the inverted chain is applied, the result records the segment it came
    from (original_segment) and the size of the untransformed input. The
    result is memoized on segment.

    Returns:
        Base segment, or None if it cannot be computed
    """
    if segment.base_segment is not None:
        return segment.base_segment
    if segment.view_transform is None:
        return segment

    inverse = segment.view_transform.inverted()
    base = _apply_chain(segment, inverse)
    if base is None:
        logger.debug(f"No base segment for region {segment.region.to_dict()}")
        return None

    base = replace(base, original_segment=segment, input_size=inverse.final_size)
    object.__setattr__(segment, "base_segment", base)
    return base


def add_base_segment(segment: Segment) -> Segment:
    return replace(segment, base_segment=base_segment(segment))


def base_region(segment: Segment) -> Optional[Region]:
    """Region of the segment's base segment."""
    base = base_segment(segment if segment.base_segment else _geometry_only(segment))
    return None if base is None else base.region


def apply_transform(
    segment: Segment, view_transform: ViewTransform, scale_factor: Optional[float] = None
) -> Optional[Segment]:
    """
    Re-express a segment under a new viewing transform.

    A segment with a memoized base segment starts from it. Otherwise a
    segment with an existing view_transform is first walked back through
    its inverse. A segment with neither is walked along view_transform
    directly.

    Args:
        segment: Segment to transform
        view_transform: Chain from the untransformed input to the new frame
        scale_factor: Optional scale applied after the chain

    Returns:
        Segment in the new frame carrying view_transform, or None if it
        falls outside that frame
    """
    if segment.base_segment is not None:
        result = _apply_chain(segment.base_segment, view_transform, scale_factor)
    elif segment.view_transform is not None:
        chain = segment.view_transform.inverted() + view_transform
        result = _apply_chain(segment, chain, scale_factor)
    else:
        result = _apply_chain(segment, view_transform, scale_factor)
    return None if result is None else replace(result, view_transform=view_transform)


def apply_transform_to_region(
    segment: Segment, view_transform: ViewTransform, scale_factor: Optional[float] = None
) -> Optional[Region]:
    """Region of apply_transform(segment, view_transform, scale_factor)."""
    result = apply_transform(_geometry_only(segment), view_transform, scale_factor)
    return None if result is None else result.region


def apply_transform_to_mask(
    segment: Segment, view_transform: ViewTransform, scale_factor: Optional[float] = None
) -> Optional[np.ndarray]:
    """Mask of apply_transform(segment, view_transform, scale_factor)."""
    result = apply_transform(_geometry_only(segment, keep_mask=True), view_transform, scale_factor)
    return None if result is None else result.mask


# ----------------------------------------------------------------------
# Moving and scaling
# ----------------------------------------------------------------------


def _moved(
    segment: Segment,
    region: Region,
    mask: Optional[np.ndarray],
    image: Optional[np.ndarray],
) -> Optional[Segment]:
    """New segment at region, cropped to the input when its size is known."""
    input_size = get_input_size(segment)
    result = Segment(
        region=region,
        mask=mask,
        image=image,
        input=segment.input,
        input_size=input_size,
        view_transform=segment.view_transform,
    )
    if input_size is not None:
        result = crop_to_input(result, input_size)
    return None if result is None else prepare(result)


def _region_only(segment: Segment) -> Segment:
    return Segment(
        region=segment.region,
        view_transform=segment.view_transform,
        input_size=get_input_size(segment),
    )


def scale(segment: Segment, factor: float) -> Optional[Segment]:
    """
    Scale a segment about its center, resizing mask and image to match.

    Returns:
        Scaled segment cropped to the input (when its size is known), or None
        if the scaled size is degenerate
    """
    region = segment.region.unprepare().scale(factor)
    if _is_degenerate(region):
        return None
    matrices = _resize_matrices(segment, region)
    if matrices is None:
        return None
    return _moved(segment, region, *matrices)


def translate(
    segment: Segment, dx: Optional[Number] = None, dy: Optional[Number] = None
) -> Optional[Segment]:
    """Move a segment by (dx, dy)."""
    region = segment.region.unprepare().translate(dx, dy)
    return _moved(segment, region, segment.mask, segment.image)


def translate_to(
    segment: Segment, x: Optional[Number] = None, y: Optional[Number] = None
) -> Optional[Segment]:
    """Move a segment's upper left corner to (x, y)."""
    region = segment.region.unprepare().translate_to(x, y)
    return _moved(segment, region, segment.mask, segment.image)


def translate_center_to(
    segment: Segment, x: Optional[Number] = None, y: Optional[Number] = None
) -> Optional[Segment]:
    """Move a segment's center to (x, y)."""
    region = segment.region.unprepare().translate_center_to(x, y)
    return _moved(segment, region, segment.mask, segment.image)


def scale_region(segment: Segment, factor: float) -> Optional[Region]:
    result = scale(_region_only(segment), factor)
    return None if result is None else result.region


def translate_region(
    segment: Segment, dx: Optional[Number] = None, dy: Optional[Number] = None
) -> Optional[Region]:
    result = translate(_region_only(segment), dx, dy)
    return None if result is None else result.region


def translate_region_to(
    segment: Segment, x: Optional[Number] = None, y: Optional[Number] = None
) -> Optional[Region]:
    result = translate_to(_region_only(segment), x, y)
    return None if result is None else result.region


def translate_region_center_to(
    segment: Segment, x: Optional[Number] = None, y: Optional[Number] = None
) -> Optional[Region]:
    result = translate_center_to(_region_only(segment), x, y)
    return None if result is None else result.region


# ----------------------------------------------------------------------
# Geometry
# ----------------------------------------------------------------------


def distance(s1: Segment, s2: Segment) -> float:
    """Distance between two segments' regions."""
    return region_distance(s1.region, s2.region)


def intersects(s1: Segment, s2: Segment) -> bool:
    return s1.region.intersects(s2.region)


def bases_intersect(s1: Segment, s2: Segment) -> bool:
    """True if the base regions of two segments intersect."""
    r1, r2 = base_region(s1), base_region(s2)
    return r1 is not None and r2 is not None and r1.intersects(r2)


def union(seg0: Segment, *segments: Segment) -> Segment:
    """
    Union of one or more segments.

    The region is the union of all regions. When the union has a known
    position and size, masks are OR-ed and images copied into canvases of
    that size. Every other field comes from seg0.
    """
    if not segments:
        return seg0

    everything = (seg0,) + segments
    region = region_union(*(s.region for s in everything))
    mask = image = None

    if region.is_positioned_rect():
        size = (int(region.width), int(region.height))
        if seg0.mask is not None:
            mask = processors.zeros(seg0.mask, size)
        if seg0.image is not None:
            image = processors.zeros(seg0.image, size)

        for s in everything:
            if not s.region.is_positioned():
                continue
            local = s.region.translate(-region.x, -region.y)
            if mask is not None and s.mask is not None:
                processors.bitwise_or_into(processors.submat(mask, local), s.mask)
            if image is not None and s.image is not None:
                processors.set_masked(processors.submat(image, local), s.image, s.mask)

    return replace(seg0, region=region, mask=mask, image=image, area=None, base_segment=None)
