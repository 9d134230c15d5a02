"""
Segments from contours.

Segmentation producers hand over binary (edge or threshold) images. This
module turns the closed contours OpenCV finds in them into segments: a
bounding region, a filled mask, and the contour area. With TREE retrieval,
nested contours become a subsegment tree that can be pruned down to the
segments of a useful size.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from pydantic import BaseModel, Field

from visual_field.config import get_settings
from visual_field.core import segments as seg
from visual_field.core.constants import MaskConstants
from visual_field.core.enums import ContourRetrieval
from visual_field.schemas import Region, Size

logger = logging.getLogger(__name__)


def _segment_setting(name: str):
    return lambda: getattr(get_settings().segments, name)


class SubsegmentParams(BaseModel):
    """
    Parameters for pruning a contour hierarchy.

    Defaults come from the segment settings.
    """

    max_inner_contour_ratio: float = Field(
        default_factory=_segment_setting("max_inner_contour_ratio"),
        gt=0.0,
        le=1.0,
        description="Inner contours above this fraction of the parent's area are skipped",
    )
    min_segment_area: float = Field(
        default_factory=_segment_setting("min_segment_area"),
        ge=0,
        description="Minimum segment area in pixels",
    )
    max_segment_area: float = Field(
        default_factory=_segment_setting("max_segment_area"),
        ge=0,
        description="Maximum segment area in pixels",
    )
    min_segment_length: float = Field(
        default_factory=_segment_setting("min_segment_length"),
        ge=0,
        description="Minimum width and height in pixels",
    )
    max_segment_length: float = Field(
        default_factory=_segment_setting("max_segment_length"),
        ge=0,
        description="Maximum width and height in pixels",
    )


def contour_to_segment(
    contour: np.ndarray, shape: Optional[Tuple[int, ...]] = None
) -> seg.Segment:
    """
    Convert an OpenCV contour into a segment.

    Args:
        contour: Contour points, shape (N, 1, 2)
        shape: Optional shape of the image the contour was found in

    Returns:
        Segment with region, filled mask, contour area and contour
    """
    region = Region.from_rect(cv2.boundingRect(contour))
    mask = np.zeros((region.height, region.width), dtype=MaskConstants.DTYPE)
    cv2.drawContours(
        mask,
        [contour],
        -1,
        MaskConstants.FOREGROUND,
        cv2.FILLED,
        offset=(-region.x, -region.y),
    )
    input_size = None if shape is None else Size(width=shape[1], height=shape[0])
    return seg.Segment(
        region=region,
        mask=mask,
        area=float(cv2.contourArea(contour)),
        contour=contour,
        input_size=input_size,
    )


def find_segments(
    binary: np.ndarray, retrieval: ContourRetrieval = ContourRetrieval.EXTERNAL
) -> List[seg.Segment]:
    """
    Find segments bounded by closed contours in a binary image.

    Args:
        binary: Single-channel 8-bit image; non-zero pixels are foreground
        retrieval: Which contours to retrieve. With TREE, nested contours
            are attached as subsegments of their enclosing segment.

    Returns:
        Top-level segments, in OpenCV's order
    """
    contours, hierarchy = cv2.findContours(binary, retrieval.cv2_flag, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        return []

    # Each row is (next, previous, first child, parent), -1 when absent
    links = hierarchy[0]

    def siblings(index: int) -> List[seg.Segment]:
        result = []
        while index >= 0:
            segment = contour_to_segment(contours[index], binary.shape)
            next_index, _, child, _ = links[index]
            if child >= 0:
                segment = replace(segment, subsegments=tuple(siblings(int(child))))
            result.append(segment)
            index = int(next_index)
        return result

    segments = siblings(0)
    logger.debug(f"Found {len(segments)} top-level segments ({retrieval.value})")
    return segments


def get_subsegments(
    segment: seg.Segment, max_inner_contour_ratio: Optional[float] = None
) -> List[seg.Segment]:
    """
    Subsegments of a segment, skipping those that are about the same size.

    A child whose area is more than max_inner_contour_ratio of its parent's is
    taken to be the same outline (e.g. the inside edge of a thick line); it
    is replaced by its own subsegments, recursively.
    """
    if max_inner_contour_ratio is None:
        max_inner_contour_ratio = get_settings().segments.max_inner_contour_ratio

    outer = seg.area(segment)
    result = []
    for child in segment.subsegments:
        if outer and seg.area(child) / outer > max_inner_contour_ratio:
            result.extend(get_subsegments(child, max_inner_contour_ratio))
        else:
            result.append(child)
    return result


def is_correct_size(segment: seg.Segment, params: Optional[SubsegmentParams] = None) -> bool:
    """True if the segment's area and side lengths are within the params' limits."""
    params = params or SubsegmentParams()
    segment_area = seg.area(segment)
    width = segment.region.width
    height = segment.region.height
    if segment_area is None or width is None or height is None:
        return False
    return (
        params.min_segment_area <= segment_area <= params.max_segment_area
        and params.min_segment_length <= width <= params.max_segment_length
        and params.min_segment_length <= height <= params.max_segment_length
    )


def get_smallest_subsegments(
    segment: seg.Segment, params: Optional[SubsegmentParams] = None
) -> List[seg.Segment]:
    """
    The smallest correctly sized segments in a segment's tree.

    A candidate whose subsegments include a correctly sized one is replaced
    by those subsegments. Otherwise the candidate is kept if it is correctly
    sized itself (with its pruned subsegments attached), else dropped.
    """
    params = params or SubsegmentParams()
    candidates = [segment]
    result = []
    while candidates:
        candidate = candidates.pop(0)
        subsegments = get_subsegments(candidate, params.max_inner_contour_ratio)
        if any(is_correct_size(s, params) for s in subsegments):
            candidates = subsegments + candidates
        elif is_correct_size(candidate, params):
            result.append(replace(candidate, subsegments=tuple(subsegments)))
    return result


def setup_segment(segment: seg.Segment, image: np.ndarray) -> Optional[seg.Segment]:
    """
    Prepare a segment and its whole subsegment tree against the input image.

    Segments lying entirely off the image are dropped.
    """
    prepared = seg.prepare(segment, input=image)
    if prepared is None:
        return None
    subsegments = (setup_segment(s, image) for s in segment.subsegments)
    return replace(prepared, subsegments=tuple(s for s in subsegments if s is not None))


def extract_segments(
    binary: np.ndarray,
    image: np.ndarray,
    retrieval: ContourRetrieval = ContourRetrieval.EXTERNAL,
    params: Optional[SubsegmentParams] = None,
) -> List[seg.Segment]:
    """
    Segments of image bounded by the contours of binary, ready for use.

    With TREE retrieval, each contour tree is pruned to its smallest
    correctly sized segments.

    Args:
        binary: Edge or threshold image for image
        image: Image the segments describe
        retrieval: Contour retrieval mode
        params: Pruning parameters (TREE only)

    Returns:
        Prepared segments
    """
    found: Sequence[seg.Segment] = find_segments(binary, retrieval)
    if retrieval == ContourRetrieval.TREE:
        params = params or SubsegmentParams()
        found = [s for root in found for s in get_smallest_subsegments(root, params)]
    prepared = (setup_segment(s, image) for s in found)
    return [s for s in prepared if s is not None]
