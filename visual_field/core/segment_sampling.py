"""
Sampling external matrices through a segment.

Each function here restricts a matrix (the input image, a saliency map, a
canvas being drawn on) to a segment's region and mask. The matrix must be in
the same frame as the segment.

Readers (submat, copy, mean_value, ...) never modify the matrix. Writers
(set_to, add, bitwise_or, bitwise_and) modify the caller's matrix in place and
return it.
"""

import logging
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from visual_field.core.constants import MaskConstants, SamplingConstants
from visual_field.core.image import processors
from visual_field.core.segments import Segment, area, get_input_size

logger = logging.getLogger(__name__)

Value = Union[float, Tuple[float, ...]]


def _mask(segment: Segment) -> Optional[np.ndarray]:
    mask = segment.mask
    if mask is None or mask.dtype == np.uint8:
        return mask
    return processors.to_mask(mask)


def _per_channel(values: Tuple[float, ...], src: np.ndarray) -> Value:
    """Trim an OpenCV 4-tuple to the channels of src."""
    channels = 1 if src.ndim == 2 else src.shape[2]
    if channels == 1:
        return float(values[0])
    return tuple(float(v) for v in values[:channels])


def submat(src: np.ndarray, segment: Segment) -> np.ndarray:
    """View of src covering the segment's region."""
    return processors.submat(src, segment.region)


def copy(src: np.ndarray, segment: Segment) -> np.ndarray:
    """Copy of src under the segment; pixels outside the mask are 0."""
    return processors.copy_masked(submat(src, segment), _mask(segment))


def mean_value(src: np.ndarray, segment: Segment) -> Value:
    """Mean of src over the segment (one value per channel)."""
    sub = np.ascontiguousarray(submat(src, segment))
    return _per_channel(cv2.mean(sub, mask=_mask(segment)), sub)


def max_value(src: np.ndarray, segment: Segment) -> float:
    """Maximum of a single-channel src over the segment."""
    _, maximum, _, _ = cv2.minMaxLoc(np.ascontiguousarray(submat(src, segment)), _mask(segment))
    return float(maximum)


def min_value(src: np.ndarray, segment: Segment) -> float:
    """Minimum of a single-channel src over the segment."""
    minimum, _, _, _ = cv2.minMaxLoc(np.ascontiguousarray(submat(src, segment)), _mask(segment))
    return float(minimum)


def sum_elems(src: np.ndarray, segment: Segment) -> Value:
    """Sum of src over the segment (one value per channel)."""
    masked = copy(src, segment)
    return _per_channel(cv2.sumElems(masked), masked)


def histogram(
    src: np.ndarray, segment: Segment, bins: int = SamplingConstants.DEFAULT_HISTOGRAM_BINS
) -> np.ndarray:
    """
    Histogram of a single-channel src over the segment.

    Counts are divided by the segment's area, so a fully covered segment
    sums to 1.

    Args:
        src: Single-channel matrix
        segment: Segment selecting the pixels
        bins: Number of bins over [0, 256)

    Returns:
        1D float array of length bins
    """
    sub = np.ascontiguousarray(submat(src, segment))
    if sub.dtype not in (np.uint8, np.float32):
        sub = sub.astype(np.float32)
    hist = cv2.calcHist(
        [sub], [0], _mask(segment), [bins], list(SamplingConstants.HISTOGRAM_RANGE)
    ).flatten()
    divisor = area(segment)
    if not divisor:
        logger.warning(f"Histogram over zero-area segment {segment.region.to_dict()}")
        return hist
    return hist / float(divisor)


def zeros(segment: Segment) -> Optional[np.ndarray]:
    """
    Blank canvas the size of the segment's input.

    Takes its type from the segment's image, else its mask. None if the
    input size or both matrices are unknown.
    """
    size = get_input_size(segment)
    if size is None:
        return None
    like = segment.image if segment.image is not None else segment.mask
    if like is None:
        return None
    return processors.zeros(like, size)


def set_to(src: np.ndarray, segment: Segment, value: Optional[Value] = None) -> np.ndarray:
    """
    Write into src under the segment.

    Writes the segment's image, or value when given.
    """
    fill = segment.image if value is None else value
    processors.set_masked(submat(src, segment), fill, _mask(segment))
    return src


def add(src: np.ndarray, segment: Segment, value: Optional[Value] = None) -> np.ndarray:
    """
    Add to src under the segment, saturating.

    Adds the segment's image, or value when given.
    """
    addend = segment.image if value is None else value
    processors.add_masked(submat(src, segment), addend, _mask(segment))
    return src


def bitwise_or(src: np.ndarray, segment: Segment) -> np.ndarray:
    """OR the segment's mask into src."""
    processors.bitwise_or_into(submat(src, segment), _mask_or_full(segment))
    return src


def bitwise_and(src: np.ndarray, segment: Segment) -> np.ndarray:
    """AND the segment's mask into src."""
    processors.bitwise_and_into(submat(src, segment), _mask_or_full(segment))
    return src


def _mask_or_full(segment: Segment) -> np.ndarray:
    mask = _mask(segment)
    if mask is not None:
        return mask
    width, height = int(segment.region.get_width()), int(segment.region.get_height())
    return np.full((height, width), MaskConstants.FOREGROUND, dtype=MaskConstants.DTYPE)
