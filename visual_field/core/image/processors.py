"""
Matrix operations used by segments and viewing transforms.

Handles the pixel-level work behind the geometry:
- Sub-rectangle extraction
- Resizing to an exact size
- Zero-filled canvases
- Bitwise-OR and masked copies into canvases
"""

import logging
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from visual_field.core.constants import MaskConstants
from visual_field.core.enums import Interpolation
from visual_field.schemas import Region, Size

logger = logging.getLogger(__name__)

SizeLike = Union[Size, Tuple[int, int]]


def image_size(image: np.ndarray) -> Size:
    """
    Get the size of an image.

    Args:
        image: NumPy array (height, width, ...)

    Returns:
        Size of the image
    """
    height, width = image.shape[:2]
    return Size(width=int(width), height=int(height))


def submat(image: np.ndarray, region: Region) -> np.ndarray:
    """
    Sub-rectangle of image described by region.

    The result is a view that shares memory with image, so writes to it
    land in image.

    Args:
        image: Input image
        region: Positioned rectangle inside image

    Returns:
        View of the sub-rectangle
    """
    x, y = int(region.x), int(region.y)
    width, height = int(region.get_width()), int(region.get_height())
    return image[y : y + height, x : x + width]


def resize(
    image: np.ndarray,
    size: SizeLike,
    interpolation: Interpolation = Interpolation.NEAREST,
) -> np.ndarray:
    """
    Resize image to an exact size.

    Boolean masks are resized as 8-bit masks and converted back.

    Args:
        image: Input image as NumPy array
        size: Target size
        interpolation: Resampling method

    Returns:
        Resized image as NumPy array

    Raises:
        ValueError: If the target size is not positive
    """
    width, height = Size.of(size).as_tuple()
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot resize to non-positive size {width}x{height}")

    if image.shape[1] == width and image.shape[0] == height:
        return image.copy()

    if image.dtype == np.bool_:
        resized = cv2.resize(
            image.astype(np.uint8) * MaskConstants.FOREGROUND,
            (width, height),
            interpolation=interpolation.cv2_flag,
        )
        return resized > 0

    return cv2.resize(
        np.ascontiguousarray(image), (width, height), interpolation=interpolation.cv2_flag
    )


def zeros(like: np.ndarray, size: SizeLike) -> np.ndarray:
    """
    Blank canvas with the type and channels of like.

    Args:
        like: Reference matrix for dtype and channel count
        size: Canvas size

    Returns:
        Zero-filled NumPy array
    """
    width, height = Size.of(size).as_tuple()
    return np.zeros((height, width) + like.shape[2:], dtype=like.dtype)


def to_mask(array: np.ndarray) -> np.ndarray:
    """Convert any array to an 8-bit 0/255 mask."""
    mask = np.zeros(array.shape[:2], dtype=MaskConstants.DTYPE)
    nonzero = array != 0 if array.ndim == 2 else np.any(array != 0, axis=2)
    mask[nonzero] = MaskConstants.FOREGROUND
    return mask


def count_non_zero(mask: np.ndarray) -> int:
    """Number of non-zero pixels in a single-channel mask."""
    return int(np.count_nonzero(mask))


def _as_mask_of(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Bool and 0/255 masks mix freely; convert src to dst's mask type."""
    if src.dtype == dst.dtype:
        return src
    if dst.dtype == np.bool_:
        return src != 0
    return to_mask(src).astype(dst.dtype)


def bitwise_or_into(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """
    Bitwise-OR src into dst in place.

    Args:
        dst: Destination (may be a view into a larger canvas)
        src: Source of the same shape; a bool or 8-bit mask is converted
            to the destination's mask type

    Returns:
        dst
    """
    np.bitwise_or(dst, _as_mask_of(src, dst), out=dst)
    return dst


def bitwise_and_into(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """Bitwise-AND src into dst in place. Returns dst."""
    np.bitwise_and(dst, _as_mask_of(src, dst), out=dst)
    return dst


def copy_masked(src: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Copy src, zeroing every pixel not covered by mask.

    Args:
        src: Input image
        mask: Optional single-channel mask of the same height and width

    Returns:
        New array
    """
    if mask is None:
        return src.copy()
    result = np.zeros_like(src)
    covered = mask > 0
    result[covered] = src[covered]
    return result


def set_masked(
    dst: np.ndarray,
    value: Union[np.ndarray, float, Tuple[float, ...]],
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Set dst to value in place, only where mask is non-zero.

    Args:
        dst: Destination (may be a view)
        value: Matrix of the same shape, or a scalar / per-channel value
        mask: Optional single-channel mask

    Returns:
        dst
    """
    covered = slice(None) if mask is None else mask > 0
    if isinstance(value, np.ndarray):
        dst[covered] = value[covered]
    else:
        dst[covered] = value
    return dst


def add_masked(
    dst: np.ndarray,
    value: Union[np.ndarray, float, Tuple[float, ...]],
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Add value to dst in place where mask is non-zero, saturating like OpenCV.

    Args:
        dst: Destination (may be a view)
        value: Matrix of the same shape, or a scalar / per-channel value
        mask: Optional single-channel mask

    Returns:
        dst
    """
    addend = value if isinstance(value, np.ndarray) else np.full_like(dst, value)
    total = cv2.add(np.ascontiguousarray(dst), np.ascontiguousarray(addend, dtype=dst.dtype))
    return set_masked(dst, total, mask)
