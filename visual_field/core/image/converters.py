"""
Image format conversion utilities.

Handles conversions used when segments are reported or displayed:
- NumPy arrays (OpenCV BGR format) to PIL Images (RGB format)
- Base64 encoded snapshots (encoding only)
- Grayscale/color conversions
"""

import base64
import io
import logging

import cv2
import numpy as np
from PIL import Image

from visual_field.core.constants import DisplayConstants

logger = logging.getLogger(__name__)


def numpy_to_pil(image: np.ndarray) -> Image.Image:
    """
    Convert NumPy array (OpenCV format) to PIL Image.

    Args:
        image: NumPy array in BGR format (OpenCV), or a single-channel matrix

    Returns:
        PIL Image in RGB (or L) format
    """
    if image.dtype == np.bool_:
        image = image.astype(np.uint8) * 255

    if len(image.shape) == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    return Image.fromarray(np.ascontiguousarray(image))


def to_base64(image: np.ndarray, format: str = DisplayConstants.DEFAULT_THUMBNAIL_FORMAT) -> str:
    """
    Convert image to base64 string.

    Args:
        image: Input image (NumPy array)
        format: Image format (PNG, JPEG, etc.)

    Returns:
        Base64 encoded string
    """
    try:
        buffer = io.BytesIO()
        numpy_to_pil(image).save(buffer, format=format)
        return base64.b64encode(buffer.getvalue()).decode("utf-8")
    except Exception as e:
        logger.error(f"Failed to convert image to base64: {e}")
        raise


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    """
    Ensure image is in BGR format (convert from grayscale if needed).

    Args:
        image: Input image (grayscale or BGR)

    Returns:
        Image in BGR format
    """
    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image.copy()
