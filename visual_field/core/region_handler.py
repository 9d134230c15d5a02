"""
Region handler for the visual field library.

Provides validation of regions against image bounds and extraction of the
pixels a region covers. Geometric operations (intersection, union, crop, etc.)
are on the Region model itself.
"""

import logging
from typing import Dict, Optional, Tuple, Union

import numpy as np

from visual_field.core.image import processors
from visual_field.schemas import Region

logger = logging.getLogger(__name__)


class RegionHandler:
    """
    Handler for region validation and image extraction operations.

    - validate_region: Validate a region against image bounds and size constraints
    - extract_region: Extract the rectangular pixels of a region that fits the image
    """

    @staticmethod
    def validate_region(
        region: Union[Region, Dict],
        image_shape: Optional[Tuple[int, ...]] = None,
        min_size: int = 1,
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate region parameters.

        Args:
            region: Region object or dictionary
            image_shape: Optional image shape (height, width, ...)
            min_size: Minimum width/height

        Returns:
            Tuple of (is_valid, error_message)
        """
        if isinstance(region, dict):
            region = Region.from_dict(region)

        if not region.is_positioned_rect():
            return False, f"Region is not a positioned rectangle: {region.to_dict()}"

        if region.width < min_size or region.height < min_size:
            return False, f"Region too small: {region.width}x{region.height} (min: {min_size})"

        if region.x < 0 or region.y < 0:
            return False, f"Region has negative coordinates: ({region.x}, {region.y})"

        if image_shape:
            img_height = image_shape[0]
            img_width = image_shape[1] if len(image_shape) > 1 else image_shape[0]

            if region.x + region.width > img_width or region.y + region.height > img_height:
                return (
                    False,
                    f"Region {region.to_dict()} exceeds image bounds {img_width}x{img_height}",
                )

        return True, None

    @staticmethod
    def extract_region(image: np.ndarray, region: Union[Region, Dict]) -> Optional[np.ndarray]:
        """
        Extract the pixels of a region from an image.

        Args:
            image: Input image
            region: Region object or dictionary

        Returns:
            Copy of the extracted pixels, or None if the region does not fit
        """
        if isinstance(region, dict):
            region = Region.from_dict(region)

        is_valid, error_msg = RegionHandler.validate_region(region, image.shape)
        if not is_valid:
            logger.warning(f"Invalid region: {error_msg}")
            return None

        return processors.submat(image, region).copy()
