"""
Enumerations shared across the library.
"""

from enum import Enum

import cv2


class Interpolation(str, Enum):
    """Resampling method used when resizing masks and images."""

    NEAREST = "nearest"
    LINEAR = "linear"
    AREA = "area"
    CUBIC = "cubic"

    @property
    def cv2_flag(self) -> int:
        """OpenCV interpolation flag for this method."""
        return {
            Interpolation.NEAREST: cv2.INTER_NEAREST,
            Interpolation.LINEAR: cv2.INTER_LINEAR,
            Interpolation.AREA: cv2.INTER_AREA,
            Interpolation.CUBIC: cv2.INTER_CUBIC,
        }[self]


class ContourRetrieval(str, Enum):
    """Which contours to keep when building segments from an edge image."""

    EXTERNAL = "external"
    LIST = "list"
    TREE = "tree"

    @property
    def cv2_flag(self) -> int:
        """OpenCV retrieval mode for this option."""
        return {
            ContourRetrieval.EXTERNAL: cv2.RETR_EXTERNAL,
            ContourRetrieval.LIST: cv2.RETR_LIST,
            ContourRetrieval.TREE: cv2.RETR_TREE,
        }[self]

