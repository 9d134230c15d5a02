"""
Constants and configuration values for the visual field geometry library.
Centralizes all magic numbers and default thresholds.
"""


# Mask Constants
class MaskConstants:
    """Constants related to segment masks."""

    # Mask pixel values (OpenCV 8UC1 convention)
    FOREGROUND = 255
    DTYPE = "uint8"


# Segment Constants
class SegmentConstants:
    """Constants for segment construction and subsegment filtering."""

    # If an inner contour covers more than this fraction of its parent's
    # area, it is treated as the same outline and skipped
    DEFAULT_MAX_INNER_CONTOUR_RATIO = 0.75

    # Size limits for segments taken from a contour hierarchy
    DEFAULT_MIN_SEGMENT_AREA = 500.0
    DEFAULT_MAX_SEGMENT_AREA = 25000.0
    DEFAULT_MIN_SEGMENT_LENGTH = 5.0
    DEFAULT_MAX_SEGMENT_LENGTH = 2500.0


# Transform Constants
class TransformConstants:
    """Constants for viewing transforms."""

    DEFAULT_MASK_INTERPOLATION = "nearest"
    DEFAULT_IMAGE_INTERPOLATION = "nearest"

    # Scale reported for a chain without resize operations
    IDENTITY_SCALE = 1.0


# Sampling Constants
class SamplingConstants:
    """Constants for segment-local image statistics."""

    DEFAULT_HISTOGRAM_BINS = 41
    HISTOGRAM_RANGE = (0.0, 256.0)


# Display Constants
class DisplayConstants:
    """Constants for segment overlays."""

    DEFAULT_THUMBNAIL_FORMAT = "PNG"
    MASK_OVERLAY_ALPHA = 0.4
