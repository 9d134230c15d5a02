"""
Overlay rendering for segments.

Draws segment regions, masks, centers and labels on a copy of an image, so
the candidates an attention component is weighing can be inspected.
"""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from visual_field.core import segments as seg
from visual_field.core.constants import DisplayConstants
from visual_field.core.image import converters, processors
from visual_field.schemas import Region


class SegmentOverlayRenderer:
    """
    Renders segments as overlays on images.

    Provides consistent styling for bounding boxes, filled masks, center
    markers and labels.
    """

    # Default colors (BGR format)
    COLOR_REGION = (0, 255, 0)  # Green
    COLOR_MASK = (255, 255, 0)  # Cyan
    COLOR_CENTER = (0, 0, 255)  # Red

    def __init__(
        self,
        font=cv2.FONT_HERSHEY_SIMPLEX,
        font_scale: float = 0.5,
        thickness: int = 1,
        line_type=cv2.LINE_AA,
        mask_alpha: float = DisplayConstants.MASK_OVERLAY_ALPHA,
    ):
        """
        Initialize overlay renderer.

        Args:
            font: OpenCV font type
            font_scale: Font scale factor
            thickness: Line thickness for rectangles and text
            line_type: Line type for anti-aliasing
            mask_alpha: Opacity of filled masks
        """
        self.font = font
        self.font_scale = font_scale
        self.thickness = thickness
        self.line_type = line_type
        self.mask_alpha = mask_alpha

    def draw_bounding_box(
        self,
        image: np.ndarray,
        region: Region,
        color: Tuple[int, int, int] = COLOR_REGION,
        thickness: Optional[int] = None,
    ) -> np.ndarray:
        """
        Draw a region's outline on the image.

        The outline runs along the region's inclusive edges. Regions without
        a position and size are skipped.

        Args:
            image: Image to draw on (modified in place)
            region: Region to outline
            color: Box color in BGR format
            thickness: Line thickness (None = use default)

        Returns:
            image
        """
        if not region.is_positioned_rect():
            return image
        thickness = thickness or self.thickness
        pt1 = (int(region.min_x), int(region.min_y))
        pt2 = (int(region.max_x), int(region.max_y))
        cv2.rectangle(image, pt1, pt2, color, thickness, self.line_type)
        return image

    def draw_label(
        self,
        image: np.ndarray,
        text: str,
        x: int,
        y: int,
        color: Tuple[int, int, int] = COLOR_REGION,
    ) -> np.ndarray:
        """Draw a text label with its baseline at (x, y)."""
        cv2.putText(
            image,
            text,
            (int(x), int(y)),
            self.font,
            self.font_scale,
            color,
            self.thickness,
            self.line_type,
        )
        return image

    def draw_center_point(
        self,
        image: np.ndarray,
        region: Region,
        color: Tuple[int, int, int] = COLOR_CENTER,
        radius: int = 2,
    ) -> np.ndarray:
        """Draw a filled marker at the region's center, if it has one."""
        center = region.get_center()
        if center is None or center.x is None or center.y is None:
            return image
        cv2.circle(image, (int(center.x), int(center.y)), radius, color, -1, self.line_type)
        return image

    def draw_mask(
        self,
        image: np.ndarray,
        segment: seg.Segment,
        color: Tuple[int, int, int] = COLOR_MASK,
    ) -> np.ndarray:
        """
        Blend a segment's mask into the image.

        Args:
            image: BGR image to draw on (modified in place)
            segment: Segment with a mask and a positioned region
            color: Fill color in BGR format

        Returns:
            image
        """
        region = segment.region
        if segment.mask is None or not region.is_positioned_rect():
            return image
        clipped = region.crop(processors.image_size(image))
        if clipped is None:
            return image

        local = clipped.translate(-region.x, -region.y)
        mask = processors.submat(segment.mask, local) > 0
        target = processors.submat(image, clipped)
        fill = np.array(color, dtype=np.float32)
        blended = target[mask] * (1.0 - self.mask_alpha) + fill * self.mask_alpha
        target[mask] = blended.astype(image.dtype)
        return image

    def render_segments(
        self,
        image: np.ndarray,
        segments: Sequence[seg.Segment],
        use_base: bool = False,
        show_masks: bool = True,
        show_centers: bool = True,
        show_labels: bool = False,
    ) -> np.ndarray:
        """
        Render segments on a copy of an image.

        Args:
            image: Image the segments live in (grayscale or BGR)
            segments: Segments to draw
            use_base: Draw each segment's base segment (image is then the
                untransformed input)
            show_masks: Blend masks into the image
            show_centers: Mark region centers
            show_labels: Write each segment's index and area

        Returns:
            Annotated BGR image
        """
        result = converters.ensure_bgr(image)

        for index, segment in enumerate(segments):
            if use_base:
                segment = seg.base_segment(segment)
                if segment is None:
                    continue

            if show_masks:
                self.draw_mask(result, segment)
            self.draw_bounding_box(result, segment.region)
            if show_centers:
                self.draw_center_point(result, segment.region)
            if show_labels and segment.region.is_positioned():
                text = f"{index}: {seg.area(segment)}"
                self.draw_label(result, text, segment.region.x, segment.region.y - 3)

        return result

    def render_to_base64(
        self,
        image: np.ndarray,
        segments: Sequence[seg.Segment],
        format: str = DisplayConstants.DEFAULT_THUMBNAIL_FORMAT,
        **kwargs,
    ) -> str:
        """Render segments and encode the result as a base64 image."""
        return converters.to_base64(self.render_segments(image, segments, **kwargs), format)
