"""
Region - possibly partial rectangles in 2D pixel space.

A region is some combination of x, y, width and height. Missing fields mean
"unknown", not zero: {x: 5} is a location known only along the x axis, and
{width: 10, height: 4} is a pure size with no position.

Derived values (center, area, radius) can be cached on a region with
prepare(). Transforms that change the geometry recompute any value that was
cached on their input; they never compute values that were not cached.
"""

import math
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from visual_field.schemas.common import Number, Point, Size

GEOMETRY_FIELDS = ("x", "y", "width", "height")


def _or_max(*values):
    values = [v for v in values if v is not None]
    return max(values) if values else None


def _or_min(*values):
    values = [v for v in values if v is not None]
    return min(values) if values else None


def _and_max(*values):
    if values and all(v is not None for v in values):
        return max(values)
    return None


def _and_min(*values):
    if values and all(v is not None for v in values):
        return min(values)
    return None


def _clip_axis(low: Number, extent: Number, bound: Number) -> Optional[Tuple[Number, Number]]:
    """Clip [low, low + extent) to [0, bound). Returns (low, extent) or None."""
    high = low + extent - 1
    new_low = max(low, 0)
    new_high = min(high, bound - 1)
    if new_high < new_low:
        return None
    return new_low, new_high - new_low + 1


def _axis_gap(
    low1: Optional[Number], size1: Optional[Number], low2: Optional[Number], size2: Optional[Number]
) -> Optional[float]:
    """Number of empty pixels between two spans, 0 if they touch or overlap."""
    if low1 is None or size1 is None or low2 is None or size2 is None:
        return None
    return max(low2 - (low1 + size1), low1 - (low2 + size2), 0.0)


class Region(BaseModel):
    """
    Immutable rectangle or point descriptor.

    Equality and hashing only consider x, y, width and height; cached derived
    values are ignored.
    """

    model_config = ConfigDict(frozen=True)

    x: Optional[Number] = None
    y: Optional[Number] = None
    width: Optional[Number] = None
    height: Optional[Number] = None

    # Cached derived values
    center: Optional[Point] = None
    area: Optional[Number] = None
    radius: Optional[float] = None

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return self.geometry() == other.geometry()

    def __hash__(self) -> int:
        return hash(self.geometry())

    # ------------------------------------------------------------------
    # Construction and conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_rect(cls, rect: Sequence[Number]) -> "Region":
        """Create a Region from an (x, y, width, height) sequence, e.g. cv2.boundingRect."""
        x, y, width, height = rect
        return cls(x=int(x), y=int(y), width=int(width), height=int(height))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        """Create a Region from a dictionary. Missing keys stay unknown."""
        return cls(**{k: data[k] for k in GEOMETRY_FIELDS if data.get(k) is not None})

    @classmethod
    def from_points(cls, *points: Point) -> Optional["Region"]:
        """Smallest region enclosing the points, or None if no point has a position."""
        xs = [p.x for p in points if p.x is not None]
        ys = [p.y for p in points if p.y is not None]
        if not xs and not ys:
            return None
        update = {}
        if xs:
            update["x"] = min(xs)
            update["width"] = max(xs) - min(xs) + 1
        if ys:
            update["y"] = min(ys)
            update["height"] = max(ys) - min(ys) + 1
        return cls(**update)

    def to_dict(self) -> Dict[str, Number]:
        """Convert to a dictionary holding only the known geometry fields."""
        return {k: v for k, v in zip(GEOMETRY_FIELDS, self.geometry()) if v is not None}

    def geometry(self) -> Tuple[Optional[Number], ...]:
        """Return (x, y, width, height)."""
        return (self.x, self.y, self.width, self.height)

    # ------------------------------------------------------------------
    # Kind of region
    # ------------------------------------------------------------------

    def is_point(self) -> bool:
        """True if the region has x and y but no width or height."""
        return (
            self.x is not None
            and self.y is not None
            and self.width is None
            and self.height is None
        )

    def is_rect(self) -> bool:
        """True if the region has width and height."""
        return self.width is not None and self.height is not None

    def is_positioned(self) -> bool:
        """True if the region has an x and y location."""
        return self.x is not None and self.y is not None

    def is_positioned_rect(self) -> bool:
        """True if x, y, width and height are all known."""
        return all(v is not None for v in self.geometry())

    def is_region(self) -> bool:
        """True if anything at all is known about this region."""
        return self.x is not None or self.y is not None or self.is_rect()

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def get_width(self) -> Optional[Number]:
        """Width, or 1 if only the x coordinate is known."""
        if self.width is not None:
            return self.width
        return 1 if self.x is not None else None

    def get_height(self) -> Optional[Number]:
        """Height, or 1 if only the y coordinate is known."""
        if self.height is not None:
            return self.height
        return 1 if self.y is not None else None

    @property
    def diff_x(self) -> Optional[Number]:
        """Difference between the min and max x values."""
        width = self.get_width()
        return None if width is None else width - 1

    @property
    def diff_y(self) -> Optional[Number]:
        """Difference between the min and max y values."""
        height = self.get_height()
        return None if height is None else height - 1

    @property
    def min_x(self) -> Optional[Number]:
        return self.x

    @property
    def min_y(self) -> Optional[Number]:
        return self.y

    @property
    def max_x(self) -> Optional[Number]:
        """Inclusive right edge."""
        if self.x is None or self.diff_x is None:
            return None
        return self.x + self.diff_x

    @property
    def max_y(self) -> Optional[Number]:
        """Inclusive bottom edge."""
        if self.y is None or self.diff_y is None:
            return None
        return self.y + self.diff_y

    @property
    def radius_x(self) -> Optional[float]:
        diff = self.diff_x
        return None if diff is None else diff / 2.0

    @property
    def radius_y(self) -> Optional[float]:
        diff = self.diff_y
        return None if diff is None else diff / 2.0

    @property
    def center_x(self) -> Optional[int]:
        """Center x, from the cached center if present."""
        if self.center is not None and self.center.x is not None:
            return self.center.x
        return self._compute_center_x()

    @property
    def center_y(self) -> Optional[int]:
        """Center y, from the cached center if present."""
        if self.center is not None and self.center.y is not None:
            return self.center.y
        return self._compute_center_y()

    @property
    def aspect_ratio(self) -> Optional[float]:
        """width / height"""
        if self.width is None or not self.height:
            return None
        return self.width / self.height * 1.0

    def _compute_center_x(self) -> Optional[int]:
        if self.x is None or self.diff_x is None:
            return None
        return int(self.x + self.diff_x / 2.0)

    def _compute_center_y(self) -> Optional[int]:
        if self.y is None or self.diff_y is None:
            return None
        return int(self.y + self.diff_y / 2.0)

    def _compute_center(self) -> Optional[Point]:
        x = self._compute_center_x()
        y = self._compute_center_y()
        if x is None and y is None:
            return None
        return Point(x=x, y=y)

    def _compute_radius(self) -> Optional[float]:
        rx = self.radius_x
        ry = self.radius_y
        if rx is not None and ry is not None:
            return (rx + ry) / 2.0
        return rx if rx is not None else ry

    def _compute_area(self) -> Optional[Number]:
        if self.width is None or self.height is None:
            return None
        return self.width * self.height

    def get_center(self) -> Optional[Point]:
        """Cached center, or the center computed from the geometry."""
        return self.center if self.center is not None else self._compute_center()

    def get_radius(self) -> Optional[float]:
        """Cached radius, or the average of radius_x and radius_y (whichever are known)."""
        return self.radius if self.radius is not None else self._compute_radius()

    def get_area(self) -> Optional[Number]:
        """Cached area, or width * height."""
        return self.area if self.area is not None else self._compute_area()

    # ------------------------------------------------------------------
    # Caching
    # ------------------------------------------------------------------

    def prepare(self) -> "Region":
        """Return a copy with center, radius and area cached."""
        return self.model_copy(
            update={
                "center": self.get_center(),
                "radius": self.get_radius(),
                "area": self.get_area(),
            }
        )

    def unprepare(self) -> "Region":
        """Return a copy without cached values."""
        return self.model_copy(update={"center": None, "radius": None, "area": None})

    def update_center(self) -> "Region":
        return self.model_copy(update={"center": self._compute_center()})

    def update_area(self) -> "Region":
        return self.model_copy(update={"area": self._compute_area()})

    def update_radius(self) -> "Region":
        return self.model_copy(update={"radius": self._compute_radius()})

    def _refresh(
        self, source: "Region", center: bool = False, area: bool = False, radius: bool = False
    ) -> "Region":
        """Recompute the requested cached values that were present on source."""
        region = self
        if center and source.center is not None:
            region = region.update_center()
        if area and source.area is not None:
            region = region.update_area()
        if radius and source.radius is not None:
            region = region.update_radius()
        return region

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def translate(self, dx: Optional[Number] = None, dy: Optional[Number] = None) -> "Region":
        """
        Move the region by (dx, dy).

        Either delta may be omitted, and an axis with no known coordinate is
        left alone.
        """
        update = {}
        if self.x is not None and dx is not None:
            update["x"] = self.x + dx
        if self.y is not None and dy is not None:
            update["y"] = self.y + dy
        return self.model_copy(update=update)._refresh(self, center=True)

    def translate_to(self, x: Optional[Number] = None, y: Optional[Number] = None) -> "Region":
        """Move the upper left corner to (x, y); either coordinate may be omitted."""
        update = {
            "x": x if x is not None else self.x,
            "y": y if y is not None else self.y,
        }
        return self.model_copy(update=update)._refresh(self, center=True)

    def translate_center_to(
        self, x: Optional[Number] = None, y: Optional[Number] = None
    ) -> "Region":
        """Move the center to (x, y). Axes whose radius is unknown are left alone."""
        update = {}
        radius_x = self.radius_x
        radius_y = self.radius_y
        if radius_x is not None and x is not None:
            update["x"] = int(x - radius_x)
        if radius_y is not None and y is not None:
            update["y"] = int(y - radius_y)
        return self.model_copy(update=update)._refresh(self, center=True)

    def scale(self, factor: float) -> "Region":
        """
        Scale width and height by factor, keeping the region centered at the same point.

        Args:
            factor: Scale factor (e.g., 1.5 for 150%)

        Returns:
            New scaled Region
        """
        width = self.get_width()
        height = self.get_height()
        new_w = None if width is None else width * factor
        new_h = None if height is None else height * factor
        center_x = self.center_x
        center_y = self.center_y

        update = {
            "width": None if new_w is None else int(new_w),
            "height": None if new_h is None else int(new_h),
            "x": None,
            "y": None,
        }
        if center_x is not None and new_w is not None:
            update["x"] = int(center_x - (new_w - 1) / 2.0)
        if center_y is not None and new_h is not None:
            update["y"] = int(center_y - (new_h - 1) / 2.0)

        return self.model_copy(update=update)._refresh(self, area=True, radius=True)

    def crop(self, image_size: Union[Size, Tuple[int, int]]) -> Optional["Region"]:
        """
        Clip the region so that it fits on an image of the given size.

        Axes whose coordinate is unknown are not constrained.

        Args:
            image_size: Image size as Size or (width, height)

        Returns:
            Cropped region, or None if nothing of the region lies on the image
        """
        image_width, image_height = Size.of(image_size).as_tuple()
        update = {}

        if self.x is not None:
            clipped = _clip_axis(self.x, self.get_width(), image_width)
            if clipped is None:
                return None
            update["x"] = clipped[0]
            if self.width is not None:
                update["width"] = clipped[1]

        if self.y is not None:
            clipped = _clip_axis(self.y, self.get_height(), image_height)
            if clipped is None:
                return None
            update["y"] = clipped[0]
            if self.height is not None:
                update["height"] = clipped[1]

        return self.model_copy(update=update)._refresh(
            self, center=True, area=True, radius=True
        )

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    def contains(self, other: "Region") -> bool:
        """
        True if this region contains (or equals) other.

        An axis on which this region has no coordinate does not constrain.
        """

        def axis(low1, high1, low2, high2) -> bool:
            if low1 is None:
                return True
            return low2 is not None and low1 <= low2 and high1 >= high2

        return axis(self.min_x, self.max_x, other.min_x, other.max_x) and axis(
            self.min_y, self.max_y, other.min_y, other.max_y
        )

    def intersects(self, other: "Region") -> bool:
        """True if the regions overlap. Unknown axes never separate two regions."""

        def separated(low1, high1, low2, high2) -> bool:
            if None in (low1, high1, low2, high2):
                return False
            return high1 < low2 or high2 < low1

        return not (
            separated(self.min_x, self.max_x, other.min_x, other.max_x)
            or separated(self.min_y, self.max_y, other.min_y, other.max_y)
        )

    def _gaps(self, other: "Region") -> Tuple[Optional[float], Optional[float]]:
        dx = _axis_gap(self.x, self.get_width(), other.x, other.get_width())
        dy = _axis_gap(self.y, self.get_height(), other.y, other.get_height())
        return dx, dy

    def distance(self, other: "Region") -> float:
        """
        Distance between the nearest edges of two regions.

        The gap along an axis counts the empty pixels between the regions, so
        touching or overlapping regions are 0 apart on that axis. When both
        axes have a gap the result is Euclidean; otherwise it is the larger gap.
        """
        dx, dy = self._gaps(other)
        if dx is not None and dy is not None and dx > 0 and dy > 0:
            return math.sqrt(dx * dx + dy * dy)
        return float(_or_max(dx, dy, 0.0))

    def sq_distance(self, other: "Region") -> float:
        """Square of distance(), without the square root."""
        dx, dy = self._gaps(other)
        if dx is not None and dy is not None and dx > 0 and dy > 0:
            return float(dx * dx + dy * dy)
        gap = _or_max(dx, dy)
        return float(_or_max(None if gap is None else gap ** 2, 0.0))


def intersection(*regions: Region) -> Optional[Region]:
    """
    Region describing the intersection of one or more regions.

    A bound that is unknown for some region is taken from the regions that
    know it. Returns None when the regions do not overlap.
    """
    min_x = _or_max(*(r.min_x for r in regions))
    max_x = _or_min(*(r.max_x for r in regions))
    min_y = _or_max(*(r.min_y for r in regions))
    max_y = _or_min(*(r.max_y for r in regions))

    if min_x is not None and max_x is not None and min_x > max_x:
        return None
    if min_y is not None and max_y is not None and min_y > max_y:
        return None

    if min_x is not None and max_x is not None:
        width = max_x - min_x + 1
    else:
        width = _or_min(*(r.get_width() for r in regions))
    if min_y is not None and max_y is not None:
        height = max_y - min_y + 1
    else:
        height = _or_min(*(r.get_height() for r in regions))

    return Region(x=min_x, y=min_y, width=width, height=height)


def union(*regions: Region) -> Region:
    """
    Region describing the bounding envelope of one or more regions.

    A bound that is unknown for any region is unknown in the result.
    """
    min_x = _and_min(*(r.min_x for r in regions))
    max_x = _and_max(*(r.max_x for r in regions))
    min_y = _and_min(*(r.min_y for r in regions))
    max_y = _and_max(*(r.max_y for r in regions))

    if min_x is not None and max_x is not None:
        width = max_x - min_x + 1
    else:
        width = _and_max(*(r.get_width() for r in regions))
    if min_y is not None and max_y is not None:
        height = max_y - min_y + 1
    else:
        height = _and_max(*(r.get_height() for r in regions))

    return Region(x=min_x, y=min_y, width=width, height=height)


def distance(r1: Region, r2: Region) -> float:
    """Distance between two regions (see Region.distance)."""
    return r1.distance(r2)

