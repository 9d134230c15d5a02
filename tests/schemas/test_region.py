"""
Tests for Region geometry
"""

import pytest
from pydantic import ValidationError

from visual_field.schemas import Point, Region, distance, intersection, union


class TestRegionConstruction:
    """Test creating and converting regions"""

    def test_from_rect(self):
        """Test creation from an OpenCV bounding rect"""
        assert Region.from_rect((1, 2, 3, 4)) == Region(x=1, y=2, width=3, height=4)

    def test_from_points(self):
        """Test the bounding region of points"""
        region = Region.from_points(Point(x=1, y=2), Point(x=4, y=8))
        assert region == Region(x=1, y=2, width=4, height=7)

    def test_from_points_without_positions(self):
        """Test that points with no coordinates give no region"""
        assert Region.from_points(Point()) is None

    def test_to_dict_skips_unknown_fields(self):
        """Test that unknown fields are left out"""
        assert Region(x=1, width=3).to_dict() == {"x": 1, "width": 3}

    def test_from_dict(self):
        """Test creation from a dictionary"""
        region = Region.from_dict({"x": 5, "y": None, "height": 2})
        assert region.x == 5
        assert region.y is None
        assert region.height == 2

    def test_equality_ignores_cached_values(self):
        """Test that prepared and plain regions compare and hash equal"""
        plain = Region(x=0, y=0, width=10, height=10)
        prepared = plain.prepare()
        assert prepared == plain
        assert hash(prepared) == hash(plain)

    def test_regions_are_frozen(self):
        """Test that a region cannot be modified"""
        region = Region(x=0, y=0, width=10, height=10)
        with pytest.raises(ValidationError):
            region.x = 5


class TestRegionKinds:
    """Test region predicates"""

    def test_point(self):
        region = Region(x=3, y=4)
        assert region.is_point()
        assert region.is_positioned()
        assert not region.is_rect()

    def test_positioned_rect(self):
        region = Region(x=0, y=0, width=1, height=1)
        assert region.is_positioned_rect()
        assert not region.is_point()

    def test_size_only(self):
        region = Region(width=5, height=5)
        assert region.is_rect()
        assert not region.is_positioned()
        assert region.is_region()

    def test_empty(self):
        assert not Region().is_region()


class TestDerivedValues:
    """Test widths, edges, centers, areas and radii"""

    def test_center_formula(self):
        """Test center is x + (width - 1) / 2, truncated"""
        assert Region(x=0, y=0, width=10, height=10).get_center() == Point(x=4, y=4)
        assert Region(x=3, y=5, width=7, height=3).get_center() == Point(x=6, y=6)

    def test_get_width_of_a_coordinate(self):
        """Test a known coordinate counts as one pixel wide"""
        assert Region(x=5).get_width() == 1
        assert Region(x=5).get_height() is None
        assert Region().get_width() is None

    def test_inclusive_max(self):
        region = Region(x=10, y=5, width=20, height=1)
        assert region.max_x == 29
        assert region.max_y == 5

    def test_area(self):
        assert Region(width=4, height=5).get_area() == 20
        assert Region(x=1, width=4).get_area() is None

    def test_radius_with_one_axis(self):
        """Test radius falls back to the known axis"""
        assert Region(x=0, width=11).get_radius() == 5.0
        assert Region(x=0, y=0, width=11, height=5).get_radius() == 3.5

    def test_partial_center(self):
        """Test a center is computed along the known axis only"""
        center = Region(x=0, width=11).get_center()
        assert center.x == 5
        assert center.y is None

    def test_no_center(self):
        assert Region(width=3, height=3).get_center() is None

    def test_aspect_ratio(self):
        assert Region(width=20, height=10).aspect_ratio == 2.0
        assert Region(width=20).aspect_ratio is None


class TestCaching:
    """Test prepare/unprepare and cache refresh on transforms"""

    def test_prepare_caches_everything(self):
        region = Region(x=0, y=0, width=10, height=10).prepare()
        assert region.center == Point(x=4, y=4)
        assert region.area == 100
        assert region.radius == 4.5

    def test_unprepare(self):
        region = Region(x=0, y=0, width=10, height=10).prepare().unprepare()
        assert region.center is None
        assert region.area is None
        assert region.radius is None

    def test_translate_refreshes_cached_center(self):
        region = Region(x=0, y=0, width=10, height=10).prepare().translate(5, 5)
        assert region.center == Point(x=9, y=9)
        assert region.area == 100

    def test_translate_does_not_compute_uncached_values(self):
        region = Region(x=0, y=0, width=10, height=10).translate(5, 5)
        assert region.center is None

    def test_crop_refreshes_cached_values(self):
        region = Region(x=0, y=0, width=10, height=10).prepare().crop((5, 5))
        assert region.area == 25
        assert region.center == Point(x=2, y=2)

    def test_update_area(self):
        assert Region(width=2, height=3).update_area().area == 6


class TestTransforms:
    """Test translate, scale and crop"""

    def test_translate(self):
        region = Region(x=1, y=2, width=3, height=4).translate(10, 20)
        assert region == Region(x=11, y=22, width=3, height=4)

    def test_translate_leaves_unknown_axes(self):
        region = Region(x=1).translate(10, 20)
        assert region.x == 11
        assert region.y is None

    def test_translate_to(self):
        region = Region(x=1, y=2, width=3, height=4).translate_to(x=7)
        assert region == Region(x=7, y=2, width=3, height=4)

    def test_translate_center_to(self):
        region = Region(x=0, y=0, width=20, height=20).translate_center_to(50, 50)
        assert region == Region(x=40, y=40, width=20, height=20)

    def test_scale_up(self):
        region = Region(x=0, y=0, width=10, height=10).scale(2.0)
        assert region == Region(x=-5, y=-5, width=20, height=20)

    @pytest.mark.parametrize(
        "region",
        [
            Region(x=10, y=10, width=20, height=20),
            Region(x=0, y=3, width=7, height=9),
            Region(x=-4, y=100, width=1, height=2),
        ],
    )
    def test_unit_scale_is_nearly_identity(self, region):
        """Test scale(1.0) moves each axis by at most a pixel"""
        scaled = region.scale(1.0)
        assert scaled.width == region.width
        assert scaled.height == region.height
        assert abs(scaled.x - region.x) <= 1
        assert abs(scaled.y - region.y) <= 1

    def test_scale_refreshes_cached_area(self):
        region = Region(x=0, y=0, width=10, height=10).prepare().scale(0.5)
        assert region.area == 25


class TestCrop:
    """Test cropping regions to image bounds"""

    def test_crop_to_smaller_image(self):
        region = Region(x=10, y=10, width=20, height=20)
        assert region.crop((15, 15)) == Region(x=10, y=10, width=5, height=5)

    def test_crop_negative_offset(self):
        region = Region(x=-5, y=0, width=10, height=10)
        assert region.crop((20, 20)) == Region(x=0, y=0, width=5, height=10)

    def test_crop_outside_image(self):
        assert Region(x=20, y=0, width=5, height=5).crop((10, 10)) is None
        assert Region(x=-10, y=0, width=5, height=5).crop((10, 10)) is None

    @pytest.mark.parametrize(
        "region",
        [
            Region(x=10, y=10, width=20, height=20),
            Region(x=-5, y=-5, width=30, height=8),
            Region(x=3, y=3, width=2, height=2),
        ],
    )
    def test_crop_is_idempotent(self, region):
        once = region.crop((15, 15))
        assert once.crop((15, 15)) == once

    def test_crop_partial_region(self):
        """Test that only known axes are clipped"""
        assert Region(x=-3, width=5).crop((10, 10)) == Region(x=0, width=2)
        assert Region(x=-3).crop((10, 10)) is None

    def test_crop_unpositioned_region(self):
        region = Region(width=30, height=30)
        assert region.crop((10, 10)) == region


class TestComparisons:
    """Test contains and intersects"""

    def test_contains(self):
        outer = Region(x=0, y=0, width=10, height=10)
        inner = Region(x=2, y=2, width=3, height=3)
        assert outer.contains(inner)
        assert not inner.contains(outer)
        assert outer.contains(outer)

    def test_unknown_region_contains_everything(self):
        assert Region().contains(Region(x=5, y=5, width=1, height=1))

    def test_intersects(self):
        region = Region(x=0, y=0, width=10, height=10)
        assert region.intersects(Region(x=9, y=9, width=5, height=5))
        assert not region.intersects(Region(x=10, y=0, width=5, height=5))

    @pytest.mark.parametrize(
        "other",
        [
            Region(x=5, y=5, width=10, height=10),
            Region(x=9, y=0, width=1, height=1),
            Region(x=10, y=0, width=5, height=5),
            Region(x=30, y=30, width=2, height=2),
        ],
    )
    def test_intersects_iff_intersection_has_size(self, other):
        region = Region(x=0, y=0, width=10, height=10)
        overlap = intersection(region, other)
        has_size = overlap is not None and overlap.width > 0 and overlap.height > 0
        assert region.intersects(other) == has_size


class TestIntersectionUnion:
    """Test the variadic intersection and union"""

    def test_intersection(self):
        result = intersection(
            Region(x=0, y=0, width=10, height=10), Region(x=5, y=5, width=10, height=10)
        )
        assert result == Region(x=5, y=5, width=5, height=5)

    def test_intersection_disjoint(self):
        result = intersection(
            Region(x=0, y=0, width=10, height=10), Region(x=20, y=0, width=10, height=10)
        )
        assert result is None

    def test_intersection_with_partial_region(self):
        """Test that bounds unknown to one region come from the others"""
        result = intersection(Region(x=0, y=0, width=10, height=10), Region(x=3, width=2))
        assert result == Region(x=3, y=0, width=2, height=10)

    def test_union(self):
        result = union(
            Region(x=0, y=0, width=10, height=10), Region(x=20, y=5, width=5, height=10)
        )
        assert result == Region(x=0, y=0, width=25, height=15)

    def test_union_with_unpositioned_region(self):
        result = union(Region(x=0, y=0, width=10, height=10), Region(width=3, height=3))
        assert result.x is None
        assert result.y is None


class TestDistance:
    """Test the gap-based distance"""

    def test_horizontal_gap(self):
        r1 = Region(x=0, y=0, width=10, height=10)
        r2 = Region(x=20, y=0, width=10, height=10)
        assert distance(r1, r2) == 10.0
        assert r2.distance(r1) == 10.0

    def test_touching_regions(self):
        r1 = Region(x=0, y=0, width=10, height=10)
        assert distance(r1, Region(x=10, y=0, width=10, height=10)) == 0.0

    def test_overlapping_regions(self):
        r1 = Region(x=0, y=0, width=10, height=10)
        assert distance(r1, Region(x=5, y=5, width=10, height=10)) == 0.0

    def test_diagonal_gap(self):
        r1 = Region(x=0, y=0, width=10, height=10)
        r2 = Region(x=13, y=14, width=5, height=5)
        assert distance(r1, r2) == pytest.approx(5.0)
        assert r1.sq_distance(r2) == pytest.approx(25.0)

    def test_one_known_axis(self):
        assert distance(Region(x=0, width=10), Region(x=15, width=2)) == 5.0

    def test_nothing_known(self):
        assert distance(Region(), Region()) == 0.0
