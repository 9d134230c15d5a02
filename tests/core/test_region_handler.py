"""
Tests for RegionHandler
"""

import numpy as np

from visual_field.core.region_handler import RegionHandler
from visual_field.schemas import Region


class TestValidateRegion:
    """Test region validation against image bounds"""

    def test_valid(self):
        is_valid, error = RegionHandler.validate_region(
            Region(x=0, y=0, width=10, height=10), image_shape=(20, 20, 3)
        )
        assert is_valid
        assert error is None

    def test_from_dict(self):
        is_valid, _ = RegionHandler.validate_region({"x": 1, "y": 1, "width": 5, "height": 5})
        assert is_valid

    def test_not_positioned(self):
        is_valid, error = RegionHandler.validate_region(Region(width=5, height=5))
        assert not is_valid
        assert "positioned" in error

    def test_too_small(self):
        is_valid, error = RegionHandler.validate_region(
            Region(x=0, y=0, width=2, height=2), min_size=3
        )
        assert not is_valid
        assert "too small" in error

    def test_negative_coordinates(self):
        is_valid, error = RegionHandler.validate_region(Region(x=-1, y=0, width=5, height=5))
        assert not is_valid
        assert "negative" in error

    def test_exceeds_bounds(self):
        is_valid, error = RegionHandler.validate_region(
            Region(x=15, y=0, width=10, height=10), image_shape=(20, 20)
        )
        assert not is_valid
        assert "exceeds" in error


class TestExtractRegion:
    """Test pixel extraction"""

    def test_extract(self, test_image):
        pixels = RegionHandler.extract_region(test_image, Region(x=150, y=150, width=10, height=10))
        assert pixels.shape == (10, 10, 3)
        assert np.all(pixels == 255)

    def test_extract_is_a_copy(self):
        image = np.zeros((10, 10), dtype=np.uint8)
        pixels = RegionHandler.extract_region(image, Region(x=0, y=0, width=5, height=5))
        pixels[:] = 1
        assert not image.any()

    def test_rejects_overrun(self, test_image):
        pixels = RegionHandler.extract_region(
            test_image, Region(x=630, y=470, width=20, height=20)
        )
        assert pixels is None

    def test_rejects_outside(self, test_image):
        assert (
            RegionHandler.extract_region(test_image, Region(x=700, y=0, width=5, height=5))
            is None
        )
