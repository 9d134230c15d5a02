"""
Pytest configuration and fixtures for visual field tests
"""

import base64
import io

import cv2
import numpy as np
import pytest
from PIL import Image

from visual_field.config import get_settings
from visual_field.core import view_transform as vt
from visual_field.core.segments import Segment
from visual_field.schemas import Region


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make every test read settings from its own environment"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def decode_base64():
    """Decode a base64 thumbnail into an RGB (or grayscale) array"""

    def decode(encoded):
        return np.array(Image.open(io.BytesIO(base64.b64decode(encoded))))

    return decode


@pytest.fixture
def test_image():
    """Create a test image for testing"""
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    # Add some content
    cv2.rectangle(image, (100, 100), (300, 300), (255, 255, 255), -1)
    cv2.circle(image, (450, 350), 50, (128, 128, 128), -1)
    return image


@pytest.fixture
def full_mask():
    """20x20 mask with every pixel set"""
    return np.full((20, 20), 255, dtype=np.uint8)


@pytest.fixture
def square_segment(full_mask):
    """20x20 segment at (10, 10) with a full mask"""
    return Segment(region=Region(x=10, y=10, width=20, height=20), mask=full_mask)


@pytest.fixture
def resize_crop_chain():
    """Halve a 100x100 image, then crop 20x20 at (10, 10)"""
    chain = vt.add_resize((100, 100), (50, 50))
    return vt.add_submat(chain, Region(x=10, y=10, width=20, height=20))


@pytest.fixture
def half_size_chain():
    """Halve a 100x100 image"""
    return vt.add_resize((100, 100), 0.5)
