"""
Tests for building segments from contours
"""

import cv2
import numpy as np
import pytest

from visual_field.core.enums import ContourRetrieval
from visual_field.core.segments import Segment
from visual_field.schemas import Region, Size
from visual_field.vision import contours


def node(area, size, children=()):
    """Segment with a given area and square size, for hierarchy tests"""
    return Segment(
        region=Region(x=0, y=0, width=size, height=size), area=area, subsegments=tuple(children)
    )


@pytest.fixture
def square_binary():
    """Binary image with one filled 40x40 square at (20, 20)"""
    binary = np.zeros((100, 100), dtype=np.uint8)
    cv2.rectangle(binary, (20, 20), (59, 59), 255, -1)
    return binary


@pytest.fixture
def nested_binary():
    """Binary image with a square ring around a smaller filled square"""
    binary = np.zeros((100, 100), dtype=np.uint8)
    cv2.rectangle(binary, (10, 10), (89, 89), 255, -1)
    cv2.rectangle(binary, (30, 30), (69, 69), 0, -1)
    cv2.rectangle(binary, (40, 40), (59, 59), 255, -1)
    return binary


class TestContourToSegment:
    """Test single contour conversion"""

    def test_square(self, square_binary):
        found, _ = cv2.findContours(square_binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        segment = contours.contour_to_segment(found[0], square_binary.shape)
        assert segment.region == Region(x=20, y=20, width=40, height=40)
        assert segment.mask.shape == (40, 40)
        assert np.all(segment.mask == 255)
        assert segment.area == pytest.approx(39 * 39)
        assert segment.input_size == Size(width=100, height=100)


class TestFindSegments:
    """Test contour hierarchies"""

    def test_external(self, square_binary):
        segments = contours.find_segments(square_binary)
        assert len(segments) == 1
        assert segments[0].subsegments == ()

    def test_empty_image(self):
        assert contours.find_segments(np.zeros((10, 10), dtype=np.uint8)) == []

    def test_tree(self, nested_binary):
        roots = contours.find_segments(nested_binary, ContourRetrieval.TREE)
        assert len(roots) == 1
        assert roots[0].region == Region(x=10, y=10, width=80, height=80)
        assert len(roots[0].subsegments) == 1
        assert len(roots[0].subsegments[0].subsegments) == 1
        inner = roots[0].subsegments[0].subsegments[0]
        assert inner.region == Region(x=40, y=40, width=20, height=20)

    def test_list_is_flat(self, nested_binary):
        segments = contours.find_segments(nested_binary, ContourRetrieval.LIST)
        assert len(segments) == 3
        assert all(s.subsegments == () for s in segments)


class TestSubsegments:
    """Test pruning contour hierarchies"""

    def test_get_subsegments_skips_same_outline(self):
        grandchildren = [node(20, 5), node(30, 6)]
        small = node(10, 3)
        parent = node(100, 10, [node(90, 9, grandchildren), small])
        assert contours.get_subsegments(parent, 0.75) == grandchildren + [small]

    def test_get_subsegments_uses_settings(self, monkeypatch):
        monkeypatch.setenv("VISUAL_FIELD_SEGMENTS__MAX_INNER_CONTOUR_RATIO", "0.95")
        child = node(90, 9)
        assert contours.get_subsegments(node(100, 10, [child])) == [child]

    def test_is_correct_size(self):
        params = contours.SubsegmentParams(
            min_segment_area=50, max_segment_area=500, min_segment_length=5, max_segment_length=30
        )
        assert contours.is_correct_size(node(100, 10), params)
        assert not contours.is_correct_size(node(10, 10), params)
        assert not contours.is_correct_size(node(100, 40), params)
        assert not contours.is_correct_size(Segment(region=Region(x=0, y=0)), params)

    def test_get_smallest_subsegments(self):
        fitting = node(600, 30)
        tiny = node(100, 10)
        parent = node(1000, 40, [fitting, tiny])
        result = contours.get_smallest_subsegments(parent, contours.SubsegmentParams())
        assert len(result) == 1
        assert result[0].region == fitting.region

    def test_keeps_parent_when_children_are_small(self):
        parent = node(1000, 40, [node(100, 10)])
        result = contours.get_smallest_subsegments(parent)
        assert len(result) == 1
        assert result[0].area == 1000
        assert len(result[0].subsegments) == 1

    def test_params_default_from_settings(self, monkeypatch):
        monkeypatch.setenv("VISUAL_FIELD_SEGMENTS__MIN_SEGMENT_AREA", "42")
        assert contours.SubsegmentParams().min_segment_area == 42.0


class TestExtractSegments:
    """Test the whole construction path"""

    def test_setup_segment(self, nested_binary):
        image = np.full((100, 100, 3), 7, dtype=np.uint8)
        root = contours.find_segments(nested_binary, ContourRetrieval.TREE)[0]
        prepared = contours.setup_segment(root, image)
        assert prepared.input is image
        assert prepared.image.shape == (80, 80, 3)
        assert prepared.region.center is not None
        assert prepared.subsegments[0].image is not None

    def test_extract_tree(self, nested_binary):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        segments = contours.extract_segments(nested_binary, image, ContourRetrieval.TREE)
        assert len(segments) == 1
        assert segments[0].image.shape[:2] == segments[0].mask.shape

    def test_extract_external(self, square_binary):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        segments = contours.extract_segments(square_binary, image)
        assert [s.region for s in segments] == [Region(x=20, y=20, width=40, height=40)]
