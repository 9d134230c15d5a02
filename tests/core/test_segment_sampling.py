"""
Tests for sampling matrices through segments
"""

import numpy as np
import pytest

from visual_field.core import segment_sampling as sampling
from visual_field.core.segments import Segment
from visual_field.schemas import Region, Size


@pytest.fixture
def ramp():
    """10x10 matrix holding 0..99 row by row"""
    return np.arange(100, dtype=np.uint8).reshape(10, 10)


@pytest.fixture
def full_segment():
    """4x2 segment at (2, 3) with a full mask"""
    return Segment(
        region=Region(x=2, y=3, width=4, height=2), mask=np.full((2, 4), 255, dtype=np.uint8)
    )


@pytest.fixture
def first_column_segment():
    """4x2 segment at (2, 3) whose mask covers only its first column"""
    mask = np.zeros((2, 4), dtype=np.uint8)
    mask[:, 0] = 255
    return Segment(region=Region(x=2, y=3, width=4, height=2), mask=mask)


class TestReaders:
    """Test statistics over a segment"""

    def test_submat(self, ramp, full_segment):
        assert np.array_equal(sampling.submat(ramp, full_segment), ramp[3:5, 2:6])

    def test_copy(self, ramp, first_column_segment):
        copied = sampling.copy(ramp, first_column_segment)
        assert copied[0, 0] == 32
        assert copied[1, 0] == 42
        assert np.all(copied[:, 1:] == 0)

    def test_mean_value(self, ramp, full_segment, first_column_segment):
        assert sampling.mean_value(ramp, full_segment) == pytest.approx(ramp[3:5, 2:6].mean())
        assert sampling.mean_value(ramp, first_column_segment) == pytest.approx(37.0)

    def test_mean_value_color(self, full_segment):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[..., 2] = 200
        assert sampling.mean_value(image, full_segment) == pytest.approx((0.0, 0.0, 200.0))

    def test_min_max(self, ramp, full_segment, first_column_segment):
        assert sampling.max_value(ramp, full_segment) == 45
        assert sampling.min_value(ramp, full_segment) == 32
        assert sampling.max_value(ramp, first_column_segment) == 42

    def test_sum_elems(self, ramp, first_column_segment):
        assert sampling.sum_elems(ramp, first_column_segment) == 74

    def test_histogram(self, full_segment):
        src = np.full((10, 10), 10, dtype=np.uint8)
        hist = sampling.histogram(src, full_segment)
        assert hist.shape == (41,)
        assert hist[1] == pytest.approx(1.0)
        assert hist.sum() == pytest.approx(1.0)

    def test_zeros(self, full_segment):
        segment = Segment(
            region=full_segment.region,
            mask=full_segment.mask,
            input_size=Size(width=20, height=10),
        )
        canvas = sampling.zeros(segment)
        assert canvas.shape == (10, 20)
        assert canvas.dtype == np.uint8
        assert not canvas.any()

    def test_zeros_unknown_input(self, full_segment):
        assert sampling.zeros(full_segment) is None


class TestWriters:
    """Test in-place writes through a segment"""

    def test_set_to_value(self, first_column_segment):
        canvas = np.zeros((10, 10), dtype=np.uint8)
        result = sampling.set_to(canvas, first_column_segment, 7)
        assert result is canvas
        assert np.all(canvas[3:5, 2] == 7)
        assert np.count_nonzero(canvas) == 2

    def test_set_to_image(self):
        segment = Segment(
            region=Region(x=1, y=1, width=2, height=2),
            mask=np.full((2, 2), 255, dtype=np.uint8),
            image=np.full((2, 2), 9, dtype=np.uint8),
        )
        canvas = np.zeros((5, 5), dtype=np.uint8)
        sampling.set_to(canvas, segment)
        assert np.all(canvas[1:3, 1:3] == 9)
        assert np.count_nonzero(canvas) == 4

    def test_add_saturates(self, full_segment):
        canvas = np.full((10, 10), 250, dtype=np.uint8)
        sampling.add(canvas, full_segment, 10)
        assert np.all(canvas[3:5, 2:6] == 255)
        assert canvas[0, 0] == 250

    def test_bitwise_or(self, first_column_segment):
        canvas = np.zeros((10, 10), dtype=np.uint8)
        sampling.bitwise_or(canvas, first_column_segment)
        assert np.count_nonzero(canvas) == 2
        assert canvas[3, 2] == 255

    def test_bitwise_and(self, first_column_segment):
        canvas = np.full((10, 10), 255, dtype=np.uint8)
        sampling.bitwise_and(canvas, first_column_segment)
        assert canvas[3, 2] == 255
        assert canvas[3, 3] == 0
        assert canvas[0, 0] == 255

    def test_bitwise_or_without_mask(self):
        segment = Segment(region=Region(x=0, y=0, width=2, height=2))
        canvas = np.zeros((4, 4), dtype=np.uint8)
        sampling.bitwise_or(canvas, segment)
        assert np.count_nonzero(canvas) == 4
